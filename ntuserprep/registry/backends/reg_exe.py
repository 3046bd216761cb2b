# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/backends/reg_exe.py
"""
Live Windows backend.

`reg.exe load` / `reg.exe unload` mount the hive file under HKU (or HKLM);
values are written through winreg while the hive is loaded. Writes land in
the hive immediately, so unload has nothing to commit.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from ...core.exceptions import Fatal
from ...core.utils import U
from .base import HiveBackend, join_key

Runner = Callable[[List[str]], subprocess.CompletedProcess]
REG_EXE_TIMEOUT = 120


class RegExeBackend(HiveBackend):
    name = "reg"

    def __init__(
        self,
        logger: logging.Logger,
        *,
        runner: Optional[Runner] = None,
        winreg_module: Any = None,
        reg_exe: str = "reg.exe",
        timeout: Optional[int] = REG_EXE_TIMEOUT,
    ):
        super().__init__(logger)
        self._runner = runner
        self._winreg_mod = winreg_module
        self.reg_exe = reg_exe
        self.timeout = timeout

    # -- plumbing ----------------------------------------------------------

    def _winreg(self) -> Any:
        if self._winreg_mod is None:
            if not U.is_windows():
                raise Fatal(2, "The 'reg' backend only runs on Windows; use --backend hivex for offline edits")
            import winreg

            self._winreg_mod = winreg
        return self._winreg_mod

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        if self._runner is not None:
            return self._runner(cmd)
        # Failures come back as a status: exit code, 124 timed out, 127 not runnable.
        try:
            return U.run_cmd(self.logger, cmd, capture=True, timeout=self.timeout, fatal=True)
        except Fatal as e:
            return subprocess.CompletedProcess(cmd, e.code, stdout="", stderr=e.msg)

    def _split(self, root: str, path: str = "") -> Tuple[Any, str]:
        w = self._winreg()
        head, _, sub = root.partition("\\")
        hkey = w.HKEY_LOCAL_MACHINE if head.upper() == "HKLM" else w.HKEY_USERS
        return hkey, join_key(sub, path)

    def _reg(self, verb: str, *args: str) -> int:
        cp = self._run([self.reg_exe, verb, *args])
        out = " ".join(x.strip() for x in (cp.stdout or "", cp.stderr or "") if x and x.strip())
        if cp.returncode != 0:
            self.logger.error("reg %s %s failed (rc=%s): %s", verb, " ".join(args), cp.returncode, out or "no output")
        else:
            self.logger.debug("reg %s %s: %s", verb, " ".join(args), out or "ok")
        return int(cp.returncode)

    # -- HiveBackend -------------------------------------------------------

    def load(self, hive_file: Path, root: str) -> int:
        return self._reg("load", root, str(hive_file))

    def unload(self, root: str, *, commit: bool = True) -> int:
        if not commit:
            self.logger.warning("reg backend writes are immediate; unloading %s without a discard step", root)
        return self._reg("unload", root)

    def is_loaded(self, root: str) -> bool:
        w = self._winreg()
        hkey, sub = self._split(root)
        try:
            with w.OpenKey(hkey, sub, 0, w.KEY_READ):
                return True
        except FileNotFoundError:
            return False

    def ensure_key(self, root: str, path: str) -> List[str]:
        w = self._winreg()
        hkey, _ = self._split(root)
        created: List[str] = []
        walked: List[str] = []
        for comp in [p for p in path.split("\\") if p]:
            walked.append(comp)
            rel = "\\".join(walked)
            _, full = self._split(root, rel)
            try:
                with w.OpenKey(hkey, full, 0, w.KEY_READ):
                    continue
            except FileNotFoundError:
                pass
            with w.CreateKeyEx(hkey, full, 0, w.KEY_WRITE):
                created.append(rel)
        return created

    def set_value(self, root: str, path: str, name: str, reg_type: int, value: Any) -> None:
        w = self._winreg()
        hkey, full = self._split(root, path)
        with w.CreateKeyEx(hkey, full, 0, w.KEY_SET_VALUE) as k:
            w.SetValueEx(k, name, 0, reg_type, value)

    def get_value(self, root: str, path: str, name: str) -> Optional[Tuple[int, Any]]:
        w = self._winreg()
        hkey, full = self._split(root, path)
        try:
            with w.OpenKey(hkey, full, 0, w.KEY_READ) as k:
                data, reg_type = w.QueryValueEx(k, name)
        except FileNotFoundError:
            return None
        return int(reg_type), data
