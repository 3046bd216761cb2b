# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/core/utils.py
from __future__ import annotations

import datetime as _dt
import hashlib
import json
import logging
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .exceptions import Fatal


class U:
    @staticmethod
    def is_windows() -> bool:
        return sys.platform.startswith("win")

    @staticmethod
    def ensure_dir(p: Path) -> None:
        Path(p).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def now_ts() -> str:
        """Local time as YYYYmmdd-HHMMSS, used in backup names."""
        return _dt.datetime.now().strftime("%Y%m%d-%H%M%S")

    @staticmethod
    def json_dump(obj: Any) -> str:
        return json.dumps(obj, indent=2, sort_keys=True, default=str)

    @staticmethod
    def sha256_file(path: Path, chunk: int = 1 << 20) -> str:
        h = hashlib.sha256()
        with open(path, "rb") as f:
            while True:
                blk = f.read(chunk)
                if not blk:
                    break
                h.update(blk)
        return h.hexdigest()

    @staticmethod
    def _pretty_cmd(cmd: Sequence[str]) -> str:
        if U.is_windows():
            return subprocess.list2cmdline(list(cmd))
        return shlex.join(list(cmd))

    @staticmethod
    def run_cmd(
        logger: logging.Logger,
        cmd: List[str],
        *,
        check: bool = True,
        capture: bool = False,
        timeout: Optional[int] = None,
        fatal: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run `cmd` to completion.

        With check=False the CompletedProcess is returned whatever the exit
        status. Failures are logged; fatal=True turns them into Fatal
        (exit status, 124 on timeout, 127 when the program cannot start),
        otherwise the subprocess exception propagates.
        """
        pretty = U._pretty_cmd(cmd)
        logger.debug("Running: %s", pretty)

        try:
            return subprocess.run(cmd, check=check, capture_output=capture, text=True, timeout=timeout)
        except subprocess.CalledProcessError as e:
            out = "\n".join(
                f"{label}:\n{text.strip()}"
                for label, text in (("stdout", e.stdout or e.output or ""), ("stderr", e.stderr or ""))
                if text.strip()
            )
            logger.error("Command failed (exit %s): %s%s", e.returncode, pretty, "\n" + out if out else "")
            if fatal:
                raise Fatal(e.returncode or 1, f"Command failed: {pretty}") from e
            raise
        except subprocess.TimeoutExpired as e:
            logger.error("Command timed out after %ss: %s", timeout, pretty)
            if fatal:
                raise Fatal(124, f"Command timed out: {pretty}") from e
            raise
        except OSError as e:
            logger.error("Cannot run %s: %s", pretty, e)
            if fatal:
                raise Fatal(127, f"Cannot run {pretty}: {e}") from e
            raise
