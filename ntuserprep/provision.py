# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/provision.py
from __future__ import annotations

import argparse
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich.console import Console

from .core.exceptions import NtuserPrepError, wrap_fatal
from .core.logger import Log
from .core.utils import U
from .countdown import countdown
from .registry.apply import apply_settings, verify_settings
from .registry.backends import HiveBackend, HivexBackend, RegExeBackend, default_backend_name, make_backend
from .registry.mount import HiveMounter
from .registry.settings import DEFAULT_SETTINGS, Setting, describe

DEFAULT_ALIAS = "DefaultUser"
DEFAULT_DESTINATION_KEY = r"HKU\DefaultUserTemp"
DEFAULT_DELAY = 10


def default_hive_path() -> str:
    drive = (os.environ.get("SystemDrive") or "C:").rstrip("\\")
    return drive + r"\Users\Default\NTUSER.DAT"


class Provisioner:
    """
    Load the Default User hive, write the settings table, count down,
    unload.
    """

    def __init__(
        self,
        logger: logging.Logger,
        args: argparse.Namespace,
        *,
        settings: Optional[Sequence[Setting]] = None,
        backend: Optional[HiveBackend] = None,
        sleep: Callable[[float], None] = time.sleep,
        console: Optional[Console] = None,
    ):
        self.logger = logger
        self.args = args
        self.settings: List[Setting] = list(DEFAULT_SETTINGS if settings is None else settings)
        self.hive = Path(getattr(args, "hive", None) or default_hive_path())
        self.destination_key = getattr(args, "destination_key", None) or DEFAULT_DESTINATION_KEY
        self.alias = getattr(args, "alias", None) or DEFAULT_ALIAS
        delay = getattr(args, "delay", None)
        self.delay = DEFAULT_DELAY if delay is None else int(delay)
        self.dry_run = bool(getattr(args, "dry_run", False))
        self.no_backup = bool(getattr(args, "no_backup", False))
        self.verify = bool(getattr(args, "verify", False))
        self.report_path = getattr(args, "report", None)
        self._sleep = sleep
        self._console = console

        self.backend = backend or self._make_backend()
        self.mounter = HiveMounter(logger, self.backend)

        Log.trace(
            self.logger,
            "Provisioner init: hive=%r key=%r alias=%r backend=%r",
            str(self.hive),
            self.destination_key,
            self.alias,
            self.backend.name,
        )

    def _make_backend(self) -> HiveBackend:
        name = getattr(self.args, "backend", None) or default_backend_name()
        if name == HivexBackend.name:
            return make_backend(name, self.logger, write=not self.dry_run)
        if name == RegExeBackend.name:
            return make_backend(name, self.logger, reg_exe=getattr(self.args, "reg_exe", None) or "reg.exe")
        return make_backend(name, self.logger)

    def _check_hive(self) -> Path:
        if not self.hive.is_file():
            raise wrap_fatal(f"Hive file not found: {self.hive}", hive=str(self.hive))
        return self.hive

    def _backup(self, hive: Path) -> str:
        backup = hive.with_name(f"{hive.name}.ntuserprep.backup.{U.now_ts()}")
        shutil.copy2(hive, backup)
        self.logger.info("Hive backup created: %s", backup)
        return str(backup)

    def _abandon(self) -> None:
        """Unload without committing after a failure; never masks the original error."""
        if not self.mounter.has_alias(self.alias):
            return
        try:
            self.mounter.unmount(self.alias, commit=False)
        except NtuserPrepError as e:
            self.logger.error("Cleanup unload failed: %s", e)

    def _write_report(self, report: Dict[str, Any]) -> None:
        if not self.report_path:
            return
        fp = Path(self.report_path).expanduser()
        U.ensure_dir(fp.parent)
        fp.write_text(U.json_dump(report) + "\n", encoding="utf-8")
        self.logger.info("Report written: %s", fp)

    def run(self) -> int:
        Log.banner(self.logger, "Default User registry provisioning")
        hive = self._check_hive()

        report: Dict[str, Any] = {
            "hive": str(hive),
            "destination_key": self.destination_key,
            "alias": self.alias,
            "backend": self.backend.name,
            "dry_run": self.dry_run,
            "settings": describe(self.settings),
            "backup": None,
            "sha256_before": U.sha256_file(hive),
        }

        if not (self.dry_run or self.no_backup):
            report["backup"] = self._backup(hive)

        Log.step(self.logger, "Mounting hive", alias=self.alias, key=self.destination_key)
        self.mounter.mount(hive, self.destination_key, self.alias)

        try:
            report["apply"] = apply_settings(self.logger, self.mounter, self.alias, self.settings, dry_run=self.dry_run)
            if self.verify and not self.dry_run:
                report["verify"] = verify_settings(self.logger, self.mounter, self.alias, self.settings)
            countdown(self.logger, self.delay, sleep=self._sleep, console=self._console)
        except KeyboardInterrupt:
            Log.warn(self.logger, "Cancelled by operator; unloading without committing")
            self._abandon()
            raise
        except Exception:
            self._abandon()
            raise

        self.mounter.unmount(self.alias, commit=not self.dry_run)
        report["sha256_after"] = U.sha256_file(hive)
        self._write_report(report)

        n = len(report["apply"]["values_written"])
        if self.dry_run:
            Log.ok(self.logger, f"Dry run complete: {n} value(s) planned, hive untouched")
        else:
            Log.ok(self.logger, f"Default User hive updated: {n} value(s) written")
        return 0
