# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/backends/base.py
from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ...core.exceptions import Fatal

# Only these two predefined keys accept `reg load`.
_ROOT_ALIASES = {
    "HKU": "HKU",
    "HKEY_USERS": "HKU",
    "HKLM": "HKLM",
    "HKEY_LOCAL_MACHINE": "HKLM",
}


def normalize_root(destination_key: str) -> str:
    r"""
    Canonical destination key: `HKU\<name>` or `HKLM\<name>`.

    A bare name is placed under HKU; `HKEY_USERS\x` is shortened to `HKU\x`.
    """
    parts = [p for p in str(destination_key or "").replace("/", "\\").split("\\") if p.strip()]
    if not parts:
        raise Fatal(2, "destination key must not be empty")
    head = _ROOT_ALIASES.get(parts[0].upper())
    if head is None:
        if len(parts) > 1:
            raise Fatal(2, f"destination key must live under HKU or HKLM: {destination_key}")
        return f"HKU\\{parts[0]}"
    if len(parts) != 2:
        raise Fatal(2, f"destination key must be exactly one level below {head}: {destination_key}")
    return f"{head}\\{parts[1]}"


def join_key(*parts: str) -> str:
    out = [p.strip("\\") for p in parts if p and p.strip("\\")]
    return "\\".join(out)


class HiveBackend(abc.ABC):
    """
    Loads a hive file under a destination key and reads/writes values in it.

    load/unload return a process-style exit status (0 = success) so callers
    can treat both backends like `reg.exe`.
    """

    name = "base"

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @abc.abstractmethod
    def load(self, hive_file: Path, root: str) -> int:
        ...

    @abc.abstractmethod
    def unload(self, root: str, *, commit: bool = True) -> int:
        ...

    @abc.abstractmethod
    def is_loaded(self, root: str) -> bool:
        ...

    @abc.abstractmethod
    def ensure_key(self, root: str, path: str) -> List[str]:
        """Create `path` (and missing parents) below root; return the keys created."""

    @abc.abstractmethod
    def set_value(self, root: str, path: str, name: str, reg_type: int, value: Any) -> None:
        ...

    @abc.abstractmethod
    def get_value(self, root: str, path: str, name: str) -> Optional[Tuple[int, Any]]:
        """(reg_type, data) or None when the key or value is missing."""
