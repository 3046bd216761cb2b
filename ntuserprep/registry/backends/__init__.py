# SPDX-License-Identifier: LGPL-3.0-or-later
# ntuserprep/registry/backends/__init__.py
"""
Hive backends:
- reg: live Windows registry via reg.exe + winreg
- hivex: offline hive file editing via python-hivex
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Type

from ...core.exceptions import Fatal
from ...core.utils import U
from .base import HiveBackend, join_key, normalize_root
from .hivex_backend import HivexBackend
from .reg_exe import RegExeBackend

BACKENDS: Dict[str, Type[HiveBackend]] = {
    RegExeBackend.name: RegExeBackend,
    HivexBackend.name: HivexBackend,
}


def default_backend_name() -> str:
    return RegExeBackend.name if U.is_windows() else HivexBackend.name


def make_backend(name: str, logger: logging.Logger, **kwargs: Any) -> HiveBackend:
    cls = BACKENDS.get((name or "").strip().lower())
    if cls is None:
        raise Fatal(2, f"unknown backend {name!r} (choose from: {', '.join(sorted(BACKENDS))})")
    return cls(logger, **kwargs)


__all__ = [
    "BACKENDS",
    "HiveBackend",
    "HivexBackend",
    "RegExeBackend",
    "default_backend_name",
    "join_key",
    "make_backend",
    "normalize_root",
]
