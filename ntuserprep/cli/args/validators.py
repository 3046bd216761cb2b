# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/cli/args/validators.py
from __future__ import annotations

import argparse
from typing import Any, Dict

from ...core.exceptions import Fatal
from ...registry.backends import normalize_root
from ...registry.mount import _ALIAS_RE
from ...registry.settings import resolve_settings


def _validate_delay(args: argparse.Namespace) -> None:
    try:
        delay = int(args.delay)
    except (TypeError, ValueError):
        raise Fatal(2, f"delay must be an integer number of seconds, got {args.delay!r}") from None
    if delay < 0:
        raise Fatal(2, f"delay must be >= 0, got {delay}")
    args.delay = delay


def _validate_alias(args: argparse.Namespace) -> None:
    if not _ALIAS_RE.match(str(args.alias or "")):
        raise Fatal(2, f"alias must be a simple name (letters, digits, _ . -): {args.alias!r}")


def validate_args(args: argparse.Namespace, conf: Dict[str, Any]) -> None:
    """
    Check option shapes and normalize them in place.
    The hive file itself is checked at run time (missing hive = nonzero exit, no mount).
    """
    _validate_delay(args)
    _validate_alias(args)
    args.destination_key = normalize_root(args.destination_key)
    args.settings = resolve_settings(conf)
    if not args.settings:
        raise Fatal(2, "settings table is empty; nothing to write")
