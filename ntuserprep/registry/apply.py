# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/apply.py
"""
Write a settings table into a mounted hive, and read it back.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from ..core.exceptions import HiveAliasError, VerificationError
from .mount import HiveMounter
from .settings import REG_TYPE_NAMES, Setting, coerce_value, normalize_key_path, value_type


def strip_alias(path: str, alias: str) -> str:
    r"""
    `DefaultUser:\Control Panel\Desktop` -> `Control Panel\Desktop`.
    Only a first component ending in ':' is a qualifier; colons further down
    are part of key names. Plain paths are returned normalized; a foreign
    alias is an error.
    """
    first, _, rest = normalize_key_path(path).partition("\\")
    if not first.endswith(":"):
        return normalize_key_path(path)
    head = first[:-1].strip()
    if head.lower() != alias.lower():
        raise HiveAliasError(msg=f"path {path!r} refers to alias {head!r}, expected {alias!r}", context={"path": path})
    return rest


def apply_settings(
    logger: logging.Logger,
    mounter: HiveMounter,
    alias: str,
    settings: Sequence[Setting],
    *,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """
    Create each setting's key (and missing parents), then write its values.
    Types follow the Python value: int -> REG_DWORD, anything else -> REG_SZ.
    """
    m = mounter.resolve(alias)
    backend = mounter.backend

    out: Dict[str, Any] = {
        "alias": m.alias,
        "root": m.root,
        "dry_run": dry_run,
        "keys_created": [],
        "values_written": [],
    }

    for s in settings:
        path = strip_alias(s.path, alias)
        if dry_run:
            logger.info("[dry-run] would ensure %s:\\%s", alias, path)
        else:
            created = backend.ensure_key(m.root, path)
            for k in created:
                logger.debug("Created key %s:\\%s", alias, k)
            out["keys_created"].extend(created)

        for name, raw in s.items():
            t = value_type(raw)
            v = coerce_value(raw)
            rec = {"path": path, "name": name, "type": REG_TYPE_NAMES[t], "value": v}
            if dry_run:
                logger.info("[dry-run] would set %s\\%s = %r (%s)", path, name, v, REG_TYPE_NAMES[t])
            else:
                backend.set_value(m.root, path, name, t, v)
                logger.info("Set %s\\%s = %r (%s)", path, name, v, REG_TYPE_NAMES[t])
            out["values_written"].append(rec)

    return out


def expected_values(settings: Sequence[Setting], alias: str) -> Dict[tuple, tuple]:
    """(lower path, lower name) -> (reg_type, value); later entries win."""
    want: Dict[tuple, tuple] = {}
    for s in settings:
        path = strip_alias(s.path, alias)
        for name, raw in s.items():
            want[(path.lower(), name.lower())] = (path, name, value_type(raw), coerce_value(raw))
    return want


def verify_settings(
    logger: logging.Logger,
    mounter: HiveMounter,
    alias: str,
    settings: Sequence[Setting],
) -> Dict[str, Any]:
    """Read every value back; raise VerificationError on any missing or different value."""
    m = mounter.resolve(alias)
    mismatches: List[Dict[str, Any]] = []
    checked = 0

    for path, name, t, v in expected_values(settings, alias).values():
        checked += 1
        got = mounter.backend.get_value(m.root, path, name)
        if got is None:
            mismatches.append({"path": path, "name": name, "expected": v, "got": None})
            continue
        got_t, got_v = got
        if got_t != t or got_v != v:
            mismatches.append(
                {
                    "path": path,
                    "name": name,
                    "expected": f"{v!r} ({REG_TYPE_NAMES[t]})",
                    "got": f"{got_v!r} ({REG_TYPE_NAMES.get(got_t, got_t)})",
                }
            )

    if mismatches:
        for mm in mismatches:
            logger.error("Verify mismatch %s\\%s: expected %s, got %s", mm["path"], mm["name"], mm["expected"], mm["got"])
        raise VerificationError(
            msg=f"{len(mismatches)} of {checked} values did not read back as written",
            context={"alias": alias, "mismatches": len(mismatches)},
        )

    logger.info("Verified %d values under %s:\\", checked, alias)
    return {"checked": checked, "mismatches": []}
