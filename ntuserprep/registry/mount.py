# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/mount.py
"""
Hive mounting under a short alias.

An alias is the name values are addressed through while the hive is loaded
(`DefaultUser:\\Control Panel\\Desktop`). The mounter owns the alias table;
the backend owns the actual load/unload.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from ..core.exceptions import HiveAliasError, HiveLoadError, HiveUnloadError
from ..core.logger import Log
from .backends.base import HiveBackend, normalize_root

_ALIAS_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


@dataclass(frozen=True)
class MountedHive:
    alias: str
    root: str
    hive_file: Path


class HiveMounter:
    def __init__(self, logger: logging.Logger, backend: HiveBackend):
        self.logger = logger
        self.backend = backend
        self._aliases: Dict[str, MountedHive] = {}

    def aliases(self) -> Dict[str, MountedHive]:
        return dict(self._aliases)

    def has_alias(self, alias: str) -> bool:
        return alias.lower() in self._aliases

    def resolve(self, alias: str) -> MountedHive:
        m = self._aliases.get(alias.lower())
        if m is None:
            raise HiveAliasError(msg=f"no hive mounted under alias {alias!r}", context={"alias": alias})
        return m

    def _remove_alias(self, alias: str) -> None:
        self._aliases.pop(alias.lower(), None)

    def _create_alias(self, alias: str, root: str, hive_file: Path) -> MountedHive:
        if not _ALIAS_RE.match(alias or ""):
            raise HiveAliasError(msg=f"invalid alias name {alias!r}", context={"alias": alias, "root": root})
        if not self.backend.is_loaded(root):
            raise HiveAliasError(msg=f"cannot create alias {alias!r}: {root} is not reachable", context={"alias": alias, "root": root})
        m = MountedHive(alias=alias, root=root, hive_file=hive_file)
        self._aliases[alias.lower()] = m
        return m

    def mount(self, hive_file: Path, destination_key: str, alias: str) -> MountedHive:
        """
        Load `hive_file` under `destination_key` and address it as `alias`.

        A stale alias of the same name is dropped first, and a destination
        key still loaded from an earlier run is unloaded first.
        """
        root = normalize_root(destination_key)
        hive_file = Path(hive_file)
        log = Log.bind(self.logger, alias=alias, root=root)

        if self.has_alias(alias):
            stale = self.resolve(alias)
            log.warning("Alias already exists (-> %s); removing it", stale.root)
            self._remove_alias(alias)

        if self.backend.is_loaded(root):
            log.warning("%s is still loaded from an earlier run; unloading it", root)
            rc = self.backend.unload(root, commit=False)
            if rc != 0:
                raise HiveLoadError(
                    msg=f"stale hive at {root} could not be unloaded (exit status {rc})",
                    context={"root": root, "rc": rc},
                )

        log.info("Loading %s into %s", hive_file, root)
        rc = self.backend.load(hive_file, root)
        if rc != 0:
            raise HiveLoadError(
                msg=f"failed to load {hive_file} into {root} (exit status {rc})",
                context={"hive": str(hive_file), "root": root, "rc": rc},
            )

        try:
            m = self._create_alias(alias, root, hive_file)
        except HiveAliasError:
            # Do not leave the hive loaded (and the file locked) without an alias.
            rc = self.backend.unload(root, commit=False)
            if rc != 0:
                log.error("Unloading %s after the alias failure returned %s", root, rc)
            raise
        log.info("Mounted %s as %s:\\", root, alias)
        return m

    def unmount(self, alias: str, *, commit: bool = True) -> MountedHive:
        m = self.resolve(alias)
        self._remove_alias(alias)

        Log.bind(self.logger, alias=m.alias, root=m.root).info("Unloading %s", m.root)
        rc = self.backend.unload(m.root, commit=commit)
        if rc != 0:
            raise HiveUnloadError(
                msg=f"failed to unload {m.root} (exit status {rc})",
                context={"alias": m.alias, "root": m.root, "rc": rc},
            )
        return m
