# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/backends/hivex_backend.py
"""
Offline backend built on python-hivex.

"Loading" opens the hive file for writing and remembers its root node under
the destination key; "unloading" commits (or discards) and closes it. Works
anywhere python-hivex does, e.g. against a Windows image mounted on Linux.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...core.exceptions import HiveError
from ..encoding import (
    HivexHandle,
    HivexOpener,
    _close_best_effort,
    _commit_best_effort,
    _ensure_path,
    _find_path,
    _hivex_read_value,
    _node_id,
    _open_hive_local,
    _set_dword,
    _set_sz,
)
from ..settings import REG_DWORD, REG_SZ
from .base import HiveBackend


@dataclass
class _OpenHive:
    handle: HivexHandle
    path: Path
    root_node: int
    dirty: bool = False


class HivexBackend(HiveBackend):
    name = "hivex"

    def __init__(self, logger: logging.Logger, *, opener: Optional[HivexOpener] = None, write: bool = True):
        super().__init__(logger)
        self._opener = opener
        self.write = bool(write)
        self._hives: Dict[str, _OpenHive] = {}

    def _hive(self, root: str) -> _OpenHive:
        hive = self._hives.get(root.upper())
        if hive is None:
            raise HiveError(msg=f"no hive loaded at {root}", context={"root": root})
        return hive

    def load(self, hive_file: Path, root: str) -> int:
        if root.upper() in self._hives:
            self.logger.error("%s is already loaded", root)
            return 1
        try:
            h = _open_hive_local(Path(hive_file), write=self.write, opener=self._opener)
            node = _node_id(h.root())
            if node == 0:
                raise RuntimeError("python-hivex root() returned invalid node")
        except (OSError, RuntimeError) as e:
            self.logger.error("hivex could not open %s: %s", hive_file, e)
            return 1
        self._hives[root.upper()] = _OpenHive(handle=h, path=Path(hive_file), root_node=node)
        self.logger.debug("hivex opened %s as %s (write=%s)", hive_file, root, self.write)
        return 0

    def unload(self, root: str, *, commit: bool = True) -> int:
        hive = self._hives.pop(root.upper(), None)
        if hive is None:
            self.logger.error("%s is not loaded", root)
            return 1
        try:
            if commit and self.write and hive.dirty:
                _commit_best_effort(hive.handle)
                self.logger.debug("hivex committed %s", hive.path)
            elif hive.dirty:
                self.logger.warning("Discarding uncommitted changes to %s", hive.path)
        except RuntimeError as e:
            self.logger.error("hivex commit of %s failed: %s", hive.path, e)
            return 1
        finally:
            _close_best_effort(hive.handle)
        return 0

    def is_loaded(self, root: str) -> bool:
        return root.upper() in self._hives

    def ensure_key(self, root: str, path: str) -> List[str]:
        hive = self._hive(root)
        _node, created = _ensure_path(hive.handle, hive.root_node, path)
        if created:
            hive.dirty = True
        return created

    def set_value(self, root: str, path: str, name: str, reg_type: int, value: Any) -> None:
        hive = self._hive(root)
        node = _find_path(hive.handle, hive.root_node, path)
        if node == 0:
            raise HiveError(msg=f"key does not exist: {path}", context={"root": root, "path": path})
        if reg_type == REG_DWORD:
            _set_dword(hive.handle, node, name, int(value))
        elif reg_type == REG_SZ:
            _set_sz(hive.handle, node, name, str(value))
        else:
            raise HiveError(msg=f"unsupported registry type {reg_type} for {path}\\{name}")
        hive.dirty = True

    def get_value(self, root: str, path: str, name: str) -> Optional[Tuple[int, Any]]:
        hive = self._hive(root)
        return _hivex_read_value(hive.handle, _find_path(hive.handle, hive.root_node, path), name)
