# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/encoding.py
"""
hivex-level helpers: value byte encodings, key walking and the open/commit/
close lifecycle of a local hive file.

python-hivex returns node handles as ints where 0 (or None, depending on the
binding version) means "no such node".
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from .settings import REG_DWORD, REG_SZ

HivexHandle = Any
HivexOpener = Callable[..., HivexHandle]
NodeLike = Union[int, None]

MIN_HIVE_BYTES = 4096
REGF_MAGIC = b"regf"


def _node_id(n: NodeLike) -> int:
    try:
        return int(n or 0)
    except (TypeError, ValueError):
        return 0


def _node_ok(n: NodeLike) -> bool:
    return _node_id(n) != 0


def _split_key_path(path: str) -> List[str]:
    return [p for p in path.replace("/", "\\").split("\\") if p]


def _reg_sz(s: str) -> bytes:
    return (s + "\0").encode("utf-16le", errors="ignore")


def _decode_reg_sz(raw: bytes) -> str:
    # A trailing odd byte is garbage; anything after the first NUL is padding.
    raw = bytes(raw)[: len(raw) & ~1]
    return raw.decode("utf-16le", errors="ignore").partition("\0")[0]


def _reg_dword(v: int) -> bytes:
    return (int(v) & 0xFFFFFFFF).to_bytes(4, "little")


def _decode_reg_dword(raw: bytes) -> Optional[int]:
    raw = bytes(raw)
    return int.from_bytes(raw[:4], "little") if len(raw) >= 4 else None


def _mk_reg_value(name: str, t: int, value: bytes) -> dict:
    # Shape expected by Hivex.node_set_value.
    return {"key": name, "t": int(t), "value": value}


def _set_raw(h: HivexHandle, node: NodeLike, name: str, t: int, data: bytes) -> None:
    nid = _node_id(node)
    if not nid:
        raise RuntimeError(f"cannot set {name}: invalid key node")
    h.node_set_value(nid, _mk_reg_value(name, t, data))


def _set_sz(h: HivexHandle, node: NodeLike, name: str, s: str) -> None:
    _set_raw(h, node, name, REG_SZ, _reg_sz(s))


def _set_dword(h: HivexHandle, node: NodeLike, name: str, v: int) -> None:
    _set_raw(h, node, name, REG_DWORD, _reg_dword(v))


def _ensure_child(h: HivexHandle, parent: NodeLike, name: str) -> Tuple[int, bool]:
    pid = _node_id(parent)
    if not pid:
        raise RuntimeError(f"cannot create {name}: invalid parent node")
    child = _node_id(h.node_get_child(pid, name))
    if child:
        return child, False
    child = _node_id(h.node_add_child(pid, name))
    if not child:
        raise RuntimeError(f"hivex refused to create key {name}")
    return child, True


def _ensure_path(h: HivexHandle, root: NodeLike, path: str) -> Tuple[int, List[str]]:
    """
    Walk `path` below `root`, adding keys that do not exist yet.
    Returns the leaf node and the paths of the keys that were added.
    """
    node = _node_id(root)
    parts = _split_key_path(path)
    created: List[str] = []
    for i, part in enumerate(parts, 1):
        node, added = _ensure_child(h, node, part)
        if added:
            created.append("\\".join(parts[:i]))
    return node, created


def _find_path(h: HivexHandle, root: NodeLike, path: str) -> int:
    node = _node_id(root)
    for part in _split_key_path(path):
        if not node:
            break
        node = _node_id(h.node_get_child(node, part))
    return node


def _hivex_read_value(h: HivexHandle, node: NodeLike, name: str) -> Optional[Tuple[int, Any]]:
    """(reg_type, decoded data), or None when the key or value does not exist."""
    nid = _node_id(node)
    if not nid:
        return None
    try:
        val = h.node_get_value(nid, name)
    except RuntimeError:
        return None
    if not _node_ok(val):
        return None

    t, raw = h.value_value(val)
    t, raw = int(t), bytes(raw or b"")
    if t == REG_DWORD:
        return t, _decode_reg_dword(raw)
    if t == REG_SZ:
        return t, _decode_reg_sz(raw)
    return t, raw


def _is_probably_regf(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return f.read(len(REGF_MAGIC)) == REGF_MAGIC
    except OSError:
        return False


def _default_opener(path: str, write: bool) -> HivexHandle:
    import hivex  # type: ignore  # distro package (python3-hivex)

    return hivex.Hivex(path, write=write)


def _open_hive_local(path: Path, *, write: bool, opener: Optional[HivexOpener] = None) -> HivexHandle:
    """Refuse truncated or non-regf files before handing them to hivex."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"hive file missing: {path}")
    size = path.stat().st_size
    if size < MIN_HIVE_BYTES:
        raise RuntimeError(f"hive file too small ({size} bytes): {path}")
    if not _is_probably_regf(path):
        raise RuntimeError(f"{path} has no regf signature; not a registry hive")
    return (opener or _default_opener)(str(path), write=write)


def _close_best_effort(h: Optional[HivexHandle]) -> None:
    # Older bindings have no close(); the handle is released on GC.
    close = getattr(h, "close", None)
    if not callable(close):
        return
    try:
        close()
    except RuntimeError:
        pass


def _commit_best_effort(h: HivexHandle) -> None:
    commit = getattr(h, "commit", None)
    if not callable(commit):
        raise RuntimeError("python-hivex handle has no commit()")
    try:
        commit(None)
    except TypeError:
        # bindings where commit() takes no filename argument
        commit()
