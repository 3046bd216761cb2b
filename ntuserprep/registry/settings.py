# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/registry/settings.py
"""
Default User settings table.

A Setting is a registry path (relative to the hive root) plus a mapping of
value name -> value. The Python type of a value decides the on-disk type:
int/bool become REG_DWORD, everything else REG_SZ.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.exceptions import Fatal

REG_SZ = 1
REG_DWORD = 4

REG_TYPE_NAMES = {
    REG_SZ: "REG_SZ",
    REG_DWORD: "REG_DWORD",
}

Value = Union[int, str]


def normalize_key_path(path: str) -> str:
    """Backslash separators, no leading/trailing separators, no empty components."""
    parts = [p for p in str(path).replace("/", "\\").split("\\") if p.strip()]
    return "\\".join(p.strip() for p in parts)


def value_type(value: Any) -> int:
    # bool is an int subclass; it lands on REG_DWORD as 0/1.
    if isinstance(value, int):
        return REG_DWORD
    return REG_SZ


def coerce_value(value: Any) -> Value:
    """
    Value as it is stored: DWORDs are wrapped to 32 bits (no range check),
    everything else is stringified.
    """
    if isinstance(value, int):
        return int(value) & 0xFFFFFFFF
    return str(value)


@dataclass(frozen=True)
class Setting:
    path: str
    values: Mapping[str, Value]

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_key_path(self.path))
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def items(self) -> Iterator[Tuple[str, Value]]:
        return iter(self.values.items())


DEFAULT_SETTINGS: Tuple[Setting, ...] = (
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced",
        {
            "HideFileExt": 0,
            "LaunchTo": 1,
            "ShowTaskViewButton": 0,
            "TaskbarAl": 0,
            "TaskbarMn": 0,
        },
    ),
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\Search",
        {"SearchboxTaskbarMode": 1},
    ),
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\ContentDeliveryManager",
        {
            "ContentDeliveryAllowed": 0,
            "OemPreInstalledAppsEnabled": 0,
            "PreInstalledAppsEnabled": 0,
            "SilentInstalledAppsEnabled": 0,
            "SubscribedContent-338388Enabled": 0,
            "SystemPaneSuggestionsEnabled": 0,
        },
    ),
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\AdvertisingInfo",
        {"Enabled": 0},
    ),
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\Privacy",
        {"TailoredExperiencesWithDiagnosticDataEnabled": 0},
    ),
    Setting(
        r"Software\Microsoft\Windows\CurrentVersion\Explorer",
        {"ShowFrequent": 0, "ShowRecent": 0},
    ),
    Setting(
        r"Control Panel\International\User Profile",
        {"HttpAcceptLanguageOptOut": 1},
    ),
    Setting(
        r"Control Panel\Desktop",
        {"MenuShowDelay": "200", "AutoEndTasks": "1"},
    ),
    Setting(
        r"Control Panel\Mouse",
        {"MouseSpeed": "0", "MouseThreshold1": "0", "MouseThreshold2": "0"},
    ),
)


def _setting_from_obj(idx: int, obj: Any) -> Setting:
    if not isinstance(obj, dict):
        raise Fatal(2, f"settings[{idx}] must be a mapping with 'path' and 'values'")
    path = obj.get("path")
    values = obj.get("values")
    if not isinstance(path, str) or not normalize_key_path(path):
        raise Fatal(2, f"settings[{idx}].path must be a non-empty string")
    if not isinstance(values, dict) or not values:
        raise Fatal(2, f"settings[{idx}].values must be a non-empty mapping")
    for name, v in values.items():
        if not isinstance(v, (int, str)):
            raise Fatal(2, f"settings[{idx}].values[{name!r}] must be an integer or a string, got {type(v).__name__}")
    return Setting(path, {str(k): v for k, v in values.items()})


def settings_from_config(raw: Optional[Sequence[Any]]) -> List[Setting]:
    """Build Settings from a config list of {path: ..., values: {...}} mappings."""
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise Fatal(2, "settings must be a list of {path, values} mappings")
    return [_setting_from_obj(i, obj) for i, obj in enumerate(raw)]


def resolve_settings(conf: Mapping[str, Any]) -> List[Setting]:
    """
    `settings:` replaces the built-in table, `extra_settings:` appends to
    whatever table is in effect.
    """
    base = settings_from_config(conf.get("settings")) if conf.get("settings") is not None else list(DEFAULT_SETTINGS)
    return base + settings_from_config(conf.get("extra_settings"))


def describe(settings: Sequence[Setting]) -> List[Dict[str, Any]]:
    return [{"path": s.path, "values": dict(s.values)} for s in settings]
