# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/config/config_loader.py
from __future__ import annotations

import argparse
import glob
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from ..core.exceptions import Fatal

_CONFIG_SUFFIXES = (".yaml", ".yml", ".json")

# Consumed by the provisioner, not by argparse.
_NON_ARG_KEYS = {"settings", "extra_settings"}


def _norm_key(k: Any) -> str:
    return str(k).strip().replace("-", "_")


def _deep_merge(base: Dict[str, Any], over: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


class Config:
    """YAML/JSON config files merged in order, then applied as argparse defaults."""

    @staticmethod
    def expand_configs(logger: logging.Logger, cfgs: List[str]) -> List[Path]:
        """
        Expand each entry: a directory yields its *.yaml/*.yml/*.json files
        (sorted), a glob yields its matches (sorted), anything else is taken
        as a file path. A missing file is fatal.
        """
        out: List[Path] = []
        for raw in cfgs:
            p = Path(raw).expanduser()
            if p.is_dir():
                found = sorted(x for x in p.iterdir() if x.suffix.lower() in _CONFIG_SUFFIXES)
                logger.debug("Config dir %s -> %d file(s)", p, len(found))
                out.extend(found)
                continue
            if any(ch in raw for ch in "*?["):
                matches = sorted(Path(m) for m in glob.glob(str(p)))
                if not matches:
                    logger.warning("Config glob matched nothing: %s", raw)
                out.extend(matches)
                continue
            if not p.is_file():
                raise Fatal(2, f"Config file not found: {p}")
            out.append(p)
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: Path) -> Dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise Fatal(2, f"Cannot read config {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text)
        except (yaml.YAMLError, ValueError) as e:
            raise Fatal(2, f"Cannot parse config {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise Fatal(2, f"Config {path} must contain a mapping at top level")
        logger.debug("Loaded config %s (%d key(s))", path, len(data))
        return {_norm_key(k): v for k, v in data.items()}

    @staticmethod
    def load_many(logger: logging.Logger, paths: List[Path]) -> Dict[str, Any]:
        """Later files override earlier ones; nested mappings are merged."""
        merged: Dict[str, Any] = {}
        for p in paths:
            merged = _deep_merge(merged, Config.load_one(logger, Path(p)))
        return merged

    @staticmethod
    def apply_as_defaults(logger: logging.Logger, parser: argparse.ArgumentParser, conf: Dict[str, Any]) -> None:
        dests = {a.dest for a in parser._actions if a.dest and a.dest != argparse.SUPPRESS}
        defaults: Dict[str, Any] = {}
        for k, v in conf.items():
            if k in dests:
                defaults[k] = v
            elif k not in _NON_ARG_KEYS:
                logger.warning("Ignoring unknown config key: %s", k)
        if defaults:
            parser.set_defaults(**defaults)
            logger.debug("Config defaults applied: %s", ", ".join(sorted(defaults)))
