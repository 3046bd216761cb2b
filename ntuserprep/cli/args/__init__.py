# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/cli/args/__init__.py
"""
Argument parsing for the ntuserprep CLI.
"""
from __future__ import annotations

from .builder import HelpFormatter, _build_epilog
from .groups import _add_global_config_logging, _add_hive_target, _add_operation_flags
from .parser import _build_preparser, _load_merged_config, build_parser, parse_args_with_config
from .validators import validate_args

__all__ = [
    "HelpFormatter",
    "_add_global_config_logging",
    "_add_hive_target",
    "_add_operation_flags",
    "_build_epilog",
    "_build_preparser",
    "_load_merged_config",
    "build_parser",
    "parse_args_with_config",
    "validate_args",
]
