# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse

from ...provision import DEFAULT_ALIAS, DEFAULT_DELAY, DEFAULT_DESTINATION_KEY
from ...registry.backends import BACKENDS


def _add_global_config_logging(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Global config/logging (two-phase parse relies on these)
    # ------------------------------------------------------------------
    from ... import __version__

    p.add_argument(
        "--config",
        action="append",
        default=[],
        help="YAML/JSON config file, directory or glob (repeatable; later overrides earlier).",
    )
    p.add_argument("--dump-config", action="store_true", help="Print merged config and exit.")
    p.add_argument("--dump-args", action="store_true", help="Print final parsed args and exit.")
    p.add_argument("--version", action="version", version=__version__)
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity: -vv debug, -vvv trace")
    p.add_argument("-q", "--quiet", action="count", default=0, help="Quieter: -q warnings, -qq errors only")
    p.add_argument("--log-file", dest="log_file", default=None, help="Write logs to file.")
    p.add_argument("--json-logs", dest="json_logs", action="store_true", help="Emit NDJSON log lines.")


def _add_hive_target(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Which hive, where it is mounted, and how it is addressed
    # ------------------------------------------------------------------
    p.add_argument(
        "--hive",
        default=None,
        help=r"Hive file to edit (default: %%SystemDrive%%\Users\Default\NTUSER.DAT).",
    )
    p.add_argument(
        "--destination-key",
        dest="destination_key",
        default=DEFAULT_DESTINATION_KEY,
        help="Registry key the hive is loaded under (HKU\\name or HKLM\\name).",
    )
    p.add_argument("--alias", default=DEFAULT_ALIAS, help="Alias the mounted hive is addressed through.")
    p.add_argument(
        "--backend",
        default=None,
        choices=sorted(BACKENDS),
        help="reg: live Windows (reg.exe + winreg); hivex: offline file edit. Default: reg on Windows, hivex elsewhere.",
    )
    p.add_argument("--reg-exe", dest="reg_exe", default="reg.exe", help="reg.exe to invoke (reg backend).")


def _add_operation_flags(p: argparse.ArgumentParser) -> None:
    # ------------------------------------------------------------------
    # Operation flags
    # ------------------------------------------------------------------
    p.add_argument(
        "--delay",
        type=int,
        default=DEFAULT_DELAY,
        help="Seconds to count down before unloading (Ctrl+C cancels). 0 skips the wait.",
    )
    p.add_argument("--dry-run", dest="dry_run", action="store_true", help="Mount and log planned writes; change nothing.")
    p.add_argument("--no-backup", dest="no_backup", action="store_true", help="Skip the hive backup copy.")
    p.add_argument("--verify", action="store_true", help="Read every value back after writing.")
    p.add_argument("--report", default=None, help="Write a JSON report of the run to this path.")
