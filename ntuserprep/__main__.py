# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/__main__.py
from __future__ import annotations

import sys
import traceback
from typing import Optional

from .cli.args import parse_args_with_config
from .core.exceptions import NtuserPrepError, format_exception_for_cli
from .provision import Provisioner


def _print_stderr(msg: str) -> None:
    print(msg, file=sys.stderr)


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Log through `logger` when there is one, otherwise print to stderr.
    """
    if logger is None:
        _print_stderr(msg)
        return

    fn = getattr(logger, level, None)
    if callable(fn):
        fn(msg)
    else:
        _print_stderr(msg)


def main(argv: Optional[list] = None) -> None:
    logger: Optional[object] = None

    # Phase 1: parse (Fatal can happen here)
    try:
        args, _conf, logger = parse_args_with_config(argv)
    except NtuserPrepError as e:
        # No logger yet: the parse layer never got far enough to log.
        _print_stderr(f"💥 ERROR    {e}")
        raise SystemExit(e.code)
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        raise SystemExit(130)

    verbose = int(getattr(args, "verbose", 0) or 0)

    # Phase 2: provision
    try:
        rc = Provisioner(logger, args, settings=getattr(args, "settings", None)).run()
    except NtuserPrepError as e:
        # Provisioner raises without logging; report once here.
        _safe_log(logger, "error", format_exception_for_cli(e, verbose=verbose))
        rc = e.code
    except KeyboardInterrupt:
        _safe_log(logger, "warning", "Interrupted by user (Ctrl+C).")
        rc = 130
    except Exception as e:
        # Unexpected exceptions must not fail silently.
        _safe_log(logger, "error", f"💥 UNHANDLED {type(e).__name__}: {e}")
        _safe_log(logger, "debug", traceback.format_exc())
        rc = 1

    raise SystemExit(rc)


if __name__ == "__main__":
    main()
