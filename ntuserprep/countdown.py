# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/countdown.py
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn


def countdown(
    logger: logging.Logger,
    seconds: int,
    *,
    label: str = "Unloading hive",
    sleep: Callable[[float], None] = time.sleep,
    console: Optional[Console] = None,
) -> None:
    """
    Count down `seconds`, showing the time left, so the operator can press
    Ctrl+C before the hive is unloaded. KeyboardInterrupt propagates.
    """
    seconds = max(0, int(seconds))
    if seconds == 0:
        return

    console = console or Console(stderr=True)
    logger.info("%s in %d seconds (Ctrl+C to cancel)", label, seconds)

    if not console.is_terminal:
        for left in range(seconds, 0, -1):
            logger.info("%s in %ds ...", label, left)
            sleep(1)
        return

    with Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.fields[left]}s left"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(label, total=seconds, left=seconds)
        for left in range(seconds, 0, -1):
            progress.update(task, left=left)
            sleep(1)
            progress.advance(task)
