# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/core/logger.py
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from termcolor import colored as _colored

TRACE = 5
if logging.getLevelName(TRACE) != "TRACE":
    logging.addLevelName(TRACE, "TRACE")


def _logger_trace(self: logging.Logger, msg: str, *args, **kwargs) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _logger_trace  # type: ignore[attr-defined]

# levelname -> (emoji, color)
_LEVELS: Dict[str, Tuple[str, str]] = {
    "TRACE": ("🧬", "cyan"),
    "DEBUG": ("🔍", "blue"),
    "INFO": ("✅", "green"),
    "WARNING": ("⚠️", "yellow"),
    "ERROR": ("💥", "red"),
    "CRITICAL": ("🧨", "red"),
}


def _is_tty() -> bool:
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


def _supports_unicode() -> bool:
    """cp437/cp1252 consoles cannot print the level emoji."""
    enc = getattr(sys.stderr, "encoding", None) or "utf-8"
    try:
        "✅".encode(enc)
    except (UnicodeEncodeError, LookupError):
        return False
    return True


def c(
    text: str,
    color: Optional[str] = None,
    attrs: Optional[List[str]] = None,
    *,
    enable: bool = True,
) -> str:
    if not enable or not color:
        return text
    return _colored(text, color=color, attrs=attrs or [])


def _clip(v: Any, limit: int = 240) -> str:
    s = str(v).replace("\r", "\\r").replace("\n", "\\n")
    return s if len(s) <= limit else s[: limit - 1] + "…"


def _ctx_suffix(ctx: Optional[Mapping[str, Any]]) -> str:
    if not ctx:
        return ""
    return " " + " ".join(f"{k}={_clip(ctx[k])}" for k in sorted(ctx, key=str))


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that stamps every record with a `ctx` dict (alias, root, ...).
    A per-call `extra={"ctx": {...}}` is merged over the bound context.
    """

    def __init__(self, logger: logging.Logger, ctx: Optional[Mapping[str, Any]] = None):
        super().__init__(logger, {"ctx": dict(ctx or {})})

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["ctx"] = {**self.extra["ctx"], **(extra.get("ctx") or {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **ctx: Any) -> "ContextLoggerAdapter":
        return ContextLoggerAdapter(self.logger, {**self.extra["ctx"], **ctx})


@dataclass(frozen=True)
class LogStyle:
    color: bool = True
    show_ms: bool = False
    show_src: bool = False  # logger name + module:line
    utc: bool = False
    unicode: bool = True


def _when(created: float, utc: bool) -> _dt.datetime:
    return _dt.datetime.fromtimestamp(created, tz=_dt.timezone.utc if utc else None)


class EmojiFormatter(logging.Formatter):
    """`12:00:01 ✅ INFO     message key=value`, colored on a terminal."""

    def __init__(self, style: LogStyle):
        super().__init__()
        self.style = style

    def format(self, record: logging.LogRecord) -> str:
        st = self.style
        emoji, color = _LEVELS.get(record.levelname, ("•", None))
        colorize = st.color and _is_tty()

        ts = _when(record.created, st.utc).strftime("%H:%M:%S.%f")
        ts = ts[:-3] if st.show_ms else ts[:8]
        lvl = c(f"{record.levelname:<8}", color, enable=colorize)
        msg = record.getMessage()
        if record.levelno >= logging.WARNING:
            msg = c(msg, color, ["bold"], enable=colorize)
        src = f" [{record.name} {record.module}:{record.lineno}]" if st.show_src else ""

        line = f"{ts} {emoji if st.unicode else '·'} {lvl}{src} {msg}{_ctx_suffix(getattr(record, 'ctx', None))}"
        if record.exc_info:
            tb = "\n".join("  " + ln for ln in self.formatException(record.exc_info).splitlines())
            line += "\n" + c(tb, "red", enable=colorize)
        return line


class JsonFormatter(logging.Formatter):
    """One JSON object per line for CI log collection."""

    def __init__(self, *, utc: bool = True):
        super().__init__()
        self.utc = utc

    def format(self, record: logging.LogRecord) -> str:
        obj: Dict[str, Any] = {
            "ts": _when(record.created, self.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "module": record.module,
            "lineno": record.lineno,
        }
        ctx = getattr(record, "ctx", None)
        if ctx:
            obj["ctx"] = {str(k): _clip(v) for k, v in ctx.items()}
        if record.exc_info and record.exc_info[0] is not None:
            obj["exc_type"] = record.exc_info[0].__name__
            obj["traceback"] = self.formatException(record.exc_info)
        return json.dumps(obj, ensure_ascii=False, default=str)


class Log:
    @staticmethod
    def _level_from_flags(verbose: int, quiet: int) -> int:
        """-q WARNING, -qq ERROR, -vv DEBUG, -vvv TRACE; quiet beats verbose."""
        if quiet:
            return logging.ERROR if quiet >= 2 else logging.WARNING
        if verbose >= 3:
            return TRACE
        return logging.DEBUG if verbose >= 2 else logging.INFO

    @staticmethod
    def bind(logger: logging.Logger, **ctx: Any) -> ContextLoggerAdapter:
        return ContextLoggerAdapter(logger, ctx)

    @staticmethod
    def banner(logger: logging.Logger, title: str) -> None:
        logger.info(f" {title.strip()} ".center(72, "─"))

    @staticmethod
    def step(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("➡️  %s", msg, extra={"ctx": ctx})

    @staticmethod
    def ok(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.info("✅ %s", msg, extra={"ctx": ctx})

    @staticmethod
    def warn(logger: logging.Logger, msg: str, **ctx: Any) -> None:
        logger.warning("⚠️  %s", msg, extra={"ctx": ctx})

    @staticmethod
    def trace(logger: logging.Logger, msg: str, *args: Any) -> None:
        logger.trace(msg, *args)  # type: ignore[attr-defined]

    @staticmethod
    def setup(
        verbose: int = 0,
        log_file: Optional[str] = None,
        *,
        quiet: int = 0,
        color: bool = True,
        show_ms: bool = False,
        utc: bool = False,
        logger_name: str = "ntuserprep",
        json_logs: bool = False,
    ) -> logging.Logger:
        """
        (Re)configure the named logger: one stderr handler, plus a file
        handler when `log_file` is given. Existing handlers are replaced so
        calling this twice does not duplicate output.
        """
        logger = logging.getLogger(logger_name)
        logger.propagate = False
        level = Log._level_from_flags(verbose, quiet)
        logger.setLevel(level)

        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()

        unicode = _supports_unicode()

        def _formatter(to_file: bool) -> logging.Formatter:
            if json_logs:
                return JsonFormatter(utc=utc)
            if to_file:
                return EmojiFormatter(LogStyle(color=False, show_ms=True, show_src=True, utc=utc, unicode=unicode))
            return EmojiFormatter(
                LogStyle(color=color, show_ms=show_ms or verbose >= 3, show_src=verbose >= 3, utc=utc, unicode=unicode)
            )

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if log_file:
            fp = Path(log_file).expanduser().resolve()
            fp.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(fp, encoding="utf-8"))

        for i, h in enumerate(handlers):
            h.setLevel(level)
            h.setFormatter(_formatter(to_file=i > 0))
            logger.addHandler(h)

        logger.debug("Logger initialized (level=%s)", logging.getLevelName(level))
        return logger
