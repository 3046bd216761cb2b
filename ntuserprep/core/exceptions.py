# SPDX-License-Identifier: LGPL-3.0-or-later
# ntuserprep/core/exceptions.py
"""
Exception hierarchy. Every error carries the process exit code it maps to;
`__main__.main()` logs it once and exits with that code.

    Fatal              2  bad input: missing hive, bad config/options
    HiveLoadError      3  load returned nonzero
    HiveAliasError     4  alias could not be created/resolved
    HiveUnloadError    5  unload returned nonzero
    VerificationError  6  read-back differs from what was written
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


def _exit_code(x: Any) -> int:
    try:
        code = int(x)
    except (TypeError, ValueError):
        return 1
    return min(max(code, 1), 255) if code else 0


def _one_line(s: Any, limit: int = 600) -> str:
    s = " ".join(str(s or "").split())
    return s if len(s) <= limit else s[: limit - 3] + "..."


@dataclass(eq=False)
class NtuserPrepError(Exception):
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.code = _exit_code(self.code)
        self.msg = _one_line(self.msg) or type(self).__name__
        self.context = dict(self.context or {})
        super().__init__(self.msg)

    def with_context(self, **ctx: Any) -> "NtuserPrepError":
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        out = self.msg
        if include_context and self.context:
            out += " [" + _one_line(", ".join(f"{k}={self.context[k]!r}" for k in sorted(self.context))) + "]"
        if include_cause and self.cause is not None:
            out += f" (cause: {type(self.cause).__name__}: {_one_line(self.cause)})"
        return out

    def __str__(self) -> str:
        return self.msg

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.msg,
            "context": dict(self.context),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(self.cause)}
        return d


class Fatal(NtuserPrepError):
    pass


@dataclass(eq=False)
class HiveError(NtuserPrepError):
    code: int = 3


class HiveLoadError(HiveError):
    pass


@dataclass(eq=False)
class HiveAliasError(HiveError):
    code: int = 4


@dataclass(eq=False)
class HiveUnloadError(HiveError):
    code: int = 5


@dataclass(eq=False)
class VerificationError(NtuserPrepError):
    code: int = 6


def wrap_fatal(msg: str, exc: Optional[BaseException] = None, code: int = 2, **context: Any) -> Fatal:
    return Fatal(code=code, msg=msg, cause=exc, context=context)


def format_exception_for_cli(e: BaseException, *, verbose: int = 0) -> str:
    """-v adds context, -vv adds the cause (or the type of a foreign exception)."""
    if isinstance(e, NtuserPrepError):
        return e.user_message(include_context=verbose >= 1, include_cause=verbose >= 2)
    text = _one_line(e)
    if verbose >= 2:
        return f"{type(e).__name__}: {text}"
    return text or type(e).__name__
