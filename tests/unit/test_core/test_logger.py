# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import json
import logging

import pytest

from ntuserprep.core.logger import TRACE, EmojiFormatter, JsonFormatter, Log, LogStyle


def _record(msg="hello %s", args=("world",), level=logging.INFO, ctx=None):
    rec = logging.LogRecord("ntuserprep", level, __file__, 10, msg, args, None)
    if ctx is not None:
        rec.ctx = ctx
    return rec


@pytest.mark.unit
class TestLevels:
    @pytest.mark.parametrize(
        "verbose,quiet,level",
        [
            (0, 0, logging.INFO),
            (1, 0, logging.INFO),
            (2, 0, logging.DEBUG),
            (3, 0, TRACE),
            (0, 1, logging.WARNING),
            (3, 2, logging.ERROR),
        ],
    )
    def test_level_from_flags(self, verbose, quiet, level):
        assert Log._level_from_flags(verbose, quiet) == level


@pytest.mark.unit
class TestFormatters:
    def test_emoji_plain(self):
        f = EmojiFormatter(LogStyle(color=False, unicode=False))
        line = f.format(_record(ctx={"alias": "DefaultUser"}))
        assert "INFO" in line
        assert line.endswith("hello world alias=DefaultUser")

    def test_json(self):
        out = json.loads(JsonFormatter().format(_record(ctx={"rc": 1})))
        assert out["level"] == "INFO"
        assert out["msg"] == "hello world"
        assert out["ctx"] == {"rc": "1"}


@pytest.mark.unit
class TestSetup:
    def test_setup_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = Log.setup(verbose=2, log_file=str(log_file), logger_name="ntuserprep.test.file")
        Log.step(logger, "Mounting hive", alias="DefaultUser")
        for h in logger.handlers:
            h.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "Mounting hive" in text
        assert "alias=DefaultUser" in text
        assert logger.level == logging.DEBUG

    def test_setup_replaces_handlers(self):
        name = "ntuserprep.test.twice"
        Log.setup(logger_name=name)
        logger = Log.setup(logger_name=name, json_logs=True)
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_bind_merges_context(self):
        logger = logging.getLogger("ntuserprep.test.bind")
        adapter = Log.bind(logger, alias="DefaultUser").bind(root=r"HKU\DefaultUserTemp")
        _msg, kwargs = adapter.process("x", {"extra": {"ctx": {"rc": 0}}})
        assert kwargs["extra"]["ctx"] == {"alias": "DefaultUser", "root": r"HKU\DefaultUserTemp", "rc": 0}
