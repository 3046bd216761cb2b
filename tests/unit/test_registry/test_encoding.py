# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for REG_SZ/REG_DWORD encoding and hivex path helpers."""
from __future__ import annotations

import pytest

from fakes.fake_hivex import FakeHivexDisk
from ntuserprep.registry import encoding as E
from ntuserprep.registry.settings import REG_DWORD, REG_SZ


@pytest.mark.unit
class TestEncoding:
    def test_reg_sz_is_utf16le_with_terminator(self):
        assert E._reg_sz("ab") == b"a\x00b\x00\x00\x00"

    def test_decode_reg_sz_stops_at_nul(self):
        assert E._decode_reg_sz("ab\0junk".encode("utf-16le")) == "ab"

    def test_decode_reg_sz_odd_length(self):
        assert E._decode_reg_sz(b"a\x00b") == "a"

    def test_reg_dword_little_endian(self):
        assert E._reg_dword(1) == b"\x01\x00\x00\x00"
        assert E._reg_dword(-1) == b"\xff\xff\xff\xff"

    def test_decode_short_dword(self):
        assert E._decode_reg_dword(b"\x01") is None

    def test_node_id_normalization(self):
        assert E._node_id(None) == 0
        assert E._node_id(7) == 7
        assert E._node_id("x") == 0  # type: ignore[arg-type]
        assert not E._node_ok(0)


@pytest.mark.unit
class TestHivexPaths:
    def _handle(self, hive_file):
        return FakeHivexDisk().opener(str(hive_file), write=True)

    def test_ensure_path_creates_intermediates(self, hive_file):
        h = self._handle(hive_file)
        node, created = E._ensure_path(h, h.root(), "Software\\Microsoft\\Windows")
        assert node != 0
        assert created == ["Software", "Software\\Microsoft", "Software\\Microsoft\\Windows"]

    def test_ensure_path_existing_creates_nothing(self, hive_file):
        h = self._handle(hive_file)
        first, _ = E._ensure_path(h, h.root(), "A\\B")
        again, created = E._ensure_path(h, h.root(), "a\\b")
        assert again == first
        assert created == []

    def test_find_path_missing(self, hive_file):
        h = self._handle(hive_file)
        assert E._find_path(h, h.root(), "Nope\\Deeper") == 0

    def test_set_and_read_values(self, hive_file):
        h = self._handle(hive_file)
        node, _ = E._ensure_path(h, h.root(), "Control Panel\\Desktop")
        E._set_sz(h, node, "MenuShowDelay", "200")
        E._set_dword(h, node, "AutoEndTasks", 1)
        assert E._hivex_read_value(h, node, "MenuShowDelay") == (REG_SZ, "200")
        assert E._hivex_read_value(h, node, "autoendtasks") == (REG_DWORD, 1)
        assert E._hivex_read_value(h, node, "Missing") is None

    def test_set_on_invalid_node_raises(self, hive_file):
        h = self._handle(hive_file)
        with pytest.raises(RuntimeError):
            E._set_dword(h, 0, "X", 1)


@pytest.mark.unit
class TestOpenHiveLocal:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            E._open_hive_local(tmp_path / "nope", write=False, opener=FakeHivexDisk().opener)

    def test_too_small(self, tmp_path):
        p = tmp_path / "small"
        p.write_bytes(b"regf")
        with pytest.raises(RuntimeError, match="too small"):
            E._open_hive_local(p, write=False, opener=FakeHivexDisk().opener)

    def test_bad_signature(self, tmp_path):
        p = tmp_path / "bad"
        p.write_bytes(b"\0" * 8192)
        with pytest.raises(RuntimeError, match="regf"):
            E._open_hive_local(p, write=False, opener=FakeHivexDisk().opener)

    def test_ok(self, hive_file):
        h = E._open_hive_local(hive_file, write=True, opener=FakeHivexDisk().opener)
        assert h.write is True
