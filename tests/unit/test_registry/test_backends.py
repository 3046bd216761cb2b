# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for the hivex and reg.exe backends."""
from __future__ import annotations

import subprocess

import pytest

from fakes.fake_hivex import FakeHivexDisk
from fakes.fake_logger import FakeLogger
from fakes.fake_winreg import FakeRegExe, FakeWinreg
from ntuserprep.core.exceptions import Fatal, HiveError
from ntuserprep.registry.backends import (
    HivexBackend,
    RegExeBackend,
    make_backend,
    normalize_root,
)
from ntuserprep.registry.settings import REG_DWORD, REG_SZ

ROOT = r"HKU\DefaultUserTemp"


@pytest.mark.unit
class TestNormalizeRoot:
    @pytest.mark.parametrize(
        "raw,want",
        [
            ("DefaultUserTemp", r"HKU\DefaultUserTemp"),
            (r"HKU\DefaultUserTemp", r"HKU\DefaultUserTemp"),
            (r"HKEY_USERS\DefaultUserTemp", r"HKU\DefaultUserTemp"),
            (r"hklm\Offline", r"HKLM\Offline"),
            ("HKU/DefaultUserTemp/", r"HKU\DefaultUserTemp"),
        ],
    )
    def test_ok(self, raw, want):
        assert normalize_root(raw) == want

    @pytest.mark.parametrize("raw", ["", "HKU", r"HKU\a\b", r"HKCU\x", r"Foo\Bar"])
    def test_rejected(self, raw):
        with pytest.raises(Fatal):
            normalize_root(raw)


@pytest.mark.unit
def test_make_backend_unknown():
    with pytest.raises(Fatal, match="unknown backend"):
        make_backend("regedit", FakeLogger())


@pytest.mark.unit
class TestHivexBackend:
    def _backend(self, write=True):
        disk = FakeHivexDisk()
        return HivexBackend(FakeLogger(), opener=disk.opener, write=write), disk

    def test_write_commit_persists(self, hive_file):
        b, disk = self._backend()
        assert b.load(hive_file, ROOT) == 0
        assert b.ensure_key(ROOT, "Control Panel\\Desktop") == ["Control Panel", "Control Panel\\Desktop"]
        b.set_value(ROOT, "Control Panel\\Desktop", "MenuShowDelay", REG_SZ, "200")
        b.set_value(ROOT, "Control Panel\\Desktop", "AutoEndTasks", REG_DWORD, 1)
        assert b.get_value(ROOT, "Control Panel\\Desktop", "AutoEndTasks") == (REG_DWORD, 1)
        assert b.unload(ROOT) == 0

        assert disk.lookup(hive_file, "Control Panel\\Desktop", "MenuShowDelay") == (REG_SZ, "200\0".encode("utf-16le"))
        assert disk.opened[0].commits == 1
        assert disk.opened[0].closed

    def test_unload_without_commit_discards(self, hive_file):
        b, disk = self._backend()
        b.load(hive_file, ROOT)
        b.ensure_key(ROOT, "K")
        b.set_value(ROOT, "K", "A", REG_DWORD, 1)
        assert b.unload(ROOT, commit=False) == 0
        assert disk.lookup(hive_file, "K", "A") is None
        assert disk.opened[0].commits == 0

    def test_clean_hive_is_not_committed(self, hive_file):
        b, disk = self._backend()
        b.load(hive_file, ROOT)
        b.unload(ROOT)
        assert disk.opened[0].commits == 0

    def test_read_only_never_commits(self, hive_file):
        b, disk = self._backend(write=False)
        b.load(hive_file, ROOT)
        b.ensure_key(ROOT, "K")
        assert b.unload(ROOT) == 0
        assert disk.opened[0].commits == 0

    def test_double_load_fails(self, hive_file):
        b, _disk = self._backend()
        assert b.load(hive_file, ROOT) == 0
        assert b.load(hive_file, ROOT) == 1

    def test_root_lookup_is_case_insensitive(self, hive_file):
        b, _disk = self._backend()
        b.load(hive_file, ROOT)
        assert b.is_loaded(ROOT.lower())

    def test_load_bad_file(self, tmp_path):
        b, _disk = self._backend()
        bad = tmp_path / "bad"
        bad.write_bytes(b"nope")
        assert b.load(bad, ROOT) == 1
        assert not b.is_loaded(ROOT)

    def test_unload_not_loaded(self):
        b, _disk = self._backend()
        assert b.unload(ROOT) == 1

    def test_set_value_requires_key(self, hive_file):
        b, _disk = self._backend()
        b.load(hive_file, ROOT)
        with pytest.raises(HiveError, match="key does not exist"):
            b.set_value(ROOT, "Missing", "A", REG_DWORD, 1)

    def test_operations_on_unloaded_root(self):
        b, _disk = self._backend()
        with pytest.raises(HiveError):
            b.ensure_key(ROOT, "K")


@pytest.mark.unit
class TestRegExeBackend:
    def _backend(self):
        w = FakeWinreg()
        reg = FakeRegExe(w)
        return RegExeBackend(FakeLogger(), runner=reg, winreg_module=w), reg, w

    def test_load_runs_reg_exe(self, hive_file):
        b, reg, _w = self._backend()
        assert b.load(hive_file, ROOT) == 0
        assert reg.calls == [["reg.exe", "load", ROOT, str(hive_file)]]
        assert b.is_loaded(ROOT)

    def test_load_failure_status(self, hive_file):
        b, reg, _w = self._backend()
        reg.fail["load"] = 1
        assert b.load(hive_file, ROOT) == 1
        assert not b.is_loaded(ROOT)

    def test_write_and_read(self, hive_file):
        b, _reg, w = self._backend()
        b.load(hive_file, ROOT)
        assert b.ensure_key(ROOT, "Software\\Microsoft") == ["Software", "Software\\Microsoft"]
        assert b.ensure_key(ROOT, "Software\\Microsoft") == []
        b.set_value(ROOT, "Software\\Microsoft", "Enabled", w.REG_DWORD, 0)
        b.set_value(ROOT, "Software\\Microsoft", "Name", w.REG_SZ, "x")
        assert b.get_value(ROOT, "Software\\Microsoft", "Enabled") == (w.REG_DWORD, 0)
        assert b.get_value(ROOT, "Software\\Microsoft", "Name") == (w.REG_SZ, "x")
        assert b.get_value(ROOT, "Nope", "Name") is None
        assert w.open_handles == 0

    def test_unload(self, hive_file):
        b, reg, _w = self._backend()
        b.load(hive_file, ROOT)
        assert b.unload(ROOT) == 0
        assert reg.calls[-1] == ["reg.exe", "unload", ROOT]
        assert not b.is_loaded(ROOT)

    def test_hklm_root(self, hive_file):
        b, _reg, w = self._backend()
        b.load(hive_file, r"HKLM\Offline")
        assert (w.HKEY_LOCAL_MACHINE, "offline") in w.keys

    def test_needs_windows_without_injected_winreg(self, monkeypatch):
        monkeypatch.setattr("ntuserprep.registry.backends.reg_exe.U.is_windows", staticmethod(lambda: False))
        b = RegExeBackend(FakeLogger(), runner=lambda cmd: None)
        with pytest.raises(Fatal, match="only runs on Windows"):
            b.is_loaded(ROOT)


@pytest.mark.unit
class TestRegExeProcessFailures:
    """Without an injected runner, reg.exe failures surface as exit statuses."""

    def _backend(self, reg_exe="reg.exe"):
        return RegExeBackend(FakeLogger(), winreg_module=FakeWinreg(), reg_exe=reg_exe, timeout=5)

    def test_missing_reg_exe_is_status_127(self, hive_file, tmp_path):
        b = self._backend(reg_exe=str(tmp_path / "missing" / "reg.exe"))
        assert b.load(hive_file, ROOT) == 127
        assert b.unload(ROOT) == 127

    def test_nonzero_exit_is_returned(self, hive_file, monkeypatch):
        def run(cmd, **kw):
            raise subprocess.CalledProcessError(1, cmd, output="", stderr="ERROR: Access is denied.")

        monkeypatch.setattr(subprocess, "run", run)
        assert self._backend().load(hive_file, ROOT) == 1

    def test_timeout_is_status_124(self, monkeypatch):
        def run(cmd, **kw):
            assert kw["timeout"] == 5
            raise subprocess.TimeoutExpired(cmd, kw["timeout"])

        monkeypatch.setattr(subprocess, "run", run)
        assert self._backend().unload(ROOT) == 124

    def test_success(self, hive_file, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run", lambda cmd, **kw: subprocess.CompletedProcess(cmd, 0, stdout="ok", stderr="")
        )
        assert self._backend().load(hive_file, ROOT) == 0
