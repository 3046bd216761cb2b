# SPDX-License-Identifier: LGPL-3.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no OS registry access")


@pytest.fixture
def hive_file(tmp_path):
    """A file that passes the regf size/signature guard."""
    p = tmp_path / "NTUSER.DAT"
    p.write_bytes(b"regf" + b"\0" * 8188)
    return p
