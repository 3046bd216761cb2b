# SPDX-License-Identifier: LGPL-3.0-or-later
# ntuserprep/registry/__init__.py
"""
Registry hive handling:
- settings: the Default User settings table and value typing
- encoding: REG_SZ / REG_DWORD encoding and hivex node helpers
- backends: reg.exe + winreg (live) and python-hivex (offline)
- mount: alias-based hive mount/unmount
- apply: writing and verifying settings
"""

__all__ = []
