# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/cli/help_texts.py
from __future__ import annotations

YAML_EXAMPLE = r"""# ntuserprep config
# Run:
#   ntuserprep --config defaults.yaml
# or merge configs (later overrides earlier):
#   ntuserprep --config base.yaml --config site.yaml
hive: 'C:\Users\Default\NTUSER.DAT'
destination_key: 'HKU\DefaultUserTemp'
alias: DefaultUser
delay: 10
verify: true
report: 'C:\Windows\Temp\ntuserprep-report.json'

# Replace the built-in table with `settings:` or add to it with `extra_settings:`.
# Integers are written as REG_DWORD, everything else as REG_SZ.
extra_settings:
  - path: 'Control Panel\Desktop'
    values:
      WallpaperStyle: "10"
  - path: 'Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced'
    values:
      Hidden: 1
"""

OFFLINE_EXAMPLE = r"""# Offline edit of a mounted Windows image (Linux, python-hivex):
#   ntuserprep --backend hivex --hive /mnt/win/Users/Default/NTUSER.DAT --delay 0 --verify
"""

FEATURE_SUMMARY = """\
- Loads the Default User hive under a temporary key (reg.exe) or opens it offline (hivex)
- Creates missing keys, writes REG_DWORD / REG_SZ values (last write wins)
- Backs up the hive first (disable with --no-backup)
- Counts down before unloading; Ctrl+C unloads without committing
- Optional read-back verification and JSON report
"""
