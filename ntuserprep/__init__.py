# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# ntuserprep/__init__.py
"""
ntuserprep - Default User registry provisioning

Loads the Default User hive (NTUSER.DAT), writes a table of settings every
new profile inherits, counts down, and unloads the hive.

Usage as a library:

    from ntuserprep import Provisioner, Setting
    from ntuserprep.core.logger import Log

    logger = Log.setup(verbose=1)
    args = argparse.Namespace(hive="/mnt/win/Users/Default/NTUSER.DAT", backend="hivex", delay=0)
    Provisioner(logger, args, settings=[Setting(r"Control Panel\\Desktop", {"MenuShowDelay": "200"})]).run()
"""

__version__ = "0.1.0"

from .provision import Provisioner
from .registry.mount import HiveMounter, MountedHive
from .registry.settings import DEFAULT_SETTINGS, Setting

__all__ = [
    "__version__",
    "DEFAULT_SETTINGS",
    "HiveMounter",
    "MountedHive",
    "Provisioner",
    "Setting",
]
