# SPDX-License-Identifier: LGPL-3.0-or-later
from .exceptions import Fatal, NtuserPrepError
from .logger import Log
from .utils import U

__all__ = ["Fatal", "Log", "NtuserPrepError", "U"]
