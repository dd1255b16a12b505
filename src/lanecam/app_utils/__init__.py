# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .logger import Logger
from .app import App, AppController
from .brick import brick

__all__ = [
    "App",
    "AppController",
    "brick",
    "Logger",
]
