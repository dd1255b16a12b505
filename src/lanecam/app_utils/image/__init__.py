# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .adjustments import *
from .pipeable import PipeableFunction

__all__ = [
    "center_crop",
    "resize",
    "greyscale",
    "to_hsv",
    "l2_normalize",
    "center_cropped",
    "resized",
    "greyscaled",
    "hsv_converted",
    "PipeableFunction",
]
