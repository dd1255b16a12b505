# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .camera import Camera
from .base_camera import BaseCamera
from .cv_camera import OpenCVCamera
from .errors import *

__all__ = [
    "Camera",
    "BaseCamera",
    "OpenCVCamera",
    "CameraError",
    "CameraConfigError",
    "CameraOpenError",
    "CameraReadError",
    "CameraTransformError",
]
