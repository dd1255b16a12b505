# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0


class CameraError(Exception):
    """Base exception for frame acquisition errors."""

    pass


class CameraOpenError(CameraError):
    """Raised when the frame source cannot be opened (missing device, permission denied, unreachable stream)."""

    pass


class CameraReadError(CameraError):
    """Raised when a frame is requested from a camera that is not started."""

    pass


class CameraConfigError(CameraError):
    """Raised when the camera source or its parameters are invalid."""

    pass


class CameraTransformError(CameraError):
    """Raised when the configured frame adjustments fail."""

    pass
