# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0


class VehicleRecognitionError(Exception):
    """Base exception for the vehicle recognition brick."""

    pass


class ConfigError(VehicleRecognitionError):
    """Exception raised when the class configuration is invalid."""

    pass


class EmptyExampleStoreError(VehicleRecognitionError):
    """Exception raised when classifying before any training example was stored."""

    pass


class FrameSourceError(VehicleRecognitionError):
    """Exception raised when the frame source cannot be opened."""

    pass
