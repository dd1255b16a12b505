# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

"""
Frame preprocessing used ahead of embedding extraction: cropping, resizing,
colour space conversion and vector normalisation.
"""

import cv2
import numpy as np
from typing import Tuple

from lanecam.app_utils.image.pipeable import PipeableFunction

# NOTE: resolutions are passed as (W, H), frames are (H, W, C) numpy arrays in BGR order
# or (H, W) for single-channel frames.


def center_crop(frame: np.ndarray, ratio: float = 1.0) -> np.ndarray:
    """
    Crop the central region of a frame.

    Args:
        frame (np.ndarray): Input frame
        ratio (float): Fraction of width and height to keep, in (0, 1]. Default: 1.0 (no crop).

    Returns:
        np.ndarray: Cropped view of the frame
    """
    if not 0.0 < ratio <= 1.0:
        raise ValueError(f"Crop ratio must be in (0, 1], got {ratio}")
    if ratio == 1.0:
        return frame

    h, w = frame.shape[:2]
    ch, cw = max(1, int(h * ratio)), max(1, int(w * ratio))
    y0, x0 = (h - ch) // 2, (w - cw) // 2
    return frame[y0 : y0 + ch, x0 : x0 + cw]


def resize(frame: np.ndarray, target_size: Tuple[int, int], interpolation: int = cv2.INTER_AREA) -> np.ndarray:
    """
    Resize frame to target size.

    Args:
        frame (np.ndarray): Input frame
        target_size (tuple): Target size as (width, height)
        interpolation (int): OpenCV interpolation method. Default: cv2.INTER_AREA, best for downsampling.

    Returns:
        np.ndarray: Resized frame
    """
    if frame.shape[1] == target_size[0] and frame.shape[0] == target_size[1]:
        return frame
    return cv2.resize(frame, (int(target_size[0]), int(target_size[1])), interpolation=interpolation)


def greyscale(frame: np.ndarray) -> np.ndarray:
    """
    Convert a BGR or BGRA frame to a single-channel greyscale frame.
    Single-channel frames are returned unmodified.
    """
    if frame.ndim == 2:
        return frame
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def to_hsv(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR frame to HSV (OpenCV ranges: H in [0, 180), S and V in [0, 256))."""
    if frame.ndim != 3 or frame.shape[2] not in (3, 4):
        raise ValueError("Frame must be BGR or BGRA (H, W, 3|4)")
    if frame.shape[2] == 4:
        frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    return cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)


def l2_normalize(vector: np.ndarray, eps: float = 1e-10) -> np.ndarray:
    """
    Scale a vector to unit L2 norm. Zero vectors are returned as zeros.

    Returns:
        np.ndarray: float32 vector
    """
    vector = np.asarray(vector, dtype=np.float32)
    norm = float(np.linalg.norm(vector))
    if norm < eps:
        return np.zeros_like(vector)
    return vector / norm


# =============================================================================
# Functional API - Standalone pipeable functions
# =============================================================================


def center_cropped(ratio: float = 1.0):
    """
    Pipeable center crop.

    Examples:
        pipe = center_cropped(0.6) | resized((227, 227))
    """
    return PipeableFunction(center_crop, ratio=ratio)


def resized(target_size: Tuple[int, int], interpolation: int = cv2.INTER_AREA):
    """
    Pipeable resize.

    Examples:
        pipe = resized((227, 227)) | greyscaled()
    """
    return PipeableFunction(resize, target_size=target_size, interpolation=interpolation)


def greyscaled():
    """Pipeable greyscale conversion."""
    return PipeableFunction(greyscale)


def hsv_converted():
    """Pipeable BGR to HSV conversion."""
    return PipeableFunction(to_hsv)
