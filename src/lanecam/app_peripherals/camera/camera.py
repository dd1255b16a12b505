# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import os
from collections.abc import Callable

import numpy as np

from .base_camera import BaseCamera
from .cv_camera import OpenCVCamera


class Camera:
    """
    Camera factory.

    Creates the camera implementation for a source. When no source is given, the
    LANECAM_CAMERA environment variable is used, falling back to device 0.

    Note: constructor arguments (except those in signature) must be provided in
    keyword format to forward them correctly to the camera implementation.
    """

    def __new__(
        cls,
        source: str | int | None = None,
        resolution: tuple[int, int] | None = (640, 480),
        fps: int = 10,
        adjustments: Callable[[np.ndarray], np.ndarray] | None = None,
        **kwargs,
    ) -> BaseCamera:
        """Create a camera instance based on the source.

        Args:
            source (str | int, optional): Device index ("0", 1), device path ("/dev/video0"),
                stream URL ("rtsp://...", "http://...") or video file path.
            resolution (tuple, optional): Frame resolution as (width, height). Default: (640, 480)
            fps (int, optional): Target frames per second. Default: 10
            adjustments (callable, optional): Function pipeline applied to every frame.
            **kwargs: Forwarded to OpenCVCamera (username, password, timeout, loop, auto_reconnect).

        Returns:
            BaseCamera: Camera implementation instance

        Raises:
            CameraConfigError: If the source is not supported

        Examples:
            ```python
            camera = Camera(0, fps=30)
            camera = Camera("rtsp://192.168.1.100:554/lane", username="admin", password="secret")
            camera = Camera("recordings/lane.mp4", loop=True)
            ```
        """
        if source is None:
            source = os.getenv("LANECAM_CAMERA", "0")
        return OpenCVCamera(source, resolution=resolution, fps=fps, adjustments=adjustments, **kwargs)
