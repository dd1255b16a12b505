# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import os
import time
from collections.abc import Callable
from urllib.parse import urlparse

import cv2
import numpy as np
import requests

from lanecam.app_utils import Logger

from .base_camera import BaseCamera
from .errors import CameraConfigError, CameraOpenError, CameraReadError

logger = Logger("OpenCVCamera")

STREAM_SCHEMES = ("http", "https", "rtsp")


class OpenCVCamera(BaseCamera):
    """
    Camera backed by ``cv2.VideoCapture``.

    Handles local devices (index or /dev/video path), network streams (RTSP, HTTP, HTTPS) and
    recorded video files, the latter being useful to replay a lane recording offline.
    """

    def __init__(
        self,
        source: str | int = 0,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
        loop: bool = False,
        resolution: tuple[int, int] | None = (640, 480),
        fps: int = 10,
        adjustments: Callable[[np.ndarray], np.ndarray] | None = None,
        auto_reconnect: bool = True,
    ):
        """
        Initialize the camera.

        Args:
            source: Device index (e.g. 0), device path (e.g. "/dev/video0"), stream URL
                (e.g. "rtsp://...") or path to a video file.
            username (str, optional): Stream authentication username.
            password (str, optional): Stream authentication password.
            timeout (float): Connectivity test timeout for HTTP streams, in seconds. Default: 10.
            loop (bool): Rewind video files when they end instead of reporting no frames. Default: False.
            resolution (tuple, optional): Resolution as (width, height), applied to devices only.
            fps (int): Frames per second to capture.
            adjustments (callable, optional): Function or function pipeline applied to every frame.
            auto_reconnect (bool): Enable automatic reconnection on failure. Default: True.

        Raises:
            CameraConfigError: If the source cannot be interpreted.
        """
        super().__init__(resolution, fps, adjustments, auto_reconnect)
        self.username = username
        self.password = password
        self.timeout = timeout
        self.loop = loop
        self.logger = logger

        self.kind, self.source = self._classify_source(source)
        self.name = f"{self.__class__.__name__}({self.source})"

        self._cap = None
        self._last_reconnection_attempt = 0.0

    @staticmethod
    def _classify_source(source: str | int) -> tuple[str, str | int]:
        if isinstance(source, bool) or not isinstance(source, (str, int)):
            raise CameraConfigError(f"Invalid source type: {type(source)}")
        if isinstance(source, int):
            if source < 0:
                raise CameraConfigError(f"Camera index must be non-negative, got {source}")
            return "device", source
        if source.isdigit():
            return "device", int(source)
        if source.startswith("/dev/"):
            return "device", source

        parsed = urlparse(source)
        if parsed.scheme in STREAM_SCHEMES:
            if not parsed.hostname:
                raise CameraConfigError(f"Invalid stream URL: {source}")
            return "stream", source
        if parsed.scheme and len(parsed.scheme) > 1:
            raise CameraConfigError(f"Unsupported URL scheme: {parsed.scheme}")
        return "file", source

    def _build_url(self) -> str:
        """Build the stream URL with authentication if credentials are provided."""
        if not self.username or not self.password:
            return self.source

        parsed = urlparse(self.source)
        auth_netloc = f"{self.username}:{self.password}@{parsed.hostname}"
        if parsed.port:
            auth_netloc += f":{parsed.port}"
        return f"{parsed.scheme}://{auth_netloc}{parsed.path}"

    def _check_available(self) -> None:
        """Fail fast on conditions retries cannot fix."""
        if self.kind in ("device", "file") and isinstance(self.source, str):
            if not os.path.exists(self.source):
                raise CameraOpenError(f"No {'device' if self.kind == 'device' else 'file'} found at {self.source}")
            if not os.access(self.source, os.R_OK):
                raise CameraOpenError(f"Permission denied for {self.source}")

    def _test_http_connectivity(self) -> None:
        try:
            auth = (self.username, self.password) if self.username and self.password else None
            response = requests.head(self.source, auth=auth, timeout=self.timeout, allow_redirects=True)
            if response.status_code in (401, 403):
                raise CameraOpenError(f"Access denied by HTTP camera ({response.status_code}): {self.source}")
            if response.status_code not in (200, 206):
                raise RuntimeError(f"HTTP camera returned status {response.status_code}: {self.source}")
        except requests.RequestException as e:
            raise RuntimeError(f"Cannot connect to HTTP camera {self.source}: {e}")

    def _open_camera(self) -> None:
        self._close_camera()
        self._check_available()

        if self.kind == "stream" and self.source.startswith(("http://", "https://")):
            self._test_http_connectivity()

        target = self._build_url() if self.kind == "stream" else self.source
        try:
            self._cap = cv2.VideoCapture(target)
            if not self._cap.isOpened():
                raise RuntimeError(f"Failed to open {self.name}")

            if self.kind != "file":
                self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)  # Keep latency low on live sources

            if self.kind == "device" and self.resolution and self.resolution[0] and self.resolution[1]:
                self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
                self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
                actual = (int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)), int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))
                if actual != tuple(self.resolution):
                    logger.warning(f"{self.name} resolution set to {actual[0]}x{actual[1]} instead of requested {self.resolution[0]}x{self.resolution[1]}")
                    self.resolution = actual

            ret, frame = self._cap.read()
            if not ret and frame is None:
                raise RuntimeError(f"Read test failed for {self.name}")
            if self.kind == "file":
                self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0)

            self._set_status("connected", {"camera_name": self.name, "source": str(self.source)})

        except Exception as e:
            logger.error(f"Unexpected error opening {self.name}: {e}")
            if self._cap is not None:
                self._cap.release()
                self._cap = None
            raise

    def _close_camera(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self._set_status("disconnected", {"camera_name": self.name, "source": str(self.source)})

    def _read_frame(self) -> np.ndarray | None:
        """Read a frame, reconnecting on failure if enabled. Returns None when no frame is available."""
        try:
            if self._cap is None:
                if not self.auto_reconnect:
                    return None

                elapsed = time.monotonic() - self._last_reconnection_attempt
                if elapsed < self.reconnect_delay:
                    time.sleep(self.reconnect_delay - elapsed)
                self._last_reconnection_attempt = time.monotonic()

                self._open_camera()
                self.logger.info(f"Successfully reopened {self.name}")

            ret, frame = self._cap.read()
            if not ret and self.kind == "file":
                if not self.loop:
                    return None
                self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                ret, frame = self._cap.read()

            if (not ret and frame is None) or not self._cap.isOpened():
                raise CameraReadError("Invalid frame returned")

            return frame

        except Exception as e:
            self.logger.error(
                f"Failed to read from {self.name}: {e}."
                f"{' Retrying...' if self.auto_reconnect else ' Auto-reconnect is disabled, please restart the app.'}"
            )
            self._close_camera()
            return None
