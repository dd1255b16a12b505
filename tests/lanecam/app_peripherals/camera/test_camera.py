# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import pytest

from lanecam.app_peripherals.camera import Camera, CameraConfigError, OpenCVCamera


def test_camera_factory_with_device_index():
    """Test Camera factory with a device index."""
    camera = Camera(1)
    assert isinstance(camera, OpenCVCamera)
    assert camera.kind == "device"
    assert camera.source == 1


def test_camera_factory_with_rtsp_url():
    """Test Camera factory with RTSP URL and credentials."""
    camera = Camera("rtsp://192.168.1.100/lane", username="admin", password="secret")
    assert isinstance(camera, OpenCVCamera)
    assert camera.kind == "stream"
    assert camera.username == "admin"


def test_camera_factory_with_video_file():
    camera = Camera("recordings/lane.mp4", loop=True)
    assert camera.kind == "file"
    assert camera.loop


def test_camera_factory_forwards_params():
    """Test that the factory forwards resolution, fps and adjustments."""
    adj_func = lambda x: x
    camera = Camera(0, resolution=(1280, 720), fps=25, adjustments=adj_func, auto_reconnect=False)
    assert camera.resolution == (1280, 720)
    assert camera.fps == 25
    assert camera.adjustments is adj_func
    assert not camera.auto_reconnect


def test_camera_factory_default_source(monkeypatch):
    monkeypatch.delenv("LANECAM_CAMERA", raising=False)
    camera = Camera()
    assert camera.source == 0


def test_camera_factory_source_from_env(monkeypatch):
    monkeypatch.setenv("LANECAM_CAMERA", "rtsp://10.0.0.5:554/lane")
    camera = Camera()
    assert camera.kind == "stream"
    assert camera.source == "rtsp://10.0.0.5:554/lane"


def test_camera_factory_invalid_source():
    with pytest.raises(CameraConfigError):
        Camera("ftp://192.168.1.100/stream")
