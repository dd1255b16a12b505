# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

"""
Pytest configuration shared by the lanecam tests.

Provides hardware-free frame sources, a controllable clock and a recording notifier so
the recognition loop can be exercised headlessly and deterministically.
"""

import threading

import numpy as np
import pytest

from lanecam.app_bricks.vehicle_recognition import ClassConfig, EmbeddingExtractor, FrameSource, SessionMetadata
from lanecam.app_peripherals.camera import BaseCamera


class FakeCamera(BaseCamera):
    """Concrete BaseCamera returning a fixed frame, with call tracking and failure injection."""

    def __init__(self, *args, **kwargs):
        self.should_fail_open = kwargs.pop("should_fail_open", False)
        self.should_fail_close = kwargs.pop("should_fail_close", False)
        self.should_fail_read = kwargs.pop("should_fail_read", False)
        self.open_error = kwargs.pop("open_error", RuntimeError("Camera open failed"))
        self.frame = kwargs.pop("frame", np.zeros((480, 640, 3), dtype=np.uint8))
        kwargs.setdefault("fps", 1000)

        super().__init__(*args, **kwargs)

        self.open_call_count = 0
        self.close_call_count = 0
        self.read_call_count = 0

    def _open_camera(self):
        self.open_call_count += 1
        if self.should_fail_open:
            raise self.open_error
        self._set_status("connected")

    def _close_camera(self):
        self.close_call_count += 1
        if self.should_fail_close:
            raise RuntimeError("Camera close failed")
        self._set_status("disconnected")

    def _read_frame(self):
        self.read_call_count += 1
        if self.should_fail_read:
            raise RuntimeError("Frame read failed")
        return self.frame


class FakeFrameSource(FrameSource):
    """Frame source serving queued frames (or a default frame) and tracking releases."""

    def __init__(self, frame=None, ready=True):
        self.default_frame = frame if frame is not None else np.zeros((4, 4, 3), dtype=np.uint8)
        self.ready = ready
        self.queue = []
        self.open_count = 0
        self.close_count = 0
        self.acquired = []
        self.released = []
        self.fail_open = None
        self.fail_release = False
        self.frame_served = threading.Event()

    def open(self):
        self.open_count += 1
        if self.fail_open is not None:
            raise self.fail_open

    def close(self):
        self.close_count += 1

    def is_ready(self):
        return self.ready

    def current_frame(self):
        frame = self.queue.pop(0) if self.queue else self.default_frame
        if frame is not None:
            self.acquired.append(frame)
        self.frame_served.set()
        return frame

    def release_frame(self, frame):
        self.released.append(frame)
        if self.fail_release:
            raise RuntimeError("release failed")


class VectorExtractor(EmbeddingExtractor):
    """Treats the first pixel row of a frame as its embedding, so tests choose embeddings directly."""

    def __init__(self, dimension=3):
        self._dimension = dimension
        self.calls = 0

    @property
    def dimension(self):
        return self._dimension

    def extract(self, frame):
        self.calls += 1
        return np.asarray(frame, dtype=np.float32).reshape(-1)[: self._dimension]


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def send(self, event):
        self.sent.append(event)

    def shutdown(self, wait=True):
        pass


def vector_frame(*values):
    """Frame whose embedding under VectorExtractor is ``values``."""
    return np.asarray(values, dtype=np.float32)


@pytest.fixture
def fake_camera():
    return FakeCamera()


@pytest.fixture
def frame_source():
    return FakeFrameSource(frame=vector_frame(1.0, 0.0, 0.0))


@pytest.fixture
def extractor():
    return VectorExtractor()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def metadata():
    return SessionMetadata(sensor_id="lane-01", direction="north")


@pytest.fixture
def class_configs():
    """Three classes: an empty lane that never notifies, then two vehicle classes with webhooks."""
    return [
        ClassConfig(0, "empty lane", 0.9),
        ClassConfig(1, "car", 0.6, "http://collector.local/car", {"vehicle": "car"}),
        ClassConfig(2, "truck", 0.6, "http://collector.local/truck", {"vehicle": "truck", "axles": 3}),
    ]
