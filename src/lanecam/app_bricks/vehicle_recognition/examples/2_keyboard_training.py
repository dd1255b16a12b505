# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

# EXAMPLE_NAME = "Train classes from the keyboard with a live preview"
# Needs an OpenCV build with GUI support: pip install "lanecam[examples]", then
# pip uninstall opencv-python-headless so the GUI build provides cv2.

import time

import cv2

from lanecam.app_peripherals.camera import Camera
from lanecam.app_bricks.vehicle_recognition import VehicleRecognition, FrameSource

# Hold a digit key to train that class, press q to quit.
# Key auto-repeat keeps training active while the key is held.
HOLD_TIMEOUT = 0.25


class PreviewSource(FrameSource):
    """Camera source keeping the last frame for the preview window."""

    def __init__(self, camera):
        self.camera = camera
        self.last_frame = None

    def open(self):
        self.camera.start()

    def close(self):
        self.camera.stop()

    def is_ready(self):
        return self.camera.is_started()

    def current_frame(self):
        frame = self.camera.capture()
        if frame is not None:
            self.last_frame = frame.copy()
        return frame


source = PreviewSource(Camera(fps=30))
recognition = VehicleRecognition(classes="classes.json", camera=source)
recognition.start()

last_key_time = 0.0
try:
    while True:
        if source.last_frame is not None:
            preview = source.last_frame.copy()
            for i, line in enumerate(recognition.status_lines()):
                label = recognition.classes[i].label
                cv2.putText(preview, f"{i} {label}: {line}", (10, 25 + 22 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
            cv2.imshow("lanecam", preview)

        key = cv2.waitKey(30) & 0xFF
        if key == ord("q"):
            break
        if ord("0") <= key <= ord("9") and key - ord("0") < len(recognition.classes):
            recognition.train(key - ord("0"))
            last_key_time = time.monotonic()
        elif time.monotonic() - last_key_time > HOLD_TIMEOUT:
            recognition.stop_training()
finally:
    recognition.close()
    cv2.destroyAllWindows()
