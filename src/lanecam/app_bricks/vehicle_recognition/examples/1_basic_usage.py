# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

# EXAMPLE_NAME = "Basic usage of the Vehicle Recognition Brick"

from lanecam.app_utils import App
from lanecam.app_bricks.vehicle_recognition import VehicleRecognition

# Class 0 is the empty lane: it is trained like any other class but never notifies.
recognition = VehicleRecognition(
    classes=[
        {"label": "empty lane", "percent": 0.9},
        {"label": "car", "percent": 0.7, "url": "http://localhost:8000/events", "data": {"vehicle": "car"}},
        {"label": "truck", "percent": 0.7, "url": "http://localhost:8000/events", "data": {"vehicle": "truck"}},
    ],
    sensor_id="lane-01",
    direction="north",
)


def on_classification(prediction):
    print("Predicted class:", prediction.class_index, "status:", recognition.status_lines())


recognition.on_classification(on_classification)

App.run()
