# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import inspect
import os
import threading
from collections.abc import Mapping, Sequence
from typing import Callable

from lanecam.app_peripherals.camera import BaseCamera, Camera
from lanecam.app_utils import App, Logger, brick

from .config import load_class_configs
from .dispatcher import DispatchController
from .embedding import EmbeddingExtractor, PixelEmbedder
from .example_store import ExampleStore
from .frame_loop import CameraFrameSource, FrameLoop, FrameSource
from .knn import DEFAULT_TOPK, KNNClassifier
from .notifier import WebhookNotifier
from .training import TrainingInput
from .types import ClassConfig, DedupScope, Prediction, SessionMetadata

logger = Logger("VehicleRecognition")


@brick
class VehicleRecognition:
    """Live vehicle recognition on a camera feed with interactive training and webhook events.

    Classes are taught by holding ``train(i)`` while an example is in front of the camera.
    Once trained, every frame is classified by K-nearest-neighbour voting and a JSON POST is
    sent to the webhook of any class whose confidence reaches its threshold, at most once
    per class and second.
    """

    def __init__(
        self,
        classes: str | os.PathLike | Sequence[Mapping | ClassConfig] | None = None,
        camera: BaseCamera | FrameSource | None = None,
        extractor: EmbeddingExtractor | None = None,
        k: int | None = None,
        sensor_id: str | None = None,
        direction: str | None = None,
        fps: int = 30,
        dedup_scope: DedupScope = "class",
        notifier: WebhookNotifier | None = None,
    ):
        """Initialize the VehicleRecognition brick.

        Args:
            classes: Class configuration list or path to its JSON file. If None, read from the
                file named by LANECAM_CLASSES_FILE.
            camera (BaseCamera | FrameSource, optional): Frame provider. If None, a default camera
                is created (see LANECAM_CAMERA).
            extractor (EmbeddingExtractor, optional): Embedding extractor. Default: PixelEmbedder().
            k (int, optional): Neighbours used for voting. If None, LANECAM_TOPK or 10.
            sensor_id (str, optional): Sensor identity sent with events. If None, LANECAM_SENSOR_ID.
            direction (str, optional): Traffic direction sent with events. If None, LANECAM_DIRECTION.
            fps (int): Target frame rate of the loop. Default: 30.
            dedup_scope (str): "class" to notify each class at most once per second, "global"
                to send at most one notification per second overall. Default: "class".
            notifier (WebhookNotifier, optional): Event sender. Default: WebhookNotifier().

        Raises:
            ConfigError: If the class configuration is missing or invalid.
            ValueError: If k or fps are invalid.
        """
        if fps <= 0:
            raise ValueError("FPS must be a positive integer")

        self.classes: list[ClassConfig] = load_class_configs(classes)
        num_classes = len(self.classes)

        env_metadata = SessionMetadata.from_env()
        self.metadata = SessionMetadata(
            sensor_id=sensor_id if sensor_id is not None else env_metadata.sensor_id,
            direction=direction if direction is not None else env_metadata.direction,
        )
        if k is None:
            k = int(os.getenv("LANECAM_TOPK", DEFAULT_TOPK))

        if camera is None:
            camera = Camera(fps=fps)
        self._source = camera if isinstance(camera, FrameSource) else CameraFrameSource(camera)

        self.store = ExampleStore(num_classes)
        self.training = TrainingInput(num_classes)
        self.classifier = KNNClassifier(self.store, k=k)
        self.controller = DispatchController(self.classes, self.metadata, scope=dedup_scope)
        self.notifier = notifier if notifier is not None else WebhookNotifier()

        self._handlers: list[Callable[[Prediction], None]] = []
        self._handlers_lock = threading.Lock()

        self._loop = FrameLoop(
            self._source,
            extractor if extractor is not None else PixelEmbedder(),
            self.store,
            self.classifier,
            self.controller,
            notifier=self.notifier,
            training=self.training,
            interval=1.0 / fps,
            on_prediction=self._on_prediction,
        )

        logger.info(
            f"Configured {num_classes} classes, k={k}, sensor_id={self.metadata.sensor_id}, direction={self.metadata.direction}"
        )

    @property
    def state(self) -> str:
        return self._loop.state

    def start(self):
        """Start the camera and the recognition loop.

        Raises:
            CameraError: If the camera cannot be opened.
        """
        self._loop.start()

    def stop(self):
        """Stop the recognition loop and release the camera. Trained examples are kept."""
        self._loop.stop()

    def close(self):
        """Stop the loop and wait for pending notifications."""
        self.stop()
        self.notifier.shutdown(wait=True)
        App.unregister(self)

    def train(self, class_index: int):
        """Start adding frames as examples of a class, until ``stop_training()`` is called."""
        self.training.press(class_index)
        logger.debug(f"Training class {class_index}")

    def stop_training(self, class_index: int | None = None):
        self.training.release(class_index)

    def example_counts(self) -> list[int]:
        return self.store.count_per_class()

    def status_lines(self) -> list[str]:
        """Per-class status text, e.g. ``"12 examples - 70%"``."""
        prediction = self._loop.last_prediction
        counts = self.store.count_per_class()
        return self.controller.status_lines(prediction.confidences if prediction is not None else None, counts)

    def on_classification(self, callback: Callable[[Prediction], None]):
        """Register a callback invoked with the ``Prediction`` of every classified frame.

        Callbacks run on the loop thread and must return quickly. Exceptions are logged.

        Raises:
            TypeError: If `callback` is not callable.
            ValueError: If `callback` does not accept exactly one argument.
        """
        if not callable(callback):
            raise TypeError("Callback must be callable.")
        if len(inspect.signature(callback).parameters) != 1:
            raise ValueError("Callback must accept exactly one argument: the prediction.")

        with self._handlers_lock:
            self._handlers.append(callback)

    def _on_prediction(self, prediction: Prediction):
        logger.debug(f"Prediction: class {prediction.class_index}, status {self.status_lines()}")
        with self._handlers_lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(prediction)
            except Exception as e:
                logger.exception(f"Classification callback failed: {e}")
