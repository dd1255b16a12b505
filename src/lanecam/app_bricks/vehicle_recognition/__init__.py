# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from .vehicle_recognition import VehicleRecognition
from .config import load_class_configs
from .dispatcher import DedupState, DispatchController
from .embedding import ColorHistogramEmbedder, EmbeddingExtractor, PixelEmbedder
from .errors import *
from .example_store import ExampleStore
from .frame_loop import CameraFrameSource, FrameLoop, FrameSource
from .knn import KNNClassifier
from .notifier import WebhookNotifier
from .training import TrainingInput
from .types import ClassConfig, OutboundEvent, Prediction, SessionMetadata, TrainingExample

__all__ = [
    "VehicleRecognition",
    "load_class_configs",
    "DedupState",
    "DispatchController",
    "EmbeddingExtractor",
    "PixelEmbedder",
    "ColorHistogramEmbedder",
    "ExampleStore",
    "FrameLoop",
    "FrameSource",
    "CameraFrameSource",
    "KNNClassifier",
    "WebhookNotifier",
    "TrainingInput",
    "ClassConfig",
    "OutboundEvent",
    "Prediction",
    "SessionMetadata",
    "TrainingExample",
    "VehicleRecognitionError",
    "ConfigError",
    "EmptyExampleStoreError",
    "FrameSourceError",
]
