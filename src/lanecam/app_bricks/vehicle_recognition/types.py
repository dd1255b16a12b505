# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping, get_args

import numpy as np

DedupScope = Literal["class", "global"]
DedupScopeValues = get_args(DedupScope)

LoopState = Literal["idle", "running", "stopped"]


@dataclass(frozen=True)
class TrainingExample:
    class_index: int
    embedding: np.ndarray


@dataclass(frozen=True)
class ClassConfig:
    """Static per-class configuration.

    Attributes:
        index: Position of the class, matching the training control index.
        label: Display label.
        confidence_threshold: Minimum vote fraction in [0, 1] for a notification.
        webhook_url: Endpoint receiving the notification, empty to never notify.
        extra_payload: Fields sent with every notification of this class.
    """

    index: int
    label: str
    confidence_threshold: float
    webhook_url: str = ""
    extra_payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}")
        object.__setattr__(self, "extra_payload", MappingProxyType(dict(self.extra_payload)))

    @property
    def notifies(self) -> bool:
        return bool(self.webhook_url)


@dataclass(frozen=True)
class SessionMetadata:
    """Sensor identity attached unchanged to every outbound event of the session."""

    sensor_id: str | None = None
    direction: str | None = None

    @classmethod
    def from_env(cls) -> SessionMetadata:
        return cls(sensor_id=os.getenv("LANECAM_SENSOR_ID"), direction=os.getenv("LANECAM_DIRECTION"))


@dataclass(frozen=True)
class OutboundEvent:
    class_index: int
    url: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class Prediction:
    """Outcome of classifying one frame.

    Attributes:
        class_index: Class with the highest confidence (lowest index on ties).
        confidences: Vote fraction per class.
        example_counts: Stored examples per class at classification time.
    """

    class_index: int
    confidences: np.ndarray
    example_counts: list[int]
