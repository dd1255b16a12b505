# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import math
from collections import OrderedDict
from collections.abc import Hashable, Sequence

from lanecam.app_utils import Logger

from .types import ClassConfig, DedupScope, DedupScopeValues, OutboundEvent, SessionMetadata

logger = Logger("Dispatcher")


def _bucket_second(key: Hashable) -> int:
    return key[1] if isinstance(key, tuple) else key


class DedupState:
    """Set of time buckets for which a notification was already sent.

    A bucket is either a second (global scope) or a ``(class_index, second)`` pair. Marked
    buckets stay marked while their second is within ``retention_seconds`` of the newest
    marked second; other buckets are evicted on every mark so the state stays bounded.
    If the clock steps back by more than the retention window, the window restarts at the
    bucket being marked.
    """

    def __init__(self, retention_seconds: int = 5):
        if retention_seconds < 1:
            raise ValueError("retention_seconds must be at least 1")
        self.retention_seconds = retention_seconds
        self._buckets: OrderedDict[Hashable, None] = OrderedDict()
        self._newest_second: int | None = None

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, key: Hashable) -> bool:
        return self.is_marked(key)

    def is_marked(self, key: Hashable) -> bool:
        return key in self._buckets

    def mark(self, key: Hashable) -> None:
        second = _bucket_second(key)
        newest = self._newest_second
        if newest is None or second > newest or second <= newest - self.retention_seconds:
            self._newest_second = second
        self._buckets[key] = None
        self._evict(keep=key)

    def _evict(self, keep: Hashable) -> None:
        horizon = self._newest_second - self.retention_seconds
        stale = [k for k in self._buckets if k != keep and not horizon < _bucket_second(k) <= self._newest_second]
        for key in stale:
            del self._buckets[key]


class DispatchController:
    """Turns confidence vectors into de-duplicated outbound notifications.

    With the default ``"class"`` scope each class notifies at most once per wall-clock second.
    The ``"global"`` scope allows a single notification per second across all classes.
    """

    def __init__(
        self,
        class_configs: Sequence[ClassConfig],
        metadata: SessionMetadata | None = None,
        scope: DedupScope = "class",
        dedup: DedupState | None = None,
    ):
        if not class_configs:
            raise ValueError("At least one class configuration is required")
        if scope not in DedupScopeValues:
            raise ValueError(f"Invalid dedup scope '{scope}'. Must be one of {DedupScopeValues}")
        self.class_configs = list(class_configs)
        self.metadata = metadata if metadata is not None else SessionMetadata()
        self.scope = scope
        self.dedup = dedup if dedup is not None else DedupState()

    @property
    def num_classes(self) -> int:
        return len(self.class_configs)

    def bucket_key(self, class_index: int, now_seconds: float) -> Hashable:
        second = math.floor(now_seconds)
        return second if self.scope == "global" else (class_index, second)

    def evaluate(self, confidences: Sequence[float], example_counts: Sequence[int], now_seconds: float) -> list[OutboundEvent]:
        """
        Decide which classes to notify for one classified frame.

        Args:
            confidences: Vote fraction per class.
            example_counts: Stored examples per class.
            now_seconds (float): Current unix time in seconds.

        Returns:
            list[OutboundEvent]: Events to send, in class order. Empty when nothing qualifies.

        Raises:
            ValueError: If the inputs do not have one entry per configured class.
        """
        if len(confidences) != self.num_classes or len(example_counts) != self.num_classes:
            raise ValueError(
                f"Expected {self.num_classes} confidences and example counts, got {len(confidences)} and {len(example_counts)}"
            )

        events = []
        for config, confidence, count in zip(self.class_configs, confidences, example_counts):
            if count == 0:
                continue

            key = self.bucket_key(config.index, now_seconds)
            if self.dedup.is_marked(key):
                logger.debug(f"Class {config.index} already notified for bucket {key}, skipping")
                continue

            if confidence >= config.confidence_threshold and config.notifies:
                self.dedup.mark(key)
                events.append(self._build_event(config, math.floor(now_seconds)))
            elif not config.notifies:
                logger.debug(f"No webhook configured for class {config.index}, skipping")

        return events

    def _build_event(self, config: ClassConfig, timestamp: int) -> OutboundEvent:
        payload = dict(config.extra_payload)
        payload.update(timestamp=timestamp, sensor_id=self.metadata.sensor_id, direction=self.metadata.direction)
        logger.info(f"Class {config.index} ({config.label}) recognised, notifying {config.webhook_url}")
        return OutboundEvent(config.index, config.webhook_url, payload)

    def status_lines(self, confidences: Sequence[float] | None, example_counts: Sequence[int]) -> list[str]:
        """Human readable status of every class, e.g. ``"12 examples - 70%"``."""
        lines = []
        for i, count in enumerate(example_counts):
            if count == 0:
                lines.append("No examples added. Click to train")
            elif confidences is None:
                lines.append(f"{count} examples")
            else:
                lines.append(f"{count} examples - {confidences[i] * 100:.0f}%")
        return lines
