# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import json
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from lanecam.app_utils import Logger

from .errors import ConfigError
from .types import ClassConfig

logger = Logger("Config")


def load_class_configs(source: str | os.PathLike | Sequence[Mapping] | None = None) -> list[ClassConfig]:
    """Load the per-class configuration.

    Each entry is a mapping with the keys:
        - ``label`` (str, optional): display label, defaults to "Class <index>".
        - ``percent`` or ``confidence_threshold`` (float): minimum confidence in [0, 1].
        - ``url`` (str, optional): webhook URL, empty or missing to never notify.
        - ``data`` (dict, optional): extra fields sent with every notification.

    The class index is the position of the entry in the list.

    Args:
        source: Path to a JSON file holding the list, the list itself, or None to read the
            path from the LANECAM_CLASSES_FILE environment variable.

    Returns:
        list[ClassConfig]: One configuration per class, in index order.

    Raises:
        ConfigError: If the configuration cannot be read or an entry is invalid.
    """
    if source is None:
        source = os.getenv("LANECAM_CLASSES_FILE")
        if not source:
            raise ConfigError("No class configuration given and LANECAM_CLASSES_FILE is not set")

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        try:
            with open(path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read class configuration {path}: {e}")
        logger.info(f"Loaded class configuration from {path}")
    else:
        entries = source

    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)) or not entries:
        raise ConfigError("Class configuration must be a non-empty list")

    return [_parse_entry(i, entry) for i, entry in enumerate(entries)]


def _parse_entry(index: int, entry) -> ClassConfig:
    if isinstance(entry, ClassConfig):
        if entry.index != index:
            raise ConfigError(f"Class {index}: configuration has index {entry.index}")
        return entry
    if not isinstance(entry, Mapping):
        raise ConfigError(f"Class {index}: entry must be a mapping, got {type(entry).__name__}")

    threshold = entry.get("confidence_threshold", entry.get("percent"))
    if threshold is None:
        raise ConfigError(f"Class {index}: missing 'percent' (confidence threshold)")

    url = entry.get("url") or ""
    data = entry.get("data") or {}
    if not isinstance(url, str):
        raise ConfigError(f"Class {index}: 'url' must be a string")
    if not isinstance(data, Mapping):
        raise ConfigError(f"Class {index}: 'data' must be a mapping")

    try:
        return ClassConfig(
            index=index,
            label=str(entry.get("label") or f"Class {index}"),
            confidence_threshold=float(threshold),
            webhook_url=url,
            extra_payload=data,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Class {index}: {e}")
