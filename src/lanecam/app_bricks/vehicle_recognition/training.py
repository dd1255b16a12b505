# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import threading


class TrainingInput:
    """Single-slot cell holding the class currently being taught, or None.

    Written by the input side (button press/release) from any thread and read once per
    frame by the loop. The last write wins.
    """

    def __init__(self, num_classes: int):
        self._num_classes = num_classes
        self._active: int | None = None
        self._lock = threading.Lock()

    def press(self, class_index: int) -> None:
        if not 0 <= class_index < self._num_classes:
            raise IndexError(f"Class index {class_index} out of range (0-{self._num_classes - 1})")
        with self._lock:
            self._active = class_index

    def release(self, class_index: int | None = None) -> None:
        """Stop training. With a class index, only stops if that class is the active one."""
        with self._lock:
            if class_index is None or self._active == class_index:
                self._active = None

    def active(self) -> int | None:
        with self._lock:
            return self._active
