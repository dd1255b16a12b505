# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

import numpy as np

from lanecam.app_utils import Logger

from .types import TrainingExample

logger = Logger("ExampleStore")


class ExampleStore:
    """Per-class collections of training embeddings, kept for the whole session.

    Examples are never mutated once stored. The store is not thread-safe: it is only
    written from the frame loop.
    """

    def __init__(self, num_classes: int):
        if num_classes <= 0:
            raise ValueError("num_classes must be a positive integer")
        self._num_classes = num_classes
        self._examples: list[TrainingExample] = []
        self._counts = [0] * num_classes
        self._dimension: int | None = None
        self._matrix: tuple[np.ndarray, np.ndarray] | None = None

    @property
    def num_classes(self) -> int:
        return self._num_classes

    @property
    def dimension(self) -> int | None:
        """Embedding length, fixed by the first stored example."""
        return self._dimension

    @property
    def total(self) -> int:
        return len(self._examples)

    def __len__(self) -> int:
        return len(self._examples)

    def add_example(self, class_index: int, embedding: np.ndarray) -> TrainingExample:
        """Append an embedding to the collection of a class.

        Raises:
            IndexError: If the class index is out of range.
            ValueError: If the embedding is not 1-D or its length differs from the stored ones.
        """
        if not 0 <= class_index < self._num_classes:
            raise IndexError(f"Class index {class_index} out of range (0-{self._num_classes - 1})")

        vector = np.array(embedding, dtype=np.float32).ravel()
        if self._dimension is None:
            self._dimension = vector.shape[0]
        elif vector.shape[0] != self._dimension:
            raise ValueError(f"Embedding length {vector.shape[0]} does not match stored length {self._dimension}")
        vector.setflags(write=False)

        example = TrainingExample(class_index, vector)
        self._examples.append(example)
        self._counts[class_index] += 1
        self._matrix = None
        return example

    def count_per_class(self) -> list[int]:
        return list(self._counts)

    def all_embeddings_with_labels(self) -> list[tuple[int, np.ndarray]]:
        """All stored embeddings with their class index, in insertion order."""
        return [(e.class_index, e.embedding) for e in self._examples]

    def as_matrix(self) -> tuple[np.ndarray, np.ndarray]:
        """Stacked view of the store: embeddings (N, D) and labels (N,), in insertion order."""
        if self._matrix is None:
            if not self._examples:
                self._matrix = (np.empty((0, self._dimension or 0), dtype=np.float32), np.empty(0, dtype=np.int64))
            else:
                embeddings = np.stack([e.embedding for e in self._examples])
                labels = np.fromiter((e.class_index for e in self._examples), dtype=np.int64, count=len(self._examples))
                self._matrix = (embeddings, labels)
        return self._matrix

    def clear_class(self, class_index: int) -> None:
        """Drop every example of a class."""
        if not 0 <= class_index < self._num_classes:
            raise IndexError(f"Class index {class_index} out of range (0-{self._num_classes - 1})")

        removed = self._counts[class_index]
        self._examples = [e for e in self._examples if e.class_index != class_index]
        self._counts[class_index] = 0
        self._matrix = None
        if not self._examples:
            self._dimension = None
        logger.info(f"Cleared {removed} examples of class {class_index}")
