# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from typing import Literal

import numpy as np

from .errors import EmptyExampleStoreError
from .example_store import ExampleStore
from .types import Prediction

DEFAULT_TOPK = 10

Metric = Literal["cosine", "euclidean"]


class KNNClassifier:
    """K-nearest-neighbour voting over the examples of an ``ExampleStore``.

    The confidence of a class is the fraction of the ``min(k, N)`` nearest stored examples
    that belong to it. Neighbours at equal distance are ranked by insertion order, so the
    first stored example wins ties and results are reproducible.
    """

    def __init__(self, store: ExampleStore, k: int = DEFAULT_TOPK, metric: Metric = "cosine"):
        """
        Args:
            store (ExampleStore): Examples to vote with.
            k (int): Number of neighbours. Default: 10.
            metric (str): "cosine" (normalised dot product) or "euclidean". Default: "cosine".

        Raises:
            ValueError: If k is lower than 1 or the metric is unknown.
        """
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        if metric not in ("cosine", "euclidean"):
            raise ValueError(f"Unsupported metric '{metric}'. Must be 'cosine' or 'euclidean'")
        self.store = store
        self.k = k
        self.metric = metric

    def distances(self, query: np.ndarray) -> np.ndarray:
        """Distance from the query to every stored example, in insertion order. Lower is nearer."""
        embeddings, _ = self.store.as_matrix()
        query = np.asarray(query, dtype=np.float32).ravel()
        if query.shape[0] != embeddings.shape[1]:
            raise ValueError(f"Query length {query.shape[0]} does not match stored length {embeddings.shape[1]}")

        if self.metric == "euclidean":
            return np.linalg.norm(embeddings - query, axis=1)

        norms = np.linalg.norm(embeddings, axis=1) * np.linalg.norm(query)
        norms[norms == 0] = 1e-10
        return 1.0 - (embeddings @ query) / norms

    def classify(self, query: np.ndarray) -> np.ndarray:
        """
        Compute the confidence vector for a query embedding.

        Returns:
            np.ndarray: One vote fraction per class, each in [0, 1], summing to 1.

        Raises:
            EmptyExampleStoreError: If the store holds no example.
        """
        if self.store.total == 0:
            raise EmptyExampleStoreError("classify() requires at least one stored example")

        _, labels = self.store.as_matrix()
        k = min(self.k, labels.shape[0])
        order = np.argsort(self.distances(query), kind="stable")[:k]
        votes = np.bincount(labels[order], minlength=self.store.num_classes)
        return votes.astype(np.float64) / k

    def predict(self, query: np.ndarray) -> Prediction:
        confidences = self.classify(query)
        return Prediction(int(np.argmax(confidences)), confidences, self.store.count_per_class())
