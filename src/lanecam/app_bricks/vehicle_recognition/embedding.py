# SPDX-FileCopyrightText: Copyright (C) ARDUINO SRL (http://www.arduino.cc)
#
# SPDX-License-Identifier: MPL-2.0

from abc import ABC, abstractmethod

import cv2
import numpy as np

from lanecam.app_utils.image import center_cropped, greyscaled, hsv_converted, l2_normalize, resized

# Frames are brought to this square size before feature extraction
IMAGE_SIZE = 227


class EmbeddingExtractor(ABC):
    """Maps a frame to a fixed-length feature vector.

    Implementations must be deterministic so that training and classification of the same
    frame produce the same embedding.
    """

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the produced embeddings."""
        pass

    @abstractmethod
    def extract(self, frame: np.ndarray) -> np.ndarray:
        """Compute the embedding of a BGR frame (H, W, 3) as a 1-D float32 array."""
        pass

    def __call__(self, frame: np.ndarray) -> np.ndarray:
        return self.extract(frame)


class PixelEmbedder(EmbeddingExtractor):
    """Downsampled greyscale thumbnail, mean-centred and L2-normalised.

    Cheap and model-free; good enough for a fixed camera where the background is stable
    and the classes differ in shape and brightness.
    """

    def __init__(self, size: int = 16, crop_ratio: float = 1.0):
        if size <= 0:
            raise ValueError("size must be a positive integer")
        self.size = size
        self._preprocess = center_cropped(crop_ratio) | resized((IMAGE_SIZE, IMAGE_SIZE)) | greyscaled() | resized((size, size))

    @property
    def dimension(self) -> int:
        return self.size * self.size

    def extract(self, frame: np.ndarray) -> np.ndarray:
        thumbnail = self._preprocess(frame).astype(np.float32).ravel()
        return l2_normalize(thumbnail - thumbnail.mean())


class ColorHistogramEmbedder(EmbeddingExtractor):
    """Hue/saturation histogram of the frame, L2-normalised.

    Robust to small shifts of the object in the frame, blind to its shape.
    """

    def __init__(self, h_bins: int = 18, s_bins: int = 8, crop_ratio: float = 1.0):
        if h_bins <= 0 or s_bins <= 0:
            raise ValueError("Histogram bins must be positive integers")
        self.h_bins = h_bins
        self.s_bins = s_bins
        self._preprocess = center_cropped(crop_ratio) | resized((IMAGE_SIZE, IMAGE_SIZE)) | hsv_converted()

    @property
    def dimension(self) -> int:
        return self.h_bins * self.s_bins

    def extract(self, frame: np.ndarray) -> np.ndarray:
        hsv = self._preprocess(frame)
        hist = cv2.calcHist([hsv], [0, 1], None, [self.h_bins, self.s_bins], [0, 180, 0, 256])
        return l2_normalize(hist.ravel())
