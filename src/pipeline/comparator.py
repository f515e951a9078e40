"""Perceptual dissimilarity between two frames."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from skimage.metrics import structural_similarity

from .errors import DecodeError

_MIN_SSIM = 1e-6


@dataclass
class ComparatorConfig:
    win_size: int = 7


class Comparator:
    """Abstract comparator: 0 means identical, larger means more different."""

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        return frame

    def compare(self, image: np.ndarray, other: np.ndarray) -> float:
        raise NotImplementedError


class DssimComparator(Comparator):
    """DSSIM (``1 / SSIM - 1``) over RGB frames normalized to [0, 1]."""

    def __init__(self, config: ComparatorConfig | None = None) -> None:
        self._config = config or ComparatorConfig()

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        if frame.ndim != 3 or frame.shape[2] != 3:
            raise DecodeError("Expected RGB frame with 3 channels")
        return frame.astype(np.float32) / 255.0

    def compare(self, image: np.ndarray, other: np.ndarray) -> float:
        if image.shape != other.shape:
            raise DecodeError(f"Frame sizes differ: {image.shape} vs {other.shape}")
        if image.size == 0:
            raise DecodeError(f"Frame of shape {image.shape} is empty")
        win_size = self._window_size(image.shape)
        if win_size is None:
            ssim = _global_ssim(image, other)
        else:
            ssim = structural_similarity(
                image,
                other,
                win_size=win_size,
                channel_axis=2,
                data_range=1.0,
            )
        ssim = max(float(ssim), _MIN_SSIM)
        return max(0.0, 1.0 / ssim - 1.0)

    def _window_size(self, shape) -> Optional[int]:
        """Largest odd window that fits the frame, or None below 3 pixels."""
        smallest = min(shape[0], shape[1])
        win_size = min(self._config.win_size, smallest)
        if win_size % 2 == 0:
            win_size -= 1
        if win_size < 3:
            return None
        return win_size


def _global_ssim(image: np.ndarray, other: np.ndarray) -> float:
    """SSIM with the whole frame as one window, averaged over channels."""
    c1 = (0.01 * 1.0) ** 2
    c2 = (0.03 * 1.0) ** 2
    x = image.reshape(-1, image.shape[2]).astype(np.float64)
    y = other.reshape(-1, other.shape[2]).astype(np.float64)
    mu_x = x.mean(axis=0)
    mu_y = y.mean(axis=0)
    var_x = x.var(axis=0)
    var_y = y.var(axis=0)
    cov = ((x - mu_x) * (y - mu_y)).mean(axis=0)
    ssim = ((2 * mu_x * mu_y + c1) * (2 * cov + c2)) / ((mu_x**2 + mu_y**2 + c1) * (var_x + var_y + c2))
    return float(ssim.mean())


__all__ = ["Comparator", "ComparatorConfig", "DssimComparator"]
