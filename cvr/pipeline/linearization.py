from __future__ import annotations

import numpy as np

from cvr.config import (CHANNEL_MAX, SRGB_DECODE_CUTOFF, SRGB_ENCODE_CUTOFF,
                        SRGB_GAMMA, SRGB_LINEAR_SLOPE, SRGB_OFFSET)


def srgb_to_linear(u: int) -> float:
    x = u / CHANNEL_MAX
    if x <= SRGB_DECODE_CUTOFF:
        return x * (1.0 / SRGB_LINEAR_SLOPE)
    return ((x + SRGB_OFFSET) / (1.0 + SRGB_OFFSET)) ** SRGB_GAMMA


def linear_to_srgb(u: float) -> int:
    if u <= SRGB_ENCODE_CUTOFF:
        srgb = SRGB_LINEAR_SLOPE * u
    else:
        srgb = (1.0 + SRGB_OFFSET) * u ** (1.0 / SRGB_GAMMA) - SRGB_OFFSET
    if srgb >= 1.0:
        return CHANNEL_MAX
    # NaN fails this comparison as well
    if not srgb >= 0.0:
        return 0
    return int(CHANNEL_MAX * srgb + 0.5)


def srgb_to_linear_array(img: np.ndarray) -> np.ndarray:
    img = np.asarray(img, dtype=np.float64) / CHANNEL_MAX
    low = img / SRGB_LINEAR_SLOPE
    high = ((img + SRGB_OFFSET) / (1.0 + SRGB_OFFSET)) ** SRGB_GAMMA
    return np.where(img <= SRGB_DECODE_CUTOFF, low, high).astype(np.float32)


def linear_to_srgb_array(img: np.ndarray) -> np.ndarray:
    img = np.asarray(img, dtype=np.float64)
    low = img * SRGB_LINEAR_SLOPE
    with np.errstate(invalid="ignore"):
        high = (1.0 + SRGB_OFFSET) * (np.clip(img, 0.0, None) ** (1.0 / SRGB_GAMMA)) - SRGB_OFFSET
    srgb = np.where(img <= SRGB_ENCODE_CUTOFF, low, high)
    srgb = np.nan_to_num(srgb, nan=0.0, posinf=1.0, neginf=0.0)
    srgb = np.clip(srgb, 0.0, 1.0)
    return np.floor(CHANNEL_MAX * srgb + 0.5).astype(np.uint8)
