from __future__ import annotations

import os

BIT_DEPTH = 8
CHANNEL_MAX = 255

SRGB_DECODE_CUTOFF = 0.04045
SRGB_ENCODE_CUTOFF = 0.0031308
SRGB_LINEAR_SLOPE = 12.92
SRGB_OFFSET = 0.055
SRGB_GAMMA = 2.4

PNG_COMPRESSION = int(os.environ.get("CVR_PNG_COMPRESSION", "6"))
