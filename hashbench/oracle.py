# Gradient hash oracle and Hamming distance primitive.
# The sweep only relies on compute(path, resolution, fuzziness) and distance(a, b);
# anything with the same call shape can stand in for GradientHashOracle.

from __future__ import annotations

import os

import cv2
import imagehash
import numpy as np

from .errors import HashComputationError
from .utils import ensure_dir, imread_any, resize_exact, to_gray


def hamming_distance(a: imagehash.ImageHash, b: imagehash.ImageHash) -> int:
    """Number of differing bits; ImageHash raises TypeError on mismatched sizes."""
    return int(a - b)


class GradientHashOracle:
    """
    Horizontal-gradient perceptual hash.

    The image is converted to grayscale and shrunk to (resolution + 1) x resolution
    pixels; each row yields `resolution` bits, one per neighbouring pixel pair,
    set when luminance rises by more than `fuzziness` from left to right.
    A resolution of 8 gives a 64-bit hash.
    """

    def preprocess(self, path: str, resolution: int) -> np.ndarray:
        img = imread_any(path)
        return resize_exact(to_gray(img), resolution + 1, resolution)

    def compute(self, path: str, resolution: int, fuzziness: int) -> imagehash.ImageHash:
        try:
            small = self.preprocess(path, resolution).astype(np.int16)
        except (FileNotFoundError, cv2.error) as e:
            raise HashComputationError(path, resolution, fuzziness, reason=str(e)) from e
        diff = small[:, 1:] - small[:, :-1]
        return imagehash.ImageHash(diff > fuzziness)

    def write_debug(self, path: str, resolution: int, out_path: str) -> None:
        """Save the preprocessed image the hash bits are taken from."""
        ensure_dir(os.path.dirname(out_path))
        small = self.preprocess(path, resolution)
        try:
            written = cv2.imwrite(out_path, small)
        except cv2.error as e:
            raise OSError(f"Could not write debug image {out_path}: {e}") from e
        if not written:
            raise OSError(f"Could not write debug image {out_path}")
