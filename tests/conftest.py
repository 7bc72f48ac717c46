import os

import cv2
import numpy as np
import pytest

from hashbench import EvaluationConfig, SweepOptions


def gradient_image(width=256, height=64, reverse=False):
    row = np.linspace(0, 255, width).astype(np.uint8)
    if reverse:
        row = row[::-1]
    gray = np.tile(row, (height, 1))
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def checker_image(size=128, cells=8, seed=0):
    rng = np.random.default_rng(seed)
    small = rng.integers(0, 256, size=(cells, cells), dtype=np.uint8)
    gray = cv2.resize(small, (size, size), interpolation=cv2.INTER_NEAREST)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def write_image(path, img):
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    assert cv2.imwrite(str(path), img)


class IndexOracle:
    """Hash = [index of the file name in the corpus], the same for every attack."""

    def __init__(self, files, fail_on=None):
        self.index = {name: i for i, name in enumerate(files)}
        self.fail_on = fail_on
        self.calls = []

    def compute(self, path, resolution, fuzziness):
        self.calls.append((path, resolution, fuzziness))
        name = os.path.basename(path)
        if self.fail_on is not None and name == self.fail_on:
            raise IOError(f"corrupt file {path}")
        return [self.index[name]]


def abs_distance(a, b):
    return abs(a[0] - b[0])


@pytest.fixture
def placeholder_corpus(tmp_path):
    """sample/ tree with empty placeholder files, for oracles that never open them."""
    base = tmp_path / "sample"
    files = ["a.jpg", "b.jpg", "c.jpg"]
    for name in files:
        (base / "originals").mkdir(parents=True, exist_ok=True)
        (base / "originals" / name).write_bytes(b"")
        (base / "attacks" / "jpeg-q50").mkdir(parents=True, exist_ok=True)
        (base / "attacks" / "jpeg-q50" / name).write_bytes(b"")
    return base


@pytest.fixture
def image_corpus(tmp_path):
    """sample/ tree with real images; attacked copies are byte-identical."""
    base = tmp_path / "sample"
    images = {
        "a.png": checker_image(seed=1),
        "b.png": checker_image(seed=2),
        "c.png": gradient_image(),
    }
    for name, img in images.items():
        write_image(base / "originals" / name, img)
        write_image(base / "attacks" / "copy" / name, img)
        write_image(base / "attacks" / "flip" / name, cv2.flip(img, 1))
        write_image(base / "attacks-extra" / "invert" / name, 255 - img)
    return base


def make_config(base, fuzz=(0,), res=(8,), exts=(".jpg",), **options):
    return EvaluationConfig(
        base_path=str(base),
        fuzzinesses=list(fuzz),
        resolutions=list(res),
        image_exts=list(exts),
        options=SweepOptions(**options),
    )
