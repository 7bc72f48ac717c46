import os
from typing import Iterable, List, Optional

import cv2
import numpy as np

DEFAULT_IMG_EXTS = (".jpg",)


def ensure_dir(p: Optional[str]) -> None:
    if p and p.strip():
        os.makedirs(p, exist_ok=True)


def imread_any(path: str) -> np.ndarray:
    """Read image as BGR uint8; convert gray->BGR, drop alpha if present."""
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Failed to read image: {path}")
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 4:
        img = img[:, :, :3]
    return img


def to_gray(img_bgr: np.ndarray) -> np.ndarray:
    return cv2.cvtColor(img_bgr, cv2.COLOR_BGR2GRAY)


def resize_exact(img: np.ndarray, w: int, h: int) -> np.ndarray:
    return cv2.resize(img, (w, h), interpolation=cv2.INTER_AREA)


def list_image_names(folder: str, exts: Iterable[str] = DEFAULT_IMG_EXTS) -> List[str]:
    """Sorted file names (not paths) in `folder` whose extension is in `exts`."""
    wanted = {e.lower() for e in exts}
    names = []
    for name in os.listdir(folder):
        ext = os.path.splitext(name)[1].lower()
        if ext in wanted and os.path.isfile(os.path.join(folder, name)):
            names.append(name)
    return sorted(names)


def list_visible_dirs(folder: str) -> List[str]:
    """Sorted sub-directory names of `folder`, hidden entries excluded."""
    names = []
    for name in os.listdir(folder):
        if name.startswith("."):
            continue
        if os.path.isdir(os.path.join(folder, name)):
            names.append(name)
    return sorted(names)
