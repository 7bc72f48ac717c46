from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Tuple

from .config import EvaluationConfig
from .errors import CorpusDiscoveryError
from .utils import list_image_names, list_visible_dirs


def attack_code(idx: int) -> str:
    """Display code for an attack index: A..Z, then AA, AB, ... like spreadsheet columns."""
    if idx < 0:
        raise ValueError(f"Attack index must be >= 0, got {idx}")
    code = ""
    n = idx + 1
    while n:
        n, rem = divmod(n - 1, 26)
        code = chr(65 + rem) + code
    return code


@dataclass(frozen=True)
class Attack:
    name: str
    folder: str          # directory holding the attacked copies, e.g. sample/attacks/jpeg-50
    code: str


@dataclass(frozen=True)
class Corpus:
    """Ordered inputs of one evaluation run."""

    originals_dir: str
    files: Tuple[str, ...]
    attacks: Tuple[Attack, ...]

    def original_path(self, image_idx: int) -> str:
        return os.path.join(self.originals_dir, self.files[image_idx])

    def attacked_path(self, image_idx: int, attack_idx: int) -> str:
        return os.path.join(self.attacks[attack_idx].folder, self.files[image_idx])

    @property
    def attack_names(self) -> List[str]:
        return [a.name for a in self.attacks]

    @property
    def attack_codes(self) -> List[str]:
        return [a.code for a in self.attacks]


def _require_dir(path: str, what: str) -> None:
    if not os.path.isdir(path):
        raise CorpusDiscoveryError(f"{what} directory not found: {path}")


def load_corpus(cfg: EvaluationConfig) -> Corpus:
    """
    Discover the reference images and attack folders below cfg.base_path.

    Attacks from attacks_extra_dir are appended after the regular ones when
    cfg.options.include_extra_attacks is set. Display codes follow the final
    order, so they never shift.
    """
    originals_dir = os.path.join(cfg.base_path, cfg.originals_dir)
    attacks_dir = os.path.join(cfg.base_path, cfg.attacks_dir)
    _require_dir(originals_dir, "Originals")
    _require_dir(attacks_dir, "Attacks")

    files = list_image_names(originals_dir, cfg.image_exts)
    if not files:
        raise CorpusDiscoveryError(
            f"No images with extension {', '.join(cfg.image_exts)} found in {originals_dir}"
        )

    folders = [os.path.join(attacks_dir, name) for name in list_visible_dirs(attacks_dir)]
    if cfg.options.include_extra_attacks:
        extra_dir = os.path.join(cfg.base_path, cfg.attacks_extra_dir)
        _require_dir(extra_dir, "Extra attacks")
        folders += [os.path.join(extra_dir, name) for name in list_visible_dirs(extra_dir)]
    if not folders:
        raise CorpusDiscoveryError(f"No attack directories found in {attacks_dir}")

    names = [os.path.basename(folder) for folder in folders]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        # attack names key the report legend and the debug file names
        raise CorpusDiscoveryError(
            f"Attack name(s) {', '.join(duplicates)} found in both {cfg.attacks_dir} and {cfg.attacks_extra_dir}"
        )

    attacks = tuple(
        Attack(name=os.path.basename(folder), folder=folder, code=attack_code(i))
        for i, folder in enumerate(folders)
    )
    return Corpus(originals_dir=originals_dir, files=tuple(files), attacks=attacks)
