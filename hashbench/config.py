"""Run configuration for hashbench.

How to use:
1) Edit the CONFIG dict below, then run `hashbench` (or `python -m hashbench`).
   - base_path: folder that contains the corpus directories
   - originals_dir: reference images, one file per input
   - attacks_dir: one sub-folder per attack, each holding the attacked copies
     under the same file names as in originals_dir
   - attacks_extra_dir: attacks the hash has little to no resilience against;
     only read when include_extra_attacks is True
   - fuzzinesses / resolutions: the configuration matrix, in report order
   - image_exts: file extensions recognised as corpus images
   - include_extra_attacks: also sweep attacks_extra_dir ("unfair" mode)
   - emit_debug_artifacts: have the oracle write its preprocessed images
   - debug_dir: where those images go
   - max_workers: cap on in-flight hash computations (None = unbounded)

2) Or pass the equivalent command line flags; see `hashbench --help`.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# ---- EDIT YOUR INPUTS HERE ----
CONFIG = {
    "base_path": "sample",
    "originals_dir": "originals",
    "attacks_dir": "attacks",
    "attacks_extra_dir": "attacks-extra",
    "fuzzinesses": [0, 5, 10],
    "resolutions": [8, 4, 3],
    "image_exts": [".jpg"],
    "include_extra_attacks": False,
    "emit_debug_artifacts": False,
    "debug_dir": "var",
    "max_workers": None,         # e.g., 8; None = dispatch every coordinate at once
}
# --------------------------------


@dataclass(frozen=True)
class SweepOptions:
    include_extra_attacks: bool = CONFIG["include_extra_attacks"]
    emit_debug_artifacts: bool = CONFIG["emit_debug_artifacts"]
    debug_dir: str = CONFIG["debug_dir"]
    max_workers: Optional[int] = CONFIG["max_workers"]

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 or None, got {self.max_workers}")


@dataclass(frozen=True)
class Cell:
    """One configuration cell of the matrix."""

    fuzziness: int
    resolution: int

    def __str__(self) -> str:
        return f"fuzziness={self.fuzziness}, resolution={self.resolution}"


@dataclass
class EvaluationConfig:
    base_path: str = CONFIG["base_path"]
    originals_dir: str = CONFIG["originals_dir"]
    attacks_dir: str = CONFIG["attacks_dir"]
    attacks_extra_dir: str = CONFIG["attacks_extra_dir"]
    fuzzinesses: List[int] = field(default_factory=lambda: list(CONFIG["fuzzinesses"]))
    resolutions: List[int] = field(default_factory=lambda: list(CONFIG["resolutions"]))
    image_exts: List[str] = field(default_factory=lambda: list(CONFIG["image_exts"]))
    options: SweepOptions = field(default_factory=SweepOptions)

    def __post_init__(self) -> None:
        if not self.fuzzinesses:
            raise ValueError("At least one fuzziness level is required")
        if not self.resolutions:
            raise ValueError("At least one resolution level is required")
        if any(r < 1 for r in self.resolutions):
            raise ValueError(f"Resolutions must be positive: {self.resolutions}")
        if any(f < 0 for f in self.fuzzinesses):
            raise ValueError(f"Fuzziness levels must be >= 0: {self.fuzzinesses}")
        self.image_exts = [e if e.startswith(".") else "." + e for e in self.image_exts]

    def cells(self) -> List[List[Cell]]:
        """Cells grid indexed [fuzziness_idx][resolution_idx]."""
        return [[Cell(f, r) for r in self.resolutions] for f in self.fuzzinesses]

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.fuzzinesses), len(self.resolutions))
