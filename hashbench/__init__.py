"""
hashbench - robustness evaluation of perceptual image hashes.

Hashes a corpus of reference images and their attacked copies across a
fuzziness x resolution matrix and reports how often distinct images collide
and how often attacked copies still match their originals.
"""

__version__ = "0.1.0"

from .aggregate import AttackedStats, DistanceAggregator, OriginalsStats
from .config import Cell, EvaluationConfig, SweepOptions
from .corpus import Attack, Corpus, attack_code, load_corpus
from .errors import CorpusDiscoveryError, HashbenchError, HashComputationError, ShapeMismatchError
from .oracle import GradientHashOracle, hamming_distance
from .report import ReportRenderer
from .sweep import HashTable, SweepExecutor, SweepResult

__all__ = [
    "Attack",
    "AttackedStats",
    "Cell",
    "Corpus",
    "CorpusDiscoveryError",
    "DistanceAggregator",
    "EvaluationConfig",
    "GradientHashOracle",
    "HashComputationError",
    "HashTable",
    "HashbenchError",
    "OriginalsStats",
    "ReportRenderer",
    "ShapeMismatchError",
    "SweepExecutor",
    "SweepOptions",
    "SweepResult",
    "attack_code",
    "hamming_distance",
    "load_corpus",
]
