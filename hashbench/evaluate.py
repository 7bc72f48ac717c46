#!/usr/bin/env python3
"""
Compare perceptual hashing results of a corpus under various attacks, fuzziness
levels and resolutions.

Expected layout below --base-path (default: ./sample):
  originals/            reference images (*.jpg unless --ext is given)
  attacks/<name>/       attacked copies, same file names as in originals/
  attacks-extra/<name>/ attacks the hash is not expected to survive (--unfair)

Prints three reports to stdout: distances of every original to the first one,
distances of every attacked copy to its original, and a collision summary.
Any unreadable image or missing attacked copy aborts the run before a report
is printed.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, TextIO

from .aggregate import AttackedStats, DistanceAggregator, OriginalsStats
from .config import CONFIG, EvaluationConfig, SweepOptions
from .corpus import Corpus, load_corpus
from .errors import HashbenchError
from .oracle import GradientHashOracle
from .report import ReportRenderer
from .sweep import SweepExecutor


@dataclass(frozen=True)
class Evaluation:
    corpus: Corpus
    originals: OriginalsStats
    attacked: AttackedStats


async def evaluate(cfg: EvaluationConfig, corpus: Corpus, oracle: Any = None,
                   distance: Optional[Callable[[Any, Any], int]] = None) -> Evaluation:
    """Hash the whole matrix, then aggregate once both sweeps have completed."""
    executor = SweepExecutor(oracle or GradientHashOracle(), cfg.options)
    sweeps = await executor.run(cfg.cells(), corpus)
    aggregator = DistanceAggregator(distance)
    return Evaluation(
        corpus=corpus,
        originals=aggregator.compare_originals(sweeps.originals),
        attacked=aggregator.compare_attacked(sweeps.originals, sweeps.attacked),
    )


def render_report(cfg: EvaluationConfig, result: Evaluation) -> str:
    renderer = ReportRenderer(
        files=result.corpus.files,
        attack_names=result.corpus.attack_names,
        attack_codes=result.corpus.attack_codes,
        fuzzinesses=cfg.fuzzinesses,
        resolutions=cfg.resolutions,
    )
    return renderer.render(result.originals, result.attacked)


def run(cfg: EvaluationConfig, oracle: Any = None,
        distance: Optional[Callable[[Any, Any], int]] = None,
        out: Optional[TextIO] = None) -> Evaluation:
    """Discover the corpus, evaluate it and print the reports; raises HashbenchError on failure."""
    out = out or sys.stdout
    corpus = load_corpus(cfg)
    print(f"Computing Hamming distances of first input image ({corpus.files[0]}) "
          f"to all other inputs--originals only.", file=out)
    print("Computing Hamming distances of original input images to various attacked versions.", file=out)
    print(f"Hashing {len(corpus.files)} images under {len(corpus.attacks)} attacks "
          f"for {len(cfg.fuzzinesses)} x {len(cfg.resolutions)} configurations. "
          f"This will take a minute or two...\n", file=out)
    result = asyncio.run(evaluate(cfg, corpus, oracle, distance))
    # tables are only written once every sweep and comparison succeeded
    print(render_report(cfg, result), file=out)
    return result


def _int_list(text: str) -> List[int]:
    try:
        return [int(x) for x in text.split(",") if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected comma separated integers, got '{text}'")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="hashbench", description=__doc__.strip().splitlines()[0])
    ap.add_argument("--base-path", default=CONFIG["base_path"], help="Corpus root folder")
    ap.add_argument("--fuzziness", type=_int_list, default=CONFIG["fuzzinesses"],
                    help="Comma separated fuzziness levels, e.g. 0,5,10")
    ap.add_argument("--resolution", type=_int_list, default=CONFIG["resolutions"],
                    help="Comma separated resolutions, e.g. 8,4,3")
    ap.add_argument("--ext", action="append", default=None,
                    help="Image extension to include (repeatable); default .jpg")
    ap.add_argument("--unfair", action="store_true", default=CONFIG["include_extra_attacks"],
                    help="Also run the attacks in attacks-extra/")
    ap.add_argument("--debug-out", action="store_true", default=CONFIG["emit_debug_artifacts"],
                    help="Write the preprocessed images the hashes are computed from")
    ap.add_argument("--debug-dir", default=CONFIG["debug_dir"], help="Folder for --debug-out images")
    ap.add_argument("--workers", type=int, default=CONFIG["max_workers"],
                    help="Max hash computations in flight (default: unbounded)")
    return ap


def config_from_args(args: argparse.Namespace) -> EvaluationConfig:
    options = SweepOptions(
        include_extra_attacks=args.unfair,
        emit_debug_artifacts=args.debug_out,
        debug_dir=args.debug_dir,
        max_workers=args.workers,
    )
    return EvaluationConfig(
        base_path=args.base_path,
        fuzzinesses=list(args.fuzziness),
        resolutions=list(args.resolution),
        image_exts=args.ext or list(CONFIG["image_exts"]),
        options=options,
    )


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    try:
        cfg = config_from_args(args)
    except ValueError as e:
        ap.error(str(e))
    try:
        run(cfg)
    except HashbenchError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return e.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
