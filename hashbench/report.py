"""
Text reports for an evaluation run.

Each view is built as a pandas DataFrame first (originals_frame, attacked_frame,
summary_frame) and then laid out as a fixed-width, left-aligned table. Nothing
here recomputes distances; all numbers come from the aggregated stats.
"""

from __future__ import annotations

import math
from typing import List, Sequence

import pandas as pd

from .aggregate import AttackedStats, OriginalsStats

NAME_WIDTH = 40
COL_WIDTH = 7
UNEXPECTED_MARK = "0 !"


def format_percent(value: float, width: int = COL_WIDTH) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return f"{'n/a':<{width}}"
    return f"{value:<{width}.2f}"


def _row(indent: str, name: str, cells: Sequence[str]) -> str:
    parts = [f"{name:<{NAME_WIDTH}}"] + [f"{c:<{COL_WIDTH}}" for c in cells]
    return (indent + " ".join(parts)).rstrip()


def _separator(indent: str, n_cols: int) -> str:
    return indent + "-" * NAME_WIDTH + "-" * ((COL_WIDTH + 1) * n_cols)


def _frame_lines(df: pd.DataFrame, indent: str, first_col: str = "Input") -> List[str]:
    lines = [_row(indent, first_col, [str(c) for c in df.columns]), _separator(indent, len(df.columns))]
    for name, values in df.iterrows():
        lines.append(_row(indent, str(name), [str(v) for v in values]))
    return lines


def originals_frame(stats: OriginalsStats, files: Sequence[str],
                    resolutions: Sequence[int], fuzz_idx: int) -> pd.DataFrame:
    """Distances to the first image for one fuzziness level, unexpected zeros annotated."""
    data = {}
    for r, res in enumerate(resolutions):
        col = []
        for i in range(len(files)):
            if stats.unexpected[fuzz_idx, r, i]:
                col.append(UNEXPECTED_MARK)
            else:
                col.append(str(int(stats.distances[fuzz_idx, r, i])))
        data[f"res={res}"] = col
    return pd.DataFrame(data, index=list(files))


def attacked_frame(stats: AttackedStats, files: Sequence[str], codes: Sequence[str],
                   fuzz_idx: int, res_idx: int) -> pd.DataFrame:
    return pd.DataFrame(stats.distances[fuzz_idx, res_idx], index=list(files), columns=list(codes))


def summary_frame(stats: AttackedStats, fuzzinesses: Sequence[int],
                  resolutions: Sequence[int]) -> pd.DataFrame:
    return pd.DataFrame(
        stats.collision_percentages(),
        index=[f"fuzz={f}" for f in fuzzinesses],
        columns=[f"res={r}" for r in resolutions],
    )


class ReportRenderer:
    """Renders the originals, attacked and summary views as text."""

    def __init__(self, files: Sequence[str], attack_names: Sequence[str], attack_codes: Sequence[str],
                 fuzzinesses: Sequence[int], resolutions: Sequence[int]) -> None:
        if len(attack_names) != len(attack_codes):
            raise ValueError("Every attack needs exactly one display code")
        self.files = list(files)
        self.attack_names = list(attack_names)
        self.attack_codes = list(attack_codes)
        self.fuzzinesses = list(fuzzinesses)
        self.resolutions = list(resolutions)

    def render_originals(self, stats: OriginalsStats) -> str:
        lines: List[str] = []
        percentages = stats.collision_percentages()
        for f, fuzz in enumerate(self.fuzzinesses):
            lines += [f"    fuzziness = {fuzz}", ""]
            df = originals_frame(stats, self.files, self.resolutions, f)
            lines += _frame_lines(df, " " * 8)
            lines.append(_separator(" " * 8, len(df.columns)))
            lines.append(_row(" " * 8, "Percentage of collisions:",
                              [format_percent(p) for p in percentages[f]]))
            lines.append("")
        return "\n".join(lines)

    def render_legend(self) -> str:
        lines = ["Attacks"]
        lines += [f"{code} - {name}" for code, name in zip(self.attack_codes, self.attack_names)]
        lines.append("")
        return "\n".join(lines)

    def render_attacked(self, stats: AttackedStats) -> str:
        lines = [self.render_legend()]
        indent = " " * 12
        for f, fuzz in enumerate(self.fuzzinesses):
            lines += [f"    fuzziness = {fuzz}", ""]
            for r, res in enumerate(self.resolutions):
                lines += [f"        resolution = {res}", ""]
                df = attacked_frame(stats, self.files, self.attack_codes, f, r)
                lines += _frame_lines(df, indent)
                lines.append(_separator(indent, len(df.columns)))
                lines.append(_row(indent, "Total collisions:",
                                  [str(int(c)) for c in stats.collisions[f, r]]))
                lines.append("")
        return "\n".join(lines)

    def render_summary(self, stats: AttackedStats) -> str:
        df = summary_frame(stats, self.fuzzinesses, self.resolutions)
        header = f"         {'':<6} " + "".join(f"res={res:<6d} " for res in self.resolutions)
        lines = [
            "Percentage of collisions across all attacks per resolution/fuzziness pair:",
            "",
            header.rstrip(),
            "    ---------+" + "-" * (11 * len(self.resolutions)),
        ]
        for label, values in df.iterrows():
            cells = "".join(f"{format_percent(v, 10)} " for v in values)
            lines.append(f"    {label:<8} {'|':<3}{cells}".rstrip())
        lines.append("")
        lines.append(f"A total of {stats.image_count} images under {stats.attack_count} attacks were examined.")
        lines.append("")
        return "\n".join(lines)

    def render(self, originals: OriginalsStats, attacked: AttackedStats) -> str:
        """All three views in their fixed order: originals, attacked, summary."""
        return "\n".join([
            self.render_originals(originals),
            self.render_attacked(attacked),
            self.render_summary(attacked),
        ])
