import numpy as np
import pytest

from hashbench import DistanceAggregator, HashTable, ReportRenderer
from hashbench.report import attacked_frame, format_percent, originals_frame, summary_frame

from conftest import abs_distance


def _table(shape, value_of):
    table = HashTable(shape)
    for coord in np.ndindex(*shape):
        table.set(coord, value_of(coord))
    return table.freeze()


@pytest.fixture
def stats():
    # 1 fuzziness, 2 resolutions, 3 images, 2 attacks
    # resolution index 1 makes image 2 collide with image 0
    originals = _table((1, 2, 3), lambda c: [0 if (c[1] == 1 and c[2] == 2) else c[2]])
    attacked = _table((1, 2, 3, 2), lambda c: [originals[c[:3]][0] + (c[3] * c[2])])
    agg = DistanceAggregator(abs_distance)
    return agg.compare_originals(originals), agg.compare_attacked(originals, attacked)


@pytest.fixture
def renderer():
    return ReportRenderer(
        files=["a.jpg", "b.jpg", "c.jpg"],
        attack_names=["jpeg-q50", "crop-5"],
        attack_codes=["A", "B"],
        fuzzinesses=[0],
        resolutions=[8, 4],
    )


class TestFrames:
    def test_originals_frame_marks_unexpected_zero(self, stats):
        df = originals_frame(stats[0], ["a.jpg", "b.jpg", "c.jpg"], [8, 4], 0)
        assert list(df.columns) == ["res=8", "res=4"]
        assert df["res=8"].tolist() == ["0", "1", "2"]
        assert df["res=4"].tolist() == ["0", "1", "0 !"]

    def test_attacked_frame(self, stats):
        df = attacked_frame(stats[1], ["a.jpg", "b.jpg", "c.jpg"], ["A", "B"], 0, 0)
        assert df["A"].tolist() == [0, 0, 0]
        assert df["B"].tolist() == [0, 1, 2]

    def test_summary_frame(self, stats):
        df = summary_frame(stats[1], [0], [8, 4])
        assert list(df.index) == ["fuzz=0"]
        assert df.loc["fuzz=0", "res=8"] == pytest.approx(4 / 6 * 100)


class TestFormatPercent:
    def test_two_decimals_fixed_width(self):
        assert format_percent(50.0) == "50.00  "
        assert format_percent(100.0, 10) == "100.00    "

    def test_nan(self):
        assert format_percent(float("nan")).strip() == "n/a"


class TestReportRenderer:
    def test_originals_view(self, renderer, stats):
        text = renderer.render_originals(stats[0])
        lines = text.splitlines()
        assert lines[0] == "    fuzziness = 0"
        assert lines[2].split() == ["Input", "res=8", "res=4"]
        assert lines[4].split() == ["a.jpg", "0", "0"]
        assert lines[6].split() == ["c.jpg", "2", "0", "!"]
        footer = [line for line in lines if line.strip().startswith("Percentage of collisions:")]
        assert footer[0].split()[-2:] == ["0.00", "50.00"]

    def test_columns_are_aligned(self, renderer, stats):
        lines = renderer.render_originals(stats[0]).splitlines()
        header = lines[2]
        col = header.index("res=4")
        assert lines[4][col] == "0"
        assert lines[6][col:col + 3] == "0 !"

    def test_attacked_view(self, renderer, stats):
        text = renderer.render_attacked(stats[1])
        lines = text.splitlines()
        assert lines[:3] == ["Attacks", "A - jpeg-q50", "B - crop-5"]
        assert "        resolution = 8" in lines
        totals = [line.split(":")[1].split() for line in lines if "Total collisions:" in line]
        assert totals == [["3", "1"], ["3", "1"]]

    def test_summary_view(self, renderer, stats):
        text = renderer.render_summary(stats[1])
        lines = text.splitlines()
        assert lines[0].startswith("Percentage of collisions across all attacks")
        assert lines[2].split() == ["res=8", "res=4"]
        row = lines[4]
        assert row.startswith("    fuzz=0   |")
        assert row.split("|")[1].split() == ["66.67", "66.67"]
        assert "A total of 3 images under 2 attacks were examined." in lines

    def test_views_in_fixed_order(self, renderer, stats):
        text = renderer.render(*stats)
        originals = text.index("Percentage of collisions:")
        attacked = text.index("Total collisions:")
        summary = text.index("across all attacks")
        assert originals < attacked < summary

    def test_single_image_footer(self):
        originals = _table((1, 1, 1), lambda c: [0])
        stats = DistanceAggregator(abs_distance).compare_originals(originals)
        text = ReportRenderer(["a.jpg"], ["x"], ["A"], [0], [8]).render_originals(stats)
        assert "n/a" in text

    def test_code_count_must_match(self):
        with pytest.raises(ValueError):
            ReportRenderer(["a.jpg"], ["x", "y"], ["A"], [0], [8])
