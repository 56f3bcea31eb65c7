import pytest

from covreport.models import CoverageType
from covreport.types import (
    BranchesTaken,
    CoverageDatapoint,
    HitCount,
    LineSession,
    PartialCoverage,
    ReportLine,
    normalize_coverage_measurement,
)


@pytest.mark.parametrize(
    "coverage, coverage_type, expected",
    [
        (HitCount(3), CoverageType.LINE, (HitCount(3), CoverageType.LINE)),
        (HitCount(3), CoverageType.METHOD, (HitCount(3), CoverageType.METHOD)),
        (
            BranchesTaken(covered=2, total=4),
            CoverageType.BRANCH,
            (BranchesTaken(covered=2, total=4), CoverageType.BRANCH),
        ),
    ],
)
def test_normalize_unchanged(coverage, coverage_type, expected):
    assert normalize_coverage_measurement(coverage, coverage_type) == expected


@pytest.mark.parametrize(
    "coverage, coverage_type, expected",
    [
        (
            PartialCoverage(),
            CoverageType.BRANCH,
            (BranchesTaken(covered=1, total=2), CoverageType.BRANCH),
        ),
        (
            HitCount(1),
            CoverageType.BRANCH,
            (BranchesTaken(covered=1, total=2), CoverageType.BRANCH),
        ),
        (
            BranchesTaken(covered=1, total=2),
            CoverageType.LINE,
            (BranchesTaken(covered=1, total=2), CoverageType.BRANCH),
        ),
        (
            BranchesTaken(covered=1, total=2),
            CoverageType.METHOD,
            (HitCount(1), CoverageType.METHOD),
        ),
    ],
)
def test_normalize_adjusted(coverage, coverage_type, expected):
    assert normalize_coverage_measurement(coverage, coverage_type) == expected


def test_partial_keeps_coverage_type():
    assert normalize_coverage_measurement(PartialCoverage(), CoverageType.LINE) == (
        BranchesTaken(covered=1, total=2),
        CoverageType.LINE,
    )


def test_branch_hit_count_out_of_range_raises():
    with pytest.raises(ValueError):
        normalize_coverage_measurement(HitCount(3), CoverageType.BRANCH)


def test_report_line_defaults():
    line = ReportLine(line_no=1, coverage=HitCount(1), coverage_type=CoverageType.LINE)
    line.sessions.append(LineSession(session_id=0, coverage=HitCount(1)))
    other = ReportLine(line_no=2, coverage=HitCount(0), coverage_type=CoverageType.LINE)
    assert other.sessions == []
    assert line.datapoints is None
    assert line.sessions[0].branches is None


def test_datapoint_labels_are_independent():
    first = CoverageDatapoint(session_id=0, coverage=HitCount(3))
    first.labels.append("test-case")
    second = CoverageDatapoint(session_id=0, coverage=HitCount(3))
    assert second.labels == []
    assert first.labels == ["test-case"]