"""Values found in the line-by-line chunks of a report.

``None`` in an optional field means the field was omitted or null.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .models import CoverageType


@dataclass(frozen=True)
class HitCount:
    """Number of times the target was hit."""

    count: int


@dataclass(frozen=True)
class BranchesTaken:
    """Branches taken out of the branches possible, e.g. "1/2"."""

    covered: int
    total: int


@dataclass(frozen=True)
class PartialCoverage:
    """Partially covered, with nothing known about specific branches."""


PyreportCoverage = Union[HitCount, BranchesTaken, PartialCoverage]


@dataclass(frozen=True)
class TotalComplexity:
    """Total cyclomatic complexity of the target."""

    total: int


@dataclass(frozen=True)
class PathsTaken:
    """Complexity paths covered and total cyclomatic complexity."""

    covered: int
    total: int


Complexity = Union[TotalComplexity, PathsTaken]


@dataclass(frozen=True)
class BlockAndBranch:
    """A missed branch identified by its block and branch numbers."""

    block: int
    branch: int


@dataclass(frozen=True)
class Condition:
    """A missed branch identified as one of a line's conditions."""

    index: int
    condition_type: str | None = None


@dataclass(frozen=True)
class LineBranch:
    """A missed branch identified by the line it lands on."""

    line: int


MissingBranch = Union[BlockAndBranch, Condition, LineBranch]


@dataclass(frozen=True)
class Partial:
    """A subspan of a single line and its coverage."""

    start_col: int | None
    end_col: int | None
    coverage: PyreportCoverage


@dataclass
class LineSession:
    """Coverage measured for a line in one session (upload)."""

    session_id: int
    coverage: PyreportCoverage
    branches: list[MissingBranch] | None = None
    partials: list[Partial] | None = None
    complexity: Complexity | None = None


@dataclass(frozen=True)
class LabelId:
    """A label referred to by its ID in the chunks file's labels index."""

    id: int


@dataclass(frozen=True)
class LabelName:
    """A label referred to by its full name."""

    name: str


RawLabel = Union[LabelId, LabelName]


@dataclass
class CoverageDatapoint:
    """Mostly redundant per-session data; the only carrier of labels."""

    session_id: int
    coverage: PyreportCoverage
    coverage_type: CoverageType | None = None
    labels: list[str] = field(default_factory=list)


@dataclass
class ReportLine:
    """All coverage measurements for one line of a source file."""

    line_no: int
    coverage: PyreportCoverage
    coverage_type: CoverageType
    sessions: list[LineSession] = field(default_factory=list)
    messages: Any = None
    complexity: Complexity | None = None
    datapoints: dict[int, CoverageDatapoint] | None = None


def normalize_coverage_measurement(
    coverage: PyreportCoverage, coverage_type: CoverageType
) -> tuple[PyreportCoverage, CoverageType]:
    """Correct known quirks and malformed coverage data.

    Raises ``ValueError`` for a branch hit count other than 0, 1 or 2.
    """
    match coverage, coverage_type:
        # Partial coverage with no branch details is treated as "1/2".
        case PartialCoverage(), _:
            return BranchesTaken(covered=1, total=2), coverage_type
        # Method coverage given as a fraction: use the numerator as hits.
        case BranchesTaken(covered=covered), CoverageType.METHOD:
            return HitCount(covered), CoverageType.METHOD
        # Branch data recorded as a line: fix the coverage type.
        case BranchesTaken(), CoverageType.LINE:
            return coverage, CoverageType.BRANCH
        # Scoverage-style branch hit counts: 0 miss, 1 partial, 2 hit.
        case HitCount(count=n), CoverageType.BRANCH:
            if n not in (0, 1, 2):
                raise ValueError(f"unexpected hit count {n} for branch coverage")
            return BranchesTaken(covered=n, total=2), CoverageType.BRANCH
        case _:
            return coverage, coverage_type