"""Models for coverage data stored in and read back from a coverage report.

Overview of the data model:

* ``RawUpload``: one record per upload, keyed by a random ID.
* ``SourceFile``: one record per source file, keyed by a hash of its path.
* ``CoverageSample``: a single line-level measurement from one upload.
* ``BranchesData``: coverage status of one specific branch of a branch line.
* ``MethodData``: extra method-specific data such as cyclomatic complexity.
* ``SpanData``: a measurement covering a range of lines or part of a line.
* ``Context`` and ``ContextAssoc``: labels such as test case names, linked
  many-to-many with measurements.
* ``ReportTotals`` and ``CoverageTotals``: aggregated metrics (not stored).

``SourceFile`` and ``Context`` IDs are SeaHash digests of their names, so
every host derives the same ID for the same name. Measurement models use a
composite key of ``raw_upload_id`` and a per-upload local ID, which makes
merging reports a matter of concatenation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

_MASK64 = (1 << 64) - 1
_DIFFUSE_MULTIPLIER = 0x6EED0E9DA4D94A4F
_SEAHASH_SEEDS = (
    0x16F11FE89B0D677C,
    0xB480A793D8E6C86C,
    0x6FE2E5AAF078EBC9,
    0x14F994A4C5259381,
)


def _diffuse(x: int) -> int:
    x = (x * _DIFFUSE_MULTIPLIER) & _MASK64
    x ^= (x >> 32) >> (x >> 60)
    return (x * _DIFFUSE_MULTIPLIER) & _MASK64


def seahash(data: bytes | bytearray | memoryview) -> int:
    """Return the 64-bit SeaHash digest of ``data`` as an unsigned integer."""
    buf = memoryview(data).cast("B")
    lanes = list(_SEAHASH_SEEDS)
    for block_no, start in enumerate(range(0, len(buf), 8)):
        word = int.from_bytes(buf[start : start + 8], "little")
        lane = block_no % 4
        lanes[lane] = _diffuse(lanes[lane] ^ word)
    a, b, c, d = lanes
    return _diffuse(a ^ b ^ c ^ d ^ (len(buf) & _MASK64))


def _signed_hash(text: str) -> int:
    """Hash ``text`` and reinterpret the digest as a signed 64-bit integer."""
    digest = seahash(text.encode("utf-8"))
    return digest - (1 << 64) if digest >= (1 << 63) else digest


class CoverageType(IntEnum):
    """Kind of measurement a coverage sample holds."""

    LINE = 1
    BRANCH = 2
    METHOD = 3


class BranchFormat(IntEnum):
    """Shape of the identifier stored in ``BranchesData.branch``.

    ``LINE``: the line number a branch lands on ("26", "28").
    ``CONDITION``: the Nth branch stemming from a statement ("0:jump", "1").
    ``BLOCK_AND_BRANCH``: a block ID and branch ID ("0:0", "1:1").
    """

    LINE = 0
    CONDITION = 1
    BLOCK_AND_BRANCH = 2


@dataclass
class SourceFile:
    """A source file, with its path relative to the project's root."""

    id: int = 0
    path: str = ""

    @classmethod
    def from_path(cls, path: str) -> SourceFile:
        """Create a ``SourceFile`` whose ID is the hash of ``path``."""
        return cls(id=_signed_hash(path), path=path)


@dataclass
class CoverageSample:
    """A single coverage measurement for one line from one upload.

    Lines and methods fill in ``hits``; branches fill in ``hit_branches``
    and ``total_branches``.
    """

    raw_upload_id: int = 0
    local_sample_id: int = 0
    source_file_id: int = 0
    line_no: int = 0
    coverage_type: CoverageType = CoverageType.LINE
    hits: int | None = None
    hit_branches: int | None = None
    total_branches: int | None = None


@dataclass
class BranchesData:
    """Coverage status of one specific branch stemming from a line."""

    raw_upload_id: int = 0
    local_branch_id: int = 0
    source_file_id: int = 0
    local_sample_id: int = 0
    hits: int = 0
    branch_format: BranchFormat = BranchFormat.LINE
    branch: str = ""


@dataclass
class MethodData:
    """Method-specific data attached to a method declaration's sample."""

    raw_upload_id: int = 0
    local_method_id: int = 0
    source_file_id: int = 0
    local_sample_id: int = 0
    line_no: int | None = None
    hit_branches: int | None = None
    total_branches: int | None = None
    hit_complexity_paths: int | None = None
    total_complexity: int | None = None


@dataclass
class SpanData:
    """A measurement over a span of lines, or a subset of a single line."""

    raw_upload_id: int = 0
    local_span_id: int = 0
    source_file_id: int = 0
    local_sample_id: int | None = None
    hits: int = 0
    start_line: int | None = None
    start_col: int | None = None
    end_line: int | None = None
    end_col: int | None = None


@dataclass
class ContextAssoc:
    """Ties a ``Context`` to a sample or span of a specific upload."""

    context_id: int = 0
    raw_upload_id: int = 0
    local_sample_id: int | None = None
    local_span_id: int | None = None


@dataclass
class Context:
    """A label, such as a test case name, that measurements can be filtered by."""

    id: int = 0
    name: str = ""

    @classmethod
    def from_name(cls, name: str) -> Context:
        """Create a ``Context`` whose ID is the hash of ``name``."""
        return cls(id=_signed_hash(name), name=name)


@dataclass
class RawUpload:
    """Details about one upload: flags, storage location, CI job and so on.

    The comments give each field's key in the report JSON.
    """

    id: int = 0
    timestamp: int | None = None  # "d"
    raw_upload_url: str | None = None  # "a"
    flags: Any = None  # "f"
    provider: str | None = None  # "c"
    build: str | None = None  # "n"
    name: str | None = None  # "N"
    job_name: str | None = None  # "j"
    ci_run_url: str | None = None  # "u"
    state: str | None = None  # "p"
    env: str | None = None  # "e"
    session_type: str | None = None  # "st"
    session_extras: Any = None  # "se"


@dataclass
class CoverageTotals:
    """Aggregated coverage metrics for lines, branches and methods."""

    hit_lines: int
    total_lines: int
    hit_branches: int
    total_branches: int
    total_branch_roots: int
    hit_methods: int
    total_methods: int
    hit_complexity_paths: int
    total_complexity: int


@dataclass
class ReportTotals:
    """Aggregated metrics for a report or a filtered subset of one."""

    files: int
    uploads: int
    test_cases: int
    coverage: CoverageTotals