"""Writing the report JSON half of a pyreport.

The report JSON holds a ``"files"`` object, mapping each source file's path
to its chunk index and aggregated totals, and a ``"sessions"`` object,
mapping each session (upload) ID to its metadata and totals.

Rows are sequences laid out by column position.

File rows:
    0 chunk index, 1 file ID (unused), 2 path, 3 lines, 4 hits, 5 misses,
    6 partials, 7 branches, 8 methods, 9 hit complexity paths,
    10 total complexity.

Session rows:
    0 session ID, 1 upload ID (unused), 2 file count, 3 lines, 4 hits,
    5 misses, 6 partials, 7 branches, 8 methods, 9 hit complexity paths,
    10 total complexity, 11 timestamp, 12 raw upload URL, 13 flags (JSON),
    14 provider, 15 build, 16 name, 17 job name, 18 CI run URL, 19 state,
    20 env, 21 session type, 22 session extras (JSON).
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from .models import RawUpload


class _TextOutput(Protocol):
    def write(self, text: str, /) -> Any: ...


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _json_from_column(value: Any) -> Any:
    """Decode a JSON column; ``None`` stays ``None``."""
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value


def calculate_coverage_pct(hits: int, lines: int) -> str:
    """Format a coverage percentage with 5 decimals, except for 0 and 100."""
    if hits == 0:
        return "0"
    if hits == lines:
        return "100"
    ratio = math.copysign(math.inf, hits) if lines == 0 else hits / lines
    return f"{ratio * 100.0:.5f}"


def _totals(file_count: int, row: Sequence[Any]) -> list[Any]:
    lines, hits, misses, partials, branches, methods = (int(v) for v in row[3:9])
    hit_complexity_paths, total_complexity = int(row[9]), int(row[10])
    return [
        file_count,
        lines,
        hits,
        misses,
        partials,
        calculate_coverage_pct(hits, lines),
        branches,
        methods,
        0,  # messages
        0,  # sessions
        hit_complexity_paths,
        total_complexity,
        0,  # diff
    ]


def build_file_from_row(row: Sequence[Any]) -> tuple[str, list[Any]]:
    """Return the path and the ``"files"`` entry for one file row."""
    chunk_index = int(row[0])
    path = str(row[2])
    totals = _totals(0, row)
    return path, [chunk_index, totals, None, None]


def build_session_from_row(row: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """Return the session ID and the ``"sessions"`` entry for one session row."""
    session_id = str(row[0])
    totals = _totals(int(row[2]), row)
    upload = RawUpload(
        timestamp=row[11],
        raw_upload_url=row[12],
        flags=_json_from_column(row[13]),
        provider=row[14],
        build=row[15],
        name=row[16],
        job_name=row[17],
        ci_run_url=row[18],
        state=row[19],
        env=row[20],
        session_type=row[21],
        session_extras=_json_from_column(row[22]),
    )
    return session_id, {
        "t": totals,
        "d": upload.timestamp,
        "a": upload.raw_upload_url,
        "f": upload.flags,
        "c": upload.provider,
        "n": upload.build,
        "N": upload.name,
        "j": upload.job_name,
        "u": upload.ci_run_url,
        "p": upload.state,
        "e": upload.env,
        "st": upload.session_type,
        "se": upload.session_extras,
    }


def _write_object(key: str, entries: Iterable[tuple[str, Any]], output: _TextOutput) -> None:
    output.write(f"{_dumps(key)}: {{")
    for position, (entry_key, value) in enumerate(entries):
        delimiter = "," if position else ""
        output.write(f"{delimiter}{_dumps(entry_key)}: {_dumps(value)}")
    output.write("}")


def write_files_dict(rows: Iterable[Sequence[Any]], output: _TextOutput) -> None:
    """Write the ``"files": {...}`` pair; the caller adds braces and commas."""
    _write_object("files", (build_file_from_row(row) for row in rows), output)


def write_sessions_dict(rows: Iterable[Sequence[Any]], output: _TextOutput) -> None:
    """Write the ``"sessions": {...}`` pair; the caller adds braces and commas."""
    _write_object("sessions", (build_session_from_row(row) for row in rows), output)


def write_report_json(
    file_rows: Iterable[Sequence[Any]],
    session_rows: Iterable[Sequence[Any]],
    output: _TextOutput,
) -> None:
    """Write a complete report JSON object to ``output``."""
    output.write("{")
    write_files_dict(file_rows, output)
    output.write(",")
    write_sessions_dict(session_rows, output)
    output.write("}")