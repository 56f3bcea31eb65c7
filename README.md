# covreport

`covreport` models line-by-line coverage data, keeps it in an in-memory
report that can be queried, merged and summarised, and writes the
**report JSON** half of the "pyreport" format: the object that describes the
source files and the uploads ("sessions") of a report, with aggregated totals
for each.

It has no dependencies outside the standard library.

## Installation

```
pip install covreport
```

To run the test suite:

```
pip install "covreport[test]"
pytest
```

## Data model: `covreport.models`

- `SourceFile` and `Context` use a SeaHash of their path or name, read as a
  signed 64-bit integer, as their ID, so every host computes the same ID for
  the same name. Build them with `SourceFile.from_path(path)` and
  `Context.from_name(name)`. `seahash(data)` returns the unsigned 64-bit digest
  of a bytes-like object.
- `RawUpload` holds the details of one upload: timestamp, raw upload URL,
  flags, provider, build, name, CI job name, CI run URL, state, env, session
  type and session extras.
- `CoverageSample` is a single measurement for one line from one upload.
  Lines and methods fill in `hits`; branches fill in `hit_branches` and
  `total_branches`.
- `BranchesData`, `MethodData` and `SpanData` hold further detail about
  specific branches, methods (including cyclomatic complexity) and spans.
  `ContextAssoc` links a `Context` to a sample or span.
- `CoverageType` (`LINE`, `BRANCH`, `METHOD`) and `BranchFormat` (`LINE`,
  `CONDITION`, `BLOCK_AND_BRANCH`) describe the shape of a measurement.
- `CoverageTotals` and `ReportTotals` hold aggregated metrics.

## Building and querying a report: `covreport.report`

`ReportBuilder` creates a `Report` record by record:

```python
from covreport.models import CoverageSample, CoverageType, RawUpload
from covreport.report import ReportBuilder

builder = ReportBuilder()
source = builder.insert_file("src/app.py")
upload = builder.insert_raw_upload(RawUpload(job_name="unit tests"))
builder.insert_coverage_sample(
    CoverageSample(
        raw_upload_id=upload.id,
        source_file_id=source.id,
        line_no=1,
        coverage_type=CoverageType.LINE,
        hits=3,
    )
)
report = builder.build()
print(report.totals())
```

- `insert_raw_upload` stores the upload under a fresh random signed 64-bit ID
  and returns it with that ID.
- `insert_coverage_sample`, `insert_branches_data`, `insert_method_data` and
  `insert_span_data` (and their `multi_insert_*` forms, which update the
  records passed in) overwrite the local ID with one that is unique among
  records of the same kind from the same upload, counting from 0.
- `associate_context` / `multi_associate_context` store `ContextAssoc` links.
- `build()` returns the `Report`; the builder raises `RuntimeError` if used
  afterwards.

A `Report` offers `list_files`, `list_contexts`, `list_coverage_samples`,
`list_raw_uploads`, `list_samples_for_file`, and, for a given sample,
`list_branches_for_sample`, `get_method_for_sample`, `list_spans_for_sample`
and `list_contexts_for_sample`. All of them return copies.

`merge(other)` adds another report's data without modifying it: files and
contexts are added only if their ID is not already present; everything else is
appended.

`totals()` counts the distinct files and uploads that have samples, the
number of contexts (as test cases), line and method samples with and without
hits, branch roots and hit/total branches, and hit/total complexity from the
method data.

## Pyreport value types: `covreport.types`

`HitCount`, `BranchesTaken` and `PartialCoverage` are the coverage values of a
line; `TotalComplexity` and `PathsTaken` the complexity values;
`BlockAndBranch`, `Condition` and `LineBranch` the kinds of missed branch;
`LabelId` and `LabelName` the kinds of label. `Partial`, `LineSession`,
`CoverageDatapoint` and `ReportLine` hold a line's data.

`normalize_coverage_measurement(coverage, coverage_type)` corrects known
quirks in input data:

- `PartialCoverage` becomes `BranchesTaken(1, 2)`;
- a fraction on a method becomes a `HitCount` of its numerator;
- a fraction on a line turns the line into a branch;
- a hit count of 0, 1 or 2 on a branch becomes `BranchesTaken(n, 2)`; any
  other count raises `ValueError`.

## Writing the report JSON: `covreport.report_json`

`write_report_json(file_rows, session_rows, output)` writes the whole object
to anything with a `write(str)` method. `write_files_dict` and
`write_sessions_dict` write just the `"files"` or `"sessions"` pair, and
`build_file_from_row` / `build_session_from_row` build one entry. Rows are
sequences laid out by column position, as documented in the module docstring.

```python
import io
from covreport.report_json import write_report_json

file_rows = [(0, None, "src/app.py", 4, 3, 1, 0, 0, 0, 0, 0)]
out = io.StringIO()
write_report_json(file_rows, [], out)
# {"files": {"src/app.py": [0,[0,4,3,1,0,"75.00000",0,0,0,0,0,0,0],null,null]},"sessions": {}}
```

Coverage percentages come from `calculate_coverage_pct(hits, lines)`: `"0"`
when nothing was hit, `"100"` when everything was, and five decimal places
otherwise (`"33.33333"`).

## What this package does not do

- It writes only the report JSON. It does not write the line-by-line chunks
  file, and it has no single call that writes both halves of a report.
- It does not read or parse existing report JSON or chunks files.
- `Report` lives in memory only; there is no database or file storage behind
  it.
- There is no command-line tool.