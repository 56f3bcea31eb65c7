import pytest

from covreport.models import (
    BranchesData,
    BranchFormat,
    Context,
    ContextAssoc,
    CoverageSample,
    CoverageTotals,
    CoverageType,
    MethodData,
    RawUpload,
    ReportTotals,
    SourceFile,
    SpanData,
    seahash,
)

PATHS = [
    "",
    "a",
    "src/report.rs",
    "src/report/models.rs",
    "src/report/schema.rs",
    "exactly8",
    "exactly_sixteen!",
    "test-case 2",
]


def test_coverage_type_values():
    assert CoverageType.LINE == 1
    assert CoverageType.BRANCH == 2
    assert CoverageType.METHOD == 3
    assert CoverageType(2) is CoverageType.BRANCH


def test_branch_format_members_distinct():
    values = {member.value for member in BranchFormat}
    assert len(values) == 3
    assert BranchFormat(BranchFormat.CONDITION.value) is BranchFormat.CONDITION


@pytest.mark.parametrize("path", PATHS)
def test_seahash_is_deterministic_and_64_bit(path):
    first = seahash(path.encode())
    second = seahash(bytearray(path.encode()))
    assert first == second
    assert 0 <= first < 2**64


def test_seahash_distinguishes_inputs():
    digests = {seahash(p.encode()) for p in PATHS}
    assert len(digests) == len(PATHS)


def test_seahash_is_length_sensitive():
    assert seahash(b"") != seahash(b"\x00")
    assert seahash(b"\x00") != seahash(b"\x00\x00")
    assert seahash(b"abcdefgh") != seahash(b"abcdefgh\x00")


def test_seahash_rejects_text():
    with pytest.raises(TypeError):
        seahash("src/report.rs")


@pytest.mark.parametrize("path", PATHS)
def test_source_file_id_is_signed_hash(path):
    source_file = SourceFile.from_path(path)
    assert source_file.path == path
    assert -(2**63) <= source_file.id < 2**63
    assert source_file.id % 2**64 == seahash(path.encode("utf-8"))


def test_source_file_equality():
    assert SourceFile.from_path("src/report.rs") == SourceFile.from_path("src/report.rs")
    assert SourceFile.from_path("src/report.rs") != SourceFile.from_path("src/report/models.rs")


def test_context_and_source_file_share_hash():
    context = Context.from_name("test-case")
    assert context.name == "test-case"
    assert context.id == SourceFile.from_path("test-case").id
    assert context.id % 2**64 == seahash(b"test-case")


def test_coverage_sample_defaults():
    sample = CoverageSample()
    assert sample.coverage_type is CoverageType.LINE
    assert (sample.hits, sample.hit_branches, sample.total_branches) == (None, None, None)
    assert sample.local_sample_id == 0


def test_branches_data_defaults():
    branch = BranchesData()
    assert branch.branch_format is BranchFormat.LINE
    assert branch.branch == ""
    assert branch.hits == 0


def test_method_and_span_defaults():
    method = MethodData(raw_upload_id=5, total_complexity=4)
    assert method.total_complexity == 4
    assert method.hit_complexity_paths is None
    span = SpanData(hits=3, start_line=3, start_col=10, end_line=7)
    assert span.end_col is None
    assert span.local_sample_id is None
    assert span == SpanData(hits=3, start_line=3, start_col=10, end_line=7)


def test_context_assoc_fields():
    assoc = ContextAssoc(context_id=Context.from_name("x").id, raw_upload_id=9, local_sample_id=1)
    assert assoc.local_span_id is None
    assert assoc.context_id == Context.from_name("x").id


def test_raw_upload_defaults_and_equality():
    upload = RawUpload(id=12, job_name="codecov-rs CI", flags=["unit"])
    assert upload.timestamp is None
    assert upload.session_extras is None
    assert upload.flags == ["unit"]
    assert upload == RawUpload(id=12, job_name="codecov-rs CI", flags=["unit"])
    assert upload != RawUpload(id=13, job_name="codecov-rs CI", flags=["unit"])


def test_report_totals_equality():
    def make():
        return ReportTotals(
            files=2,
            uploads=1,
            test_cases=0,
            coverage=CoverageTotals(
                hit_lines=6,
                total_lines=7,
                hit_branches=2,
                total_branches=4,
                total_branch_roots=2,
                hit_methods=2,
                total_methods=2,
                hit_complexity_paths=2,
                total_complexity=4,
            ),
        )

    assert make() == make()
    changed = make()
    changed.coverage.hit_lines = 5
    assert changed != make()


def test_totals_require_all_fields():
    with pytest.raises(TypeError):
        CoverageTotals(hit_lines=1)