"""In-memory coverage report and the builder that creates one.

A ``ReportBuilder`` accepts files, contexts, uploads and measurements and
hands out per-upload local IDs. ``build`` returns the finished ``Report``,
which can be queried, merged with other reports and summarised.
"""

from __future__ import annotations

import itertools
import random
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace
from typing import TypeVar

from .models import (
    BranchesData,
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
)

_T = TypeVar("_T")

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


def _copies(items: Iterable[_T]) -> list[_T]:
    return [replace(item) for item in items]  # type: ignore[type-var]


class Report:
    """Coverage data held in memory."""

    def __init__(self) -> None:
        self._files: dict[int, SourceFile] = {}
        self._contexts: dict[int, Context] = {}
        self._samples: list[CoverageSample] = []
        self._branches: list[BranchesData] = []
        self._methods: list[MethodData] = []
        self._spans: list[SpanData] = []
        self._assocs: list[ContextAssoc] = []
        self._uploads: list[RawUpload] = []

    def list_files(self) -> list[SourceFile]:
        return _copies(self._files.values())

    def list_contexts(self) -> list[Context]:
        return _copies(self._contexts.values())

    def list_coverage_samples(self) -> list[CoverageSample]:
        return _copies(self._samples)

    def list_branches_for_sample(self, sample: CoverageSample) -> list[BranchesData]:
        return _copies(
            branch
            for branch in self._branches
            if branch.raw_upload_id == sample.raw_upload_id
            and branch.local_sample_id == sample.local_sample_id
        )

    def get_method_for_sample(self, sample: CoverageSample) -> MethodData | None:
        for method in self._methods:
            if (
                method.raw_upload_id == sample.raw_upload_id
                and method.local_sample_id == sample.local_sample_id
            ):
                return replace(method)
        return None

    def list_spans_for_sample(self, sample: CoverageSample) -> list[SpanData]:
        return _copies(
            span
            for span in self._spans
            if span.raw_upload_id == sample.raw_upload_id
            and span.local_sample_id == sample.local_sample_id
        )

    def list_contexts_for_sample(self, sample: CoverageSample) -> list[Context]:
        context_ids = {
            assoc.context_id
            for assoc in self._assocs
            if assoc.raw_upload_id == sample.raw_upload_id
            and assoc.local_sample_id == sample.local_sample_id
        }
        return _copies(c for c in self._contexts.values() if c.id in context_ids)

    def list_samples_for_file(self, file: SourceFile) -> list[CoverageSample]:
        return _copies(s for s in self._samples if s.source_file_id == file.id)

    def list_raw_uploads(self) -> list[RawUpload]:
        return _copies(self._uploads)

    def merge(self, other: Report) -> None:
        """Merge ``other`` into this report without modifying ``other``."""
        for file in other._files.values():
            self._files.setdefault(file.id, replace(file))
        for context in other._contexts.values():
            self._contexts.setdefault(context.id, replace(context))
        self._uploads.extend(_copies(other._uploads))
        self._samples.extend(_copies(other._samples))
        self._branches.extend(_copies(other._branches))
        self._methods.extend(_copies(other._methods))
        self._spans.extend(_copies(other._spans))
        self._assocs.extend(_copies(other._assocs))

    def totals(self) -> ReportTotals:
        """Compute aggregated metrics for the data in the report."""
        by_type: dict[CoverageType, list[CoverageSample]] = defaultdict(list)
        for sample in self._samples:
            by_type[sample.coverage_type].append(sample)
        lines = by_type[CoverageType.LINE]
        branches = by_type[CoverageType.BRANCH]
        methods = by_type[CoverageType.METHOD]

        coverage = CoverageTotals(
            hit_lines=sum(1 for s in lines if (s.hits or 0) > 0),
            total_lines=len(lines),
            hit_branches=sum(s.hit_branches or 0 for s in branches),
            total_branches=sum(s.total_branches or 0 for s in branches),
            total_branch_roots=len(branches),
            hit_methods=sum(1 for s in methods if (s.hits or 0) > 0),
            total_methods=len(methods),
            hit_complexity_paths=sum(m.hit_complexity_paths or 0 for m in self._methods),
            total_complexity=sum(m.total_complexity or 0 for m in self._methods),
        )
        return ReportTotals(
            files=len({s.source_file_id for s in self._samples}),
            uploads=len({s.raw_upload_id for s in self._samples}),
            test_cases=len(self._contexts),
            coverage=coverage,
        )


class ReportBuilder:
    """Create a new ``Report`` record by record.

    Measurement records get a local ID that is unique among records of the
    same kind from the same upload; any local ID passed in is overwritten.
    """

    def __init__(self) -> None:
        self._report: Report | None = Report()
        self._counters: defaultdict[tuple[str, int], itertools.count[int]] = defaultdict(
            itertools.count
        )

    @property
    def _target(self) -> Report:
        if self._report is None:
            raise RuntimeError("report has already been built")
        return self._report

    def _next_id(self, kind: str, raw_upload_id: int) -> int:
        return next(self._counters[(kind, raw_upload_id)])

    def insert_file(self, path: str) -> SourceFile:
        file = SourceFile.from_path(path)
        self._target._files.setdefault(file.id, replace(file))
        return file

    def insert_context(self, name: str) -> Context:
        context = Context.from_name(name)
        self._target._contexts.setdefault(context.id, replace(context))
        return context

    def insert_coverage_sample(self, sample: CoverageSample) -> CoverageSample:
        sample = replace(sample)
        self.multi_insert_coverage_sample([sample])
        return sample

    def multi_insert_coverage_sample(self, samples: Iterable[CoverageSample]) -> None:
        report = self._target
        for sample in samples:
            sample.local_sample_id = self._next_id("sample", sample.raw_upload_id)
            report._samples.append(replace(sample))

    def insert_branches_data(self, branch: BranchesData) -> BranchesData:
        branch = replace(branch)
        self.multi_insert_branches_data([branch])
        return branch

    def multi_insert_branches_data(self, branches: Iterable[BranchesData]) -> None:
        report = self._target
        for branch in branches:
            branch.local_branch_id = self._next_id("branch", branch.raw_upload_id)
            report._branches.append(replace(branch))

    def insert_method_data(self, method: MethodData) -> MethodData:
        method = replace(method)
        self.multi_insert_method_data([method])
        return method

    def multi_insert_method_data(self, methods: Iterable[MethodData]) -> None:
        report = self._target
        for method in methods:
            method.local_method_id = self._next_id("method", method.raw_upload_id)
            report._methods.append(replace(method))

    def insert_span_data(self, span: SpanData) -> SpanData:
        span = replace(span)
        self.multi_insert_span_data([span])
        return span

    def multi_insert_span_data(self, spans: Iterable[SpanData]) -> None:
        report = self._target
        for span in spans:
            span.local_span_id = self._next_id("span", span.raw_upload_id)
            report._spans.append(replace(span))

    def associate_context(self, assoc: ContextAssoc) -> ContextAssoc:
        self.multi_associate_context([assoc])
        return assoc

    def multi_associate_context(self, assocs: Iterable[ContextAssoc]) -> None:
        report = self._target
        report._assocs.extend(replace(assoc) for assoc in assocs)

    def insert_raw_upload(self, upload_details: RawUpload) -> RawUpload:
        """Store an upload under a fresh random ID and return it."""
        report = self._target
        taken = {upload.id for upload in report._uploads}
        new_id = random.randint(_I64_MIN, _I64_MAX)
        while new_id in taken:
            new_id = random.randint(_I64_MIN, _I64_MAX)
        upload = replace(upload_details, id=new_id)
        report._uploads.append(replace(upload))
        return upload

    def build(self) -> Report:
        """Return the finished report; the builder cannot be used afterwards."""
        report = self._target
        self._report = None
        return report