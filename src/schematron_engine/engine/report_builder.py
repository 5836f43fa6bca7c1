"""Accumulates firing records into a validation report."""

import logging
from collections.abc import Iterable

from ..models.report import FiringRecord, ValidationReport

logger = logging.getLogger(__name__)


class ReportBuilder:
    """Append-only record buffer for one run.

    Records are kept exactly as emitted: no deduplication, reordering or
    filtering. `build()` freezes the buffer; the builder is unusable after.
    """

    def __init__(self, schema_title: str | None = None, phase: str | None = None):
        self.schema_title = schema_title
        self.phase = phase
        self._records: list[FiringRecord] = []
        self._built = False

    @property
    def record_count(self) -> int:
        return len(self._records)

    def append(self, record: FiringRecord) -> None:
        if self._built:
            raise RuntimeError("Report already built; start a new builder for a new run")
        self._records.append(record)

    def extend(self, records: Iterable[FiringRecord]) -> None:
        for record in records:
            self.append(record)

    def build(self) -> ValidationReport:
        if self._built:
            raise RuntimeError("Report already built")
        self._built = True
        report = ValidationReport(
            records=tuple(self._records),
            schema_title=self.schema_title,
            phase=self.phase,
        )
        self._records = []
        logger.debug(f"Built report with {len(report.records)} records")
        return report
