"""
Soil report error taxonomy.

Every error carries the HTTP status the API maps it to and a stable `kind`
string used in error bodies.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Violation:
    field: str | None
    kind: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "kind": self.kind, "message": self.message}


class SoilReportError(Exception):
    status_code = 400
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def violations(self) -> list[Violation]:
        return []


class ValidationError(SoilReportError):
    kind = "validation_error"

    def __init__(self, violations: list[Violation]) -> None:
        if not violations:
            raise ValueError("ValidationError requires at least one violation.")
        super().__init__("; ".join(v.message for v in violations))
        self._violations = list(violations)

    @property
    def violations(self) -> list[Violation]:
        return list(self._violations)


class NotFoundError(SoilReportError):
    status_code = 404
    kind = "not_found"

    def __init__(self, report_id: str) -> None:
        super().__init__(f"Soil report with ID {report_id} not found")
        self.report_id = report_id


class InvalidPaginationError(SoilReportError):
    kind = "invalid_pagination"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    @property
    def violations(self) -> list[Violation]:
        return [Violation(field=self.field, kind=self.kind, message=self.message)]


class InvalidSortFieldError(SoilReportError):
    kind = "invalid_sort"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    @property
    def violations(self) -> list[Violation]:
        return [Violation(field=self.field, kind=self.kind, message=self.message)]


class InvalidFilterError(SoilReportError):
    kind = "invalid_filter"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    @property
    def violations(self) -> list[Violation]:
        return [Violation(field=self.field, kind=self.kind, message=self.message)]
