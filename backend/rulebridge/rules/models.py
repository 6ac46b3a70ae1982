"""Validation models — failure records and result structure produced by rule validators."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Validation failure severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationFailure(BaseModel):
    """A single rule violation."""

    property_name: str = ""          # Path relative to the validated root, e.g. "address.city"
    error_message: str
    attempted_value: Any = None
    error_code: Optional[str] = None
    severity: Severity = Severity.ERROR
    rule_set: Optional[str] = None   # None means the rule belongs to no named rule set

    def __str__(self) -> str:
        return self.error_message


class ValidationResult(BaseModel):
    """Ordered failures from one validator run (empty = valid)."""

    errors: list[ValidationFailure] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @classmethod
    def merge(cls, results: list["ValidationResult"]) -> "ValidationResult":
        errors: list[ValidationFailure] = []
        for result in results:
            errors.extend(result.errors)
        return cls(errors=errors)
