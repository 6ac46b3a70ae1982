"""Model state — per-request error map keyed by model property path."""

from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field


class ModelValidationState(str, Enum):
    """Validation outcome recorded for a single key."""

    UNVALIDATED = "unvalidated"
    VALID = "valid"
    INVALID = "invalid"
    SKIPPED = "skipped"


class ModelStateEntry(BaseModel):
    """Errors recorded under one key."""

    errors: list[str] = Field(default_factory=list)
    validation_state: ModelValidationState = ModelValidationState.UNVALIDATED


class ModelStateDictionary:
    """Mutable mapping of key -> ModelStateEntry, filled by validators during a request."""

    def __init__(self):
        self._entries: dict[str, ModelStateEntry] = {}

    def get_or_add(self, key: str) -> ModelStateEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = ModelStateEntry()
            self._entries[key] = entry
        return entry

    def add_model_error(self, key: str, message: str) -> None:
        entry = self.get_or_add(key)
        entry.errors.append(message)
        entry.validation_state = ModelValidationState.INVALID

    def mark_field_valid(self, key: str) -> None:
        entry = self.get_or_add(key)
        if not entry.errors:
            entry.validation_state = ModelValidationState.VALID

    def mark_field_skipped(self, key: str) -> None:
        entry = self.get_or_add(key)
        if not entry.errors:
            entry.validation_state = ModelValidationState.SKIPPED

    def get_validation_state(self, key: str) -> ModelValidationState:
        entry = self._entries.get(key)
        return entry.validation_state if entry else ModelValidationState.UNVALIDATED

    @property
    def is_valid(self) -> bool:
        return not any(entry.errors for entry in self._entries.values())

    @property
    def error_count(self) -> int:
        return sum(len(entry.errors) for entry in self._entries.values())

    def to_dict(self) -> dict[str, list[str]]:
        """Keys with at least one error, in insertion order."""
        return {key: list(entry.errors) for key, entry in self._entries.items() if entry.errors}

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> ModelStateEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def __repr__(self) -> str:
        return f"ModelStateDictionary({self.to_dict()!r})"


class ValidationStateEntry(BaseModel):
    """Per-model instructions for the default validation visitor."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Optional[str] = None
    metadata: Any = None
    suppress_validation: bool = False


class ValidationStateDictionary:
    """Maps model instances (by identity) to their ValidationStateEntry."""

    def __init__(self):
        # id -> (model, entry); the model reference keeps the id from being reused
        self._entries: dict[int, tuple[Any, ValidationStateEntry]] = {}

    def __setitem__(self, model: Any, entry: ValidationStateEntry) -> None:
        self._entries[id(model)] = (model, entry)

    def __getitem__(self, model: Any) -> ValidationStateEntry:
        return self._entries[id(model)][1]

    def get(self, model: Any) -> Optional[ValidationStateEntry]:
        item = self._entries.get(id(model))
        return item[1] if item else None

    def __contains__(self, model: Any) -> bool:
        return id(model) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
