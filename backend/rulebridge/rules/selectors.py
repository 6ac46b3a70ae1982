"""Rule selectors — decide which rules take part in a validation run.

A selector is consulted once per failure with the failure's rule set and its
property path relative to the validated instance.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Union

DEFAULT_RULE_SET = "default"
WILDCARD_RULE_SET = "*"


def _split_names(names: Union[str, Iterable[str], None]) -> tuple[str, ...]:
    """Accept "a, b" or ["a", "b"] and return trimmed, non-empty names."""
    if names is None:
        return ()
    if isinstance(names, str):
        names = names.split(",")
    return tuple(n.strip() for n in names if n and n.strip())


class ValidatorSelector(ABC):
    """Strategy deciding whether a rule may execute."""

    @property
    def rule_sets(self) -> tuple[str, ...]:
        """Rule sets this selector activates, handed to the engine as validation context."""
        return (DEFAULT_RULE_SET,)

    @abstractmethod
    def can_execute(self, rule_set: Optional[str], property_path: str, context) -> bool:
        ...


class DefaultValidatorSelector(ValidatorSelector):
    """Runs rules that are in no rule set or in the "default" set."""

    def can_execute(self, rule_set: Optional[str], property_path: str, context) -> bool:
        return rule_set is None or rule_set == DEFAULT_RULE_SET


class RulesetValidatorSelector(ValidatorSelector):
    """Runs the named rule sets only. "*" runs everything, "default" includes unassigned rules."""

    def __init__(self, rule_sets: Union[str, Iterable[str]]):
        self._rule_sets = _split_names(rule_sets)

    @property
    def rule_sets(self) -> tuple[str, ...]:
        return self._rule_sets

    def can_execute(self, rule_set: Optional[str], property_path: str, context) -> bool:
        if WILDCARD_RULE_SET in self._rule_sets:
            return True
        if rule_set is None:
            return DEFAULT_RULE_SET in self._rule_sets
        return rule_set in self._rule_sets

    def __repr__(self) -> str:
        return f"RulesetValidatorSelector({list(self._rule_sets)!r})"


class MemberNameValidatorSelector(ValidatorSelector):
    """Runs rules for the named properties (and anything nested beneath them)."""

    def __init__(self, member_names: Union[str, Iterable[str]]):
        self.member_names = _split_names(member_names)

    def can_execute(self, rule_set: Optional[str], property_path: str, context) -> bool:
        for member in self.member_names:
            if property_path == member:
                return True
            if property_path.startswith(member + ".") or property_path.startswith(member + "["):
                return True
        return False

    def __repr__(self) -> str:
        return f"MemberNameValidatorSelector({list(self.member_names)!r})"
