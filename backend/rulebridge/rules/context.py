"""Validation context — the instance under validation plus where it sits in the object graph."""

from typing import Any, Optional

from rulebridge.naming import combine_names
from rulebridge.rules.selectors import DefaultValidatorSelector, ValidatorSelector


class PropertyChain:
    """Member names and indexers leading from the root instance to the current one."""

    def __init__(self, segments: Optional[list[str]] = None):
        self._segments: list[str] = list(segments or [])

    def add(self, member_name: str) -> None:
        if member_name:
            self._segments.append(member_name)

    def add_indexer(self, index: int) -> None:
        self._segments.append(f"[{index}]")

    def copy(self) -> "PropertyChain":
        return PropertyChain(self._segments)

    def build_property_name(self, property_name: str) -> str:
        return combine_names(str(self), property_name)

    def __len__(self) -> int:
        return len(self._segments)

    def __str__(self) -> str:
        path = ""
        for segment in self._segments:
            path = combine_names(path, segment)
        return path

    def __repr__(self) -> str:
        return f"PropertyChain({str(self)!r})"


class ValidationContext:
    """Carries the instance, its property chain and the active rule selector."""

    def __init__(
        self,
        instance_to_validate: Any,
        property_chain: Optional[PropertyChain] = None,
        selector: Optional[ValidatorSelector] = None,
        root_context_data: Optional[dict] = None,
    ):
        self.instance_to_validate = instance_to_validate
        self.property_chain = property_chain or PropertyChain()
        self.selector = selector or DefaultValidatorSelector()
        self.root_context_data = root_context_data if root_context_data is not None else {}

    @property
    def is_child_context(self) -> bool:
        return len(self.property_chain) > 0

    def for_child(self, instance: Any, *segments: str) -> "ValidationContext":
        """Derive a context for a nested value; segments like "items", "[2]" extend the chain."""
        chain = self.property_chain.copy()
        for segment in segments:
            chain.add(segment)
        return ValidationContext(
            instance,
            property_chain=chain,
            selector=self.selector,
            root_context_data=self.root_context_data,
        )
