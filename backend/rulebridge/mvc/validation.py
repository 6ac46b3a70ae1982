"""Object model validator contract — the host's validation extension point."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from rulebridge.mvc.action import ActionContext
from rulebridge.mvc.metadata import ModelMetadataProvider
from rulebridge.mvc.model_state import ValidationStateDictionary
from rulebridge.mvc.visitor import ValidationVisitor


class ObjectModelValidator(ABC):
    """Validates a bound model and records errors in action_context.model_state."""

    @abstractmethod
    def validate(
        self,
        action_context: ActionContext,
        validation_state: Optional[ValidationStateDictionary],
        prefix: str,
        model: Any,
    ) -> None:
        ...


class DefaultObjectModelValidator(ObjectModelValidator):
    """Built-in validation only."""

    def __init__(self, metadata_provider: ModelMetadataProvider):
        if metadata_provider is None:
            raise ValueError("metadata_provider is required")
        self.metadata_provider = metadata_provider

    def validate(self, action_context, validation_state, prefix, model) -> None:
        if action_context is None:
            raise ValueError("action_context is required")

        metadata = self.metadata_provider.get_metadata_for_model(model) if model is not None else None
        visitor = ValidationVisitor(action_context, self.metadata_provider, validation_state)
        visitor.validate(metadata, prefix, model)
