"""Default validation visitor — the host's built-in validation of a bound model.

Built-in validation is whatever the model type itself declares: pydantic field
constraints and validators, or a dataclass's annotated types. Bound models are
re-checked by validating their field values again (read under the keys the
model validates from, excluded fields included), so instances that were mutated
or built with model_construct() after binding are still caught.
"""

import dataclasses
from typing import Any, Optional

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from rulebridge.mvc.action import ActionContext
from rulebridge.mvc.metadata import ModelMetadata, ModelMetadataProvider
from rulebridge.mvc.model_state import ValidationStateDictionary
from rulebridge.naming import combine_names, location_to_path

logger = structlog.get_logger()


def _validation_key(name: str, field: FieldInfo, config: ConfigDict) -> str:
    """The input key pydantic reads `name` from when validating."""
    if config.get("populate_by_name") or config.get("validate_by_name"):
        return name
    alias = field.validation_alias
    if isinstance(alias, AliasChoices):
        alias = next((choice for choice in alias.choices if isinstance(choice, str)), None)
    if isinstance(alias, str):
        return alias
    return field.alias or name


def _validation_input(value: Any) -> Any:
    """Rebuild `value` as input its own validators accept, excluded fields included."""
    if isinstance(value, BaseModel):
        model_type = type(value)
        data = {
            _validation_key(name, field, model_type.model_config): _validation_input(value.__dict__[name])
            for name, field in model_type.model_fields.items()
            if name in value.__dict__
        }
        data.update(value.__pydantic_extra__ or {})
        return data
    if isinstance(value, list):
        return [_validation_input(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_validation_input(item) for item in value)
    if isinstance(value, dict):
        return {key: _validation_input(item) for key, item in value.items()}
    return value


class ValidationVisitor:
    """Walks a model (and collection members) writing built-in validation errors to model state."""

    def __init__(
        self,
        action_context: ActionContext,
        metadata_provider: ModelMetadataProvider,
        validation_state: Optional[ValidationStateDictionary] = None,
    ):
        self.action_context = action_context
        self.metadata_provider = metadata_provider
        self.validation_state = validation_state if validation_state is not None else ValidationStateDictionary()
        self.model_state = action_context.model_state
        self._current_path: set[int] = set()
        self._adapters: dict[type, TypeAdapter] = {}

    def validate(self, metadata: Optional[ModelMetadata], key: str, model: Any) -> bool:
        """Validate `model` under `key`; returns True when no errors were added."""
        key = key or ""
        if model is None or metadata is None:
            if key:
                self.model_state.mark_field_valid(key)
            return True

        entry = self.validation_state.get(model)
        if entry is not None and entry.suppress_validation:
            self.model_state.mark_field_skipped(entry.key if entry.key is not None else key)
            return True

        # Reference cycles: a model already being visited higher up is valid here
        if id(model) in self._current_path:
            return True

        self._current_path.add(id(model))
        try:
            if metadata.is_collection_type:
                return self._visit_collection(key, model)
            return self._visit_complex(metadata, key, model)
        finally:
            self._current_path.discard(id(model))

    def _visit_collection(self, key: str, items: Any) -> bool:
        is_valid = True
        for index, item in enumerate(items):
            item_metadata = self.metadata_provider.get_metadata_for_model(item) if item is not None else None
            if not self.validate(item_metadata, combine_names(key, f"[{index}]"), item):
                is_valid = False
        return is_valid

    def _visit_complex(self, metadata: ModelMetadata, key: str, model: Any) -> bool:
        errors = self._builtin_errors(model)
        for error in errors:
            self.model_state.add_model_error(
                combine_names(key, location_to_path(error["loc"])),
                error["msg"],
            )

        if not errors and key:
            self.model_state.mark_field_valid(key)
        return not errors

    def _builtin_errors(self, model: Any) -> list[dict]:
        model_type = type(model)
        try:
            if isinstance(model, BaseModel):
                model_type.model_validate(_validation_input(model))
            elif dataclasses.is_dataclass(model):
                self._adapter_for(model_type).validate_python(dataclasses.asdict(model))
        except PydanticValidationError as exc:
            logger.debug("default_validation_failed", model_type=model_type.__name__, errors=exc.error_count())
            return exc.errors()
        return []

    def _adapter_for(self, model_type: type) -> TypeAdapter:
        adapter = self._adapters.get(model_type)
        if adapter is None:
            adapter = TypeAdapter(model_type)
            self._adapters[model_type] = adapter
        return adapter
