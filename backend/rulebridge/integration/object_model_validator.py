"""Rule-based object model validator — plugs rule validators into the host validation pipeline.

For each bound model the validator:
    1. resolves a rule validator for the model's runtime type, synthesizing a
       CollectionValidator when only the element type has one
    2. applies the parameter's CustomizeValidator (rule selection, interceptor)
    3. copies failures into model state, replacing stale errors per key
    4. optionally runs the host's default validation afterwards

Usage:
    validator = RuleBridgeObjectModelValidator(ModelMetadataProvider(), validator_factory=factory)
    validator.validate(action_context, ValidationStateDictionary(), "", person)
    action_context.model_state.to_dict()
"""

import time
from typing import Any, Optional

import structlog

from rulebridge.config import get_settings
from rulebridge.integration.customization import CustomizeValidator, ValidatorInterceptor
from rulebridge.mvc.action import ActionContext, ParameterDescriptor, unwrap_optional
from rulebridge.mvc.metadata import ModelMetadata, ModelMetadataProvider
from rulebridge.mvc.model_state import ValidationStateDictionary
from rulebridge.mvc.validation import ObjectModelValidator
from rulebridge.mvc.visitor import ValidationVisitor
from rulebridge.naming import combine_names
from rulebridge.rules.base import BaseValidator
from rulebridge.rules.collection import MODEL_KEY_PREFIX, CollectionValidator
from rulebridge.rules.context import PropertyChain, ValidationContext
from rulebridge.rules.factory import ValidatorFactory

logger = structlog.get_logger()


class RuleBridgeObjectModelValidator(ObjectModelValidator):
    """Object model validator that runs rule validators before (or instead of) built-in validation."""

    MODEL_KEY_PREFIX = MODEL_KEY_PREFIX

    def __init__(
        self,
        metadata_provider: ModelMetadataProvider,
        validator_factory: Optional[ValidatorFactory] = None,
        run_default_validation: Optional[bool] = None,
    ):
        """
        Args:
            metadata_provider: Source of type metadata for bound models
            validator_factory: Used when the action context provides no ValidatorFactory service
            run_default_validation: Run built-in validation after the rule validator.
                Defaults to the RUN_DEFAULT_VALIDATION setting.
        """
        if metadata_provider is None:
            raise ValueError("metadata_provider is required")

        self.metadata_provider = metadata_provider
        self.validator_factory = validator_factory
        self.run_default_validation = (
            get_settings().RUN_DEFAULT_VALIDATION if run_default_validation is None else run_default_validation
        )

    def validate(
        self,
        action_context: ActionContext,
        validation_state: Optional[ValidationStateDictionary],
        prefix: str,
        model: Any,
    ) -> None:
        if action_context is None:
            raise ValueError("action_context is required")

        prefix = prefix or ""
        start_time = time.perf_counter()

        validator: Optional[BaseValidator] = None
        metadata: Optional[ModelMetadata] = None
        customizations = CustomizeValidator()
        prepend_prefix = True

        if model is not None:
            matches = self._matching_parameters(action_context, type(model), prefix)
            declared_type = unwrap_optional(matches[0].parameter_type) if len(matches) == 1 else None
            metadata = self.metadata_provider.get_metadata_for_model(model, declared_type)

            factory = action_context.get_service(ValidatorFactory)
            if factory is None:
                factory = self.validator_factory
            if factory is None:
                logger.warning("validator_factory_missing", action=action_context.action_descriptor.display_name)
            else:
                validator = factory.get_validator(metadata.model_type)
                if validator is None and metadata.is_collection_type:
                    validator = self._build_collection_validator(prefix, metadata, factory)
                    prepend_prefix = False

            customizations = self._get_customizations(matches, prefix)

        if validator is None:
            # No rule validator for this type: built-in validation only
            logger.debug(
                "validator_not_found",
                model_type=type(model).__name__ if model is not None else None,
                prefix=prefix,
            )
            self.execute_default_validation(action_context, validation_state, prefix, model, metadata)
            return

        selector = customizations.to_validator_selector()
        interceptor = customizations.get_interceptor()
        if interceptor is None and isinstance(validator, ValidatorInterceptor):
            interceptor = validator

        context = ValidationContext(model, PropertyChain(), selector)

        if interceptor is not None:
            # None keeps the original context
            context = interceptor.before_validation(action_context, context) or context

        result = validator.validate(context)

        if interceptor is not None:
            # None keeps the original result; an empty result means no errors
            replaced = interceptor.after_validation(action_context, context, result)
            if replaced is not None:
                result = replaced

        model_state = action_context.model_state
        keys_processed: set[str] = set()

        for failure in result.errors:
            if prepend_prefix:
                key = combine_names(prefix, failure.property_name)
            else:
                key = failure.property_name.replace(MODEL_KEY_PREFIX, "")

            # Errors already stored under this key come from an earlier pass; replace them once
            if key in model_state and key not in keys_processed:
                model_state[key].errors.clear()

            keys_processed.add(key)
            model_state.add_model_error(key, failure.error_message)

        if self.run_default_validation:
            self.execute_default_validation(action_context, validation_state, prefix, model, metadata)

        logger.info(
            "model_validation_complete",
            validator=validator.name,
            prefix=prefix,
            failures=len(result.errors),
            keys=sorted(keys_processed),
            default_validation=self.run_default_validation,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

    def execute_default_validation(
        self,
        action_context: ActionContext,
        validation_state: Optional[ValidationStateDictionary],
        prefix: str,
        model: Any,
        metadata: Optional[ModelMetadata],
    ) -> None:
        """Run the host's built-in validation; override to change the fallback path."""
        visitor = ValidationVisitor(action_context, self.metadata_provider, validation_state)
        visitor.validate(metadata, prefix, model)

    @staticmethod
    def _matching_parameters(action_context: ActionContext, model_type: type, prefix: str) -> list[ParameterDescriptor]:
        """Action parameters of `model_type` bound under `prefix`."""
        matches = []
        for descriptor in action_context.action_descriptor.parameters:
            if descriptor.runtime_type is not model_type:
                continue
            binder_name = descriptor.binder_model_name
            if (
                (binder_name is not None and binder_name == prefix)
                or descriptor.name == prefix
                or (prefix == "" and binder_name is None)
            ):
                matches.append(descriptor)
        return matches

    @staticmethod
    def _get_customizations(matches: list[ParameterDescriptor], prefix: str) -> CustomizeValidator:
        attribute = None

        if len(matches) == 1:
            attribute = matches[0].get_attribute(CustomizeValidator)
        elif len(matches) > 1:
            # Can't tell which parameter is being validated; apply no customization
            logger.warning(
                "ambiguous_validator_customization",
                prefix=prefix,
                parameters=[m.name for m in matches],
            )

        return attribute or CustomizeValidator()

    @staticmethod
    def _build_collection_validator(
        prefix: str, metadata: ModelMetadata, factory: ValidatorFactory
    ) -> Optional[BaseValidator]:
        if metadata.element_type is None:
            return None

        element_validator = factory.get_validator(metadata.element_type)
        if element_validator is None:
            return None

        logger.debug(
            "collection_validator_built",
            element_type=getattr(metadata.element_type, "__name__", str(metadata.element_type)),
            prefix=prefix,
        )
        return CollectionValidator(element_validator, prefix)
