"""Validator factory — keyed lookup from a model type to the validator that checks it.

Usage:
    factory = ValidatorFactory()
    factory.register(Person, PydanticRuleValidator(PersonRules))

    @factory.validator_for(Order)
    class OrderValidator(BaseValidator):
        ...

A model class may also name its validator directly:

    class Invoice(BaseModel):
        __validator__ = InvoiceValidator
"""

from typing import Callable, Optional, Union

import structlog

from rulebridge.rules.base import BaseValidator

logger = structlog.get_logger()

VALIDATOR_ATTRIBUTE = "__validator__"


class ValidatorFactory:
    """Registry of validators keyed by exact model type."""

    def __init__(self, validators: Optional[dict[type, BaseValidator]] = None):
        self._validators: dict[type, BaseValidator] = {}
        for model_type, validator in (validators or {}).items():
            self.register(model_type, validator)

    def register(self, model_type: type, validator: BaseValidator) -> None:
        """Associate a validator with a model type, replacing any previous one."""
        if not isinstance(validator, BaseValidator):
            raise TypeError(f"Expected a BaseValidator for {model_type!r}, got {type(validator).__name__}")
        if not validator.can_validate_instances_of(model_type):
            raise ValueError(f"Validator '{validator.name}' cannot validate instances of {model_type!r}")

        self._validators[model_type] = validator
        logger.debug("validator_registered", model_type=getattr(model_type, "__name__", str(model_type)), validator=validator.name)

    def validator_for(self, model_type: type) -> Callable[[type], type]:
        """Class decorator registering an instance of the decorated validator class."""
        def decorator(validator_cls: type) -> type:
            self.register(model_type, validator_cls())
            return validator_cls
        return decorator

    def get_validator(self, model_type: type) -> Optional[BaseValidator]:
        """Return the validator for exactly `model_type`, or None."""
        validator = self._validators.get(model_type)
        if validator is not None:
            return validator

        declared = self._declared_validator(model_type)
        if declared is not None:
            self._validators[model_type] = declared
            return declared

        return None

    def remove(self, model_type: type) -> None:
        self._validators.pop(model_type, None)

    @staticmethod
    def _declared_validator(model_type: type) -> Optional[BaseValidator]:
        """Resolve a validator named by the model class itself (not inherited)."""
        declared: Union[BaseValidator, type, None] = getattr(model_type, "__dict__", {}).get(VALIDATOR_ATTRIBUTE)
        if declared is None:
            return None
        if isinstance(declared, type) and issubclass(declared, BaseValidator):
            return declared()
        if isinstance(declared, BaseValidator):
            return declared
        raise TypeError(
            f"{VALIDATOR_ATTRIBUTE} on {model_type.__name__} must be a BaseValidator subclass or instance"
        )

    def __contains__(self, model_type: type) -> bool:
        return self.get_validator(model_type) is not None

    def __len__(self) -> int:
        return len(self._validators)
