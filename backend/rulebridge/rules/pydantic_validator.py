"""Pydantic rule validator — runs a pydantic "rules model" against an object's data.

Rules are ordinary pydantic fields, constraints and validators:

    class PersonRules(BaseModel):
        name: Optional[str] = None
        age: int = Field(default=0, ge=0)

        @field_validator("name")
        @classmethod
        def name_required(cls, value):
            if not value:
                raise rule_error("Name is required")
            return value

    factory.register(Person, PydanticRuleValidator(PersonRules))

Failures raised with ``rule_error(..., rule_set="contact")`` belong to a named
rule set and only surface when the active selector includes it.
"""

import dataclasses
from typing import Any, Optional

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from rulebridge.naming import location_to_path
from rulebridge.rules.base import BaseValidator
from rulebridge.rules.context import ValidationContext
from rulebridge.rules.models import ValidationFailure, ValidationResult

logger = structlog.get_logger()


def rule_error(message: str, rule_set: Optional[str] = None, code: str = "rule") -> PydanticCustomError:
    """Build an error to raise from a rules-model validator; the message is kept verbatim."""
    return PydanticCustomError(code, message, {"rule_set": rule_set})


def _extract_data(instance: Any) -> Any:
    """Turn the instance into plain data the rules model can validate."""
    if isinstance(instance, BaseModel):
        return instance.model_dump(by_alias=True)
    if dataclasses.is_dataclass(instance) and not isinstance(instance, type):
        return dataclasses.asdict(instance)
    if isinstance(instance, dict):
        return instance
    if hasattr(instance, "__dict__"):
        return dict(vars(instance))
    return instance


class PydanticRuleValidator(BaseValidator):
    """Validates instances of `model_type` against the rules declared on `rules_model`."""

    def __init__(self, rules_model: type[BaseModel], model_type: Optional[type] = None):
        self.rules_model = rules_model
        self.model_type = model_type

    @property
    def name(self) -> str:
        return f"PydanticRuleValidator[{self.rules_model.__name__}]"

    def can_validate_instances_of(self, model_type: type) -> bool:
        if self.model_type is None:
            return True
        return isinstance(model_type, type) and issubclass(model_type, self.model_type)

    def validate(self, context: ValidationContext) -> ValidationResult:
        instance = context.instance_to_validate
        selector = context.selector

        try:
            self.rules_model.model_validate(
                _extract_data(instance),
                context={
                    "rule_sets": selector.rule_sets,
                    "selector": selector,
                    "instance": instance,
                    **context.root_context_data,
                },
            )
        except PydanticValidationError as exc:
            failures = []
            for error in exc.errors():
                relative_path = location_to_path(error["loc"])
                rule_set = (error.get("ctx") or {}).get("rule_set")

                if not selector.can_execute(rule_set, relative_path, context):
                    continue

                failures.append(ValidationFailure(
                    property_name=context.property_chain.build_property_name(relative_path),
                    error_message=error["msg"],
                    attempted_value=error.get("input"),
                    error_code=error["type"],
                    rule_set=rule_set,
                ))

            logger.debug(
                "rules_model_failed",
                validator=self.name,
                raw_errors=exc.error_count(),
                selected=len(failures),
            )
            return ValidationResult(errors=failures)

        return ValidationResult()
