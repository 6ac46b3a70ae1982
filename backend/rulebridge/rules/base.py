"""Base validator — abstract class implementing the Strategy Pattern.

Each validator checks instances of one model type and is looked up by that
type through the ValidatorFactory. New validators are added without touching
the pipeline that runs them.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from rulebridge.rules.context import ValidationContext
from rulebridge.rules.models import Severity, ValidationFailure, ValidationResult
from rulebridge.rules.selectors import ValidatorSelector


class BaseValidator(ABC):
    """Abstract base for all rule validators.

    Contract:
        - validate() is deterministic: same input → same output
        - validate() returns a ValidationResult (no errors = valid)
        - failure property names are prefixed with the context's property chain
        - validate() reports failures, it never raises them
    """

    @property
    def name(self) -> str:
        """Human-readable name for logging."""
        return type(self).__name__

    @abstractmethod
    def validate(self, context: ValidationContext) -> ValidationResult:
        """Run the rules against context.instance_to_validate."""
        ...

    def can_validate_instances_of(self, model_type: type) -> bool:
        return True

    def validate_instance(self, instance: Any, selector: Optional[ValidatorSelector] = None) -> ValidationResult:
        """Convenience entry point for validating a root instance."""
        return self.validate(ValidationContext(instance, selector=selector))

    # ── Helper Methods ──

    def _failure(
        self,
        context: ValidationContext,
        property_name: str,
        message: str,
        attempted_value: Any = None,
        error_code: Optional[str] = None,
        severity: Severity = Severity.ERROR,
        rule_set: Optional[str] = None,
    ) -> ValidationFailure:
        """Convenience method to create a ValidationFailure under the context's chain."""
        return ValidationFailure(
            property_name=context.property_chain.build_property_name(property_name),
            error_message=message,
            attempted_value=attempted_value,
            error_code=error_code,
            severity=severity,
            rule_set=rule_set,
        )
