"""Rule validators — the validation library side of the bridge.

Usage:
    from rulebridge.rules import ValidatorFactory, PydanticRuleValidator, rule_error

    factory = ValidatorFactory()
    factory.register(Person, PydanticRuleValidator(PersonRules))
    result = factory.get_validator(Person).validate_instance(person)
"""

from rulebridge.rules.base import BaseValidator
from rulebridge.rules.collection import MODEL_KEY_PREFIX, CollectionValidator
from rulebridge.rules.context import PropertyChain, ValidationContext
from rulebridge.rules.factory import ValidatorFactory
from rulebridge.rules.models import Severity, ValidationFailure, ValidationResult
from rulebridge.rules.pydantic_validator import PydanticRuleValidator, rule_error
from rulebridge.rules.selectors import (
    DefaultValidatorSelector,
    MemberNameValidatorSelector,
    RulesetValidatorSelector,
    ValidatorSelector,
)

__all__ = [
    "BaseValidator",
    "CollectionValidator",
    "MODEL_KEY_PREFIX",
    "PropertyChain",
    "ValidationContext",
    "ValidatorFactory",
    "Severity",
    "ValidationFailure",
    "ValidationResult",
    "PydanticRuleValidator",
    "rule_error",
    "DefaultValidatorSelector",
    "MemberNameValidatorSelector",
    "RulesetValidatorSelector",
    "ValidatorSelector",
]
