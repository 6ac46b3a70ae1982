"""Collection validator — applies an element validator to every member of a sequence."""

from rulebridge.rules.base import BaseValidator
from rulebridge.rules.context import ValidationContext
from rulebridge.rules.models import ValidationResult

# Stands in for an empty key prefix so the pipeline can find and strip it afterwards.
MODEL_KEY_PREFIX = "__RB_Prefix_"


class CollectionValidator(BaseValidator):
    """Element-wise wrapper built when a collection type has no validator of its own.

    Failures are reported as ``<prefix>[i].<path>``; with no prefix the
    placeholder MODEL_KEY_PREFIX takes its place.
    """

    def __init__(self, element_validator: BaseValidator, prefix: str = ""):
        self.element_validator = element_validator
        self.prefix = prefix or MODEL_KEY_PREFIX

    @property
    def name(self) -> str:
        return f"CollectionValidator[{self.element_validator.name}]"

    def validate(self, context: ValidationContext) -> ValidationResult:
        items = context.instance_to_validate
        if items is None:
            return ValidationResult()

        results = []
        for index, item in enumerate(items):
            if item is None:
                continue
            child = context.for_child(item, self.prefix, f"[{index}]")
            results.append(self.element_validator.validate(child))

        return ValidationResult.merge(results)
