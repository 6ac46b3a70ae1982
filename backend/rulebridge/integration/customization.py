"""Validator customization — per-parameter rule selection and interception hooks.

Attach to an endpoint parameter with typing.Annotated:

    @router.post("/people")
    async def create(person: Annotated[Person, CustomizeValidator(rule_set="create")]):
        ...
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional, Union

from rulebridge.mvc.action import ActionContext
from rulebridge.rules.context import ValidationContext
from rulebridge.rules.models import ValidationResult
from rulebridge.rules.selectors import (
    DefaultValidatorSelector,
    MemberNameValidatorSelector,
    RulesetValidatorSelector,
    ValidatorSelector,
)


class ValidatorInterceptor(ABC):
    """Hooks around a single rule validation run.

    Returning None from either hook keeps the original value.
    """

    @abstractmethod
    def before_validation(
        self, action_context: ActionContext, context: ValidationContext
    ) -> Optional[ValidationContext]:
        ...

    @abstractmethod
    def after_validation(
        self, action_context: ActionContext, context: ValidationContext, result: ValidationResult
    ) -> Optional[ValidationResult]:
        ...


BeforeHook = Callable[[ActionContext, ValidationContext], Optional[ValidationContext]]
AfterHook = Callable[[ActionContext, ValidationContext, ValidationResult], Optional[ValidationResult]]


class FunctionInterceptor(ValidatorInterceptor):
    """Interceptor built from plain callables; a missing hook passes through."""

    def __init__(self, before: Optional[BeforeHook] = None, after: Optional[AfterHook] = None):
        self.before = before
        self.after = after

    def before_validation(self, action_context, context):
        if self.before is None:
            return None
        return self.before(action_context, context)

    def after_validation(self, action_context, context, result):
        if self.after is None:
            return None
        return self.after(action_context, context, result)


class CustomizeValidator:
    """Directive selecting a rule set or properties, and/or an interceptor, for one parameter."""

    def __init__(
        self,
        rule_set: Optional[str] = None,
        properties: Union[str, Iterable[str], None] = None,
        interceptor: Union[type[ValidatorInterceptor], ValidatorInterceptor, None] = None,
    ):
        if interceptor is not None and not (
            isinstance(interceptor, ValidatorInterceptor)
            or (isinstance(interceptor, type) and issubclass(interceptor, ValidatorInterceptor))
        ):
            raise TypeError("interceptor must be a ValidatorInterceptor subclass or instance")

        self.rule_set = rule_set
        self.properties = properties
        self.interceptor = interceptor

    def to_validator_selector(self) -> ValidatorSelector:
        if self.rule_set:
            return RulesetValidatorSelector(self.rule_set)
        if self.properties:
            return MemberNameValidatorSelector(self.properties)
        return DefaultValidatorSelector()

    def get_interceptor(self) -> Optional[ValidatorInterceptor]:
        """A fresh instance when configured with a class, the instance itself otherwise."""
        if self.interceptor is None:
            return None
        if isinstance(self.interceptor, type):
            return self.interceptor()
        return self.interceptor

    def __repr__(self) -> str:
        return (
            f"CustomizeValidator(rule_set={self.rule_set!r}, properties={self.properties!r}, "
            f"interceptor={self.interceptor!r})"
        )
