"""RuleBridge — plugs rule validators into FastAPI's model validation.

Usage:
    from rulebridge import ValidatorFactory, PydanticRuleValidator, ModelValidationRoute, create_app

    factory = ValidatorFactory()
    factory.register(Person, PydanticRuleValidator(PersonRules))

    router = APIRouter(route_class=ModelValidationRoute)
    app = create_app(factory, routers=[router])
"""

from rulebridge.config import Settings, get_settings
from rulebridge.exceptions import ModelStateInvalidError
from rulebridge.integration import (
    CustomizeValidator,
    FunctionInterceptor,
    ModelValidationRoute,
    RuleBridgeObjectModelValidator,
    ValidatorInterceptor,
    bind_model_validation,
    install,
)
from rulebridge.main import configure_logging, create_app
from rulebridge.mvc import ActionContext, ModelMetadataProvider, ModelStateDictionary, ValidationStateDictionary
from rulebridge.rules import (
    BaseValidator,
    CollectionValidator,
    PydanticRuleValidator,
    ValidationContext,
    ValidationFailure,
    ValidationResult,
    ValidatorFactory,
    rule_error,
)

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "get_settings",
    "ModelStateInvalidError",
    "CustomizeValidator",
    "FunctionInterceptor",
    "ModelValidationRoute",
    "RuleBridgeObjectModelValidator",
    "ValidatorInterceptor",
    "bind_model_validation",
    "install",
    "configure_logging",
    "create_app",
    "ActionContext",
    "ModelMetadataProvider",
    "ModelStateDictionary",
    "ValidationStateDictionary",
    "BaseValidator",
    "CollectionValidator",
    "PydanticRuleValidator",
    "ValidationContext",
    "ValidationFailure",
    "ValidationResult",
    "ValidatorFactory",
    "rule_error",
]
