"""Rule validation adapter for the host pipeline, plus its FastAPI wiring."""

from rulebridge.integration.customization import CustomizeValidator, FunctionInterceptor, ValidatorInterceptor
from rulebridge.integration.object_model_validator import RuleBridgeObjectModelValidator
from rulebridge.integration.routing import (
    ModelValidationRoute,
    bind_model_validation,
    install,
    model_state_invalid_handler,
)

__all__ = [
    "CustomizeValidator",
    "FunctionInterceptor",
    "ValidatorInterceptor",
    "RuleBridgeObjectModelValidator",
    "ModelValidationRoute",
    "bind_model_validation",
    "install",
    "model_state_invalid_handler",
]
