"""Host validation contract — model state, metadata, action context and default validation."""

from rulebridge.mvc.action import ActionContext, ActionDescriptor, BindingInfo, ParameterDescriptor
from rulebridge.mvc.metadata import ModelMetadata, ModelMetadataProvider
from rulebridge.mvc.model_state import (
    ModelStateDictionary,
    ModelStateEntry,
    ModelValidationState,
    ValidationStateDictionary,
    ValidationStateEntry,
)
from rulebridge.mvc.validation import DefaultObjectModelValidator, ObjectModelValidator
from rulebridge.mvc.visitor import ValidationVisitor

__all__ = [
    "ActionContext",
    "ActionDescriptor",
    "BindingInfo",
    "ParameterDescriptor",
    "ModelMetadata",
    "ModelMetadataProvider",
    "ModelStateDictionary",
    "ModelStateEntry",
    "ModelValidationState",
    "ValidationStateDictionary",
    "ValidationStateEntry",
    "DefaultObjectModelValidator",
    "ObjectModelValidator",
    "ValidationVisitor",
]
