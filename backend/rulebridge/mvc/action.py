"""Action descriptors and context — what the pipeline knows about the endpoint being invoked."""

import inspect
import types
import typing
from typing import Any, Callable, Optional, TypeVar

from fastapi import params
from pydantic import BaseModel, ConfigDict, Field

from rulebridge.mvc.model_state import ModelStateDictionary

T = TypeVar("T")

_UNION_TYPES = {typing.Union}
if hasattr(types, "UnionType"):
    _UNION_TYPES.add(types.UnionType)


def unwrap_optional(annotation: Any) -> Any:
    """Optional[X] / X | None -> X; anything else unchanged."""
    if typing.get_origin(annotation) in _UNION_TYPES:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class BindingInfo(BaseModel):
    """How a parameter is bound from the request."""

    binder_model_name: Optional[str] = None   # explicit alias, e.g. Body(alias="customer")
    binding_source: Optional[str] = None      # "body", "query", "path", "header", "cookie", "services"


class ParameterDescriptor(BaseModel):
    """One declared endpoint parameter."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    parameter_type: Any = Field(default=Any)
    binding_info: Optional[BindingInfo] = None
    attributes: tuple = ()   # Annotated[...] metadata attached to the parameter

    @property
    def runtime_type(self) -> Any:
        """The class instances of this parameter have, e.g. list for list[Person] or Optional[list[Person]]."""
        parameter_type = unwrap_optional(self.parameter_type)
        origin = typing.get_origin(parameter_type)
        return origin if isinstance(origin, type) else parameter_type

    @property
    def binder_model_name(self) -> Optional[str]:
        return self.binding_info.binder_model_name if self.binding_info else None

    def get_attribute(self, attribute_type: type[T]) -> Optional[T]:
        for attribute in self.attributes:
            if isinstance(attribute, attribute_type):
                return attribute
        return None


class ActionDescriptor(BaseModel):
    """The endpoint being executed and its parameters."""

    display_name: str = ""
    parameters: list[ParameterDescriptor] = Field(default_factory=list)

    @classmethod
    def from_endpoint(cls, endpoint: Callable) -> "ActionDescriptor":
        """Reflect a FastAPI endpoint's signature into parameter descriptors."""
        signature = inspect.signature(endpoint)
        try:
            hints = typing.get_type_hints(endpoint, include_extras=True)
        except (NameError, TypeError):
            hints = {}

        parameters = []
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            annotation = hints.get(param.name, param.annotation)
            if annotation is inspect.Parameter.empty:
                annotation = Any

            attributes: tuple = ()
            if typing.get_origin(annotation) is typing.Annotated:
                annotation, *extras = typing.get_args(annotation)
                attributes = tuple(extras)

            parameters.append(ParameterDescriptor(
                name=param.name,
                parameter_type=annotation,
                binding_info=_binding_info(attributes, param.default),
                attributes=attributes,
            ))

        return cls(
            display_name=getattr(endpoint, "__qualname__", getattr(endpoint, "__name__", "")),
            parameters=parameters,
        )


def _binding_info(attributes: tuple, default: Any) -> Optional[BindingInfo]:
    """Read alias and source from FastAPI's Body()/Query()/... markers, wherever they were declared."""
    for marker in (*attributes, default):
        if isinstance(marker, params.Depends):
            return BindingInfo(binding_source="services")
        if isinstance(marker, params.Body):
            return BindingInfo(binder_model_name=marker.alias, binding_source="body")
        if isinstance(marker, params.Param):
            return BindingInfo(binder_model_name=marker.alias, binding_source=marker.in_.value)
    return None


class ActionContext:
    """Per-request state handed to object model validators."""

    def __init__(
        self,
        action_descriptor: Optional[ActionDescriptor] = None,
        model_state: Optional[ModelStateDictionary] = None,
        request: Any = None,
        services: Optional[dict[type, Any]] = None,
    ):
        self.action_descriptor = action_descriptor or ActionDescriptor()
        self.model_state = model_state if model_state is not None else ModelStateDictionary()
        self.request = request
        self.services = services or {}

    def get_service(self, service_type: type[T]) -> Optional[T]:
        """Resolve a request-scoped service registered under its type."""
        return self.services.get(service_type)
