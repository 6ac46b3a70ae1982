"""FastAPI integration — runs the object model validator on endpoint arguments.

Usage:
    factory = ValidatorFactory()
    factory.register(Person, PydanticRuleValidator(PersonRules))

    app = FastAPI()
    install(app, factory)

    router = APIRouter(route_class=ModelValidationRoute)

    @router.post("/people")
    async def create_person(person: Person):
        ...                     # only reached when `person` passed validation

    @router.put("/people/{person_id}")
    async def update_person(person_id: int, person: Person, model_state: ModelStateDictionary):
        ...                     # always reached; inspect model_state yourself

    app.include_router(router)
"""

import functools
import inspect
import typing
from typing import Any, Callable, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.dependencies.utils import get_dependant, get_flat_dependant
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.concurrency import run_in_threadpool

from rulebridge.config import Settings, get_settings
from rulebridge.exceptions import ModelStateInvalidError
from rulebridge.integration.object_model_validator import RuleBridgeObjectModelValidator
from rulebridge.mvc.action import ActionContext, ActionDescriptor, BindingInfo, ParameterDescriptor, unwrap_optional
from rulebridge.mvc.metadata import ModelMetadataProvider
from rulebridge.mvc.model_state import ModelStateDictionary, ValidationStateDictionary
from rulebridge.mvc.validation import ObjectModelValidator
from rulebridge.rules.factory import ValidatorFactory

logger = structlog.get_logger()

_REQUEST_KWARG = "__rulebridge_request"
_BOUND_MARKER = "__rulebridge_bound__"


def _is_subclass(candidate: Any, parent: type) -> bool:
    return isinstance(candidate, type) and issubclass(candidate, parent)


def _body_prefixes(call: Callable, path: str) -> dict[str, str]:
    """Parameter name -> key prefix for each body parameter FastAPI reads for `call`.

    A lone body parameter is the whole request body (prefix ""), unless declared
    with Body(embed=True). Several body parameters, scalars included, are embedded
    under their aliases.
    """
    body_fields = get_flat_dependant(get_dependant(path=path, call=call)).body_params
    if not body_fields:
        return {}

    embedded = len({field.name for field in body_fields}) > 1 or bool(
        getattr(body_fields[0].field_info, "embed", False)
    )
    return {field.name: field.alias if embedded else "" for field in body_fields}


def _model_parameters(
    descriptor: ActionDescriptor, prefixes: dict[str, str], metadata_provider: ModelMetadataProvider
) -> list[tuple[ParameterDescriptor, str]]:
    """Complex or collection body parameters, paired with the prefix they are bound under."""
    bound = []
    for parameter in descriptor.parameters:
        if parameter.name not in prefixes:
            continue
        metadata = metadata_provider.get_metadata_for_type(unwrap_optional(parameter.parameter_type))
        if metadata.is_complex_type or metadata.is_collection_type:
            bound.append((parameter, prefixes[parameter.name]))
    return bound


def _with_body_bindings(descriptor: ActionDescriptor, prefixes: dict[str, str]) -> ActionDescriptor:
    """Record the body key each body parameter is read from; the root body has none."""
    parameters = [
        parameter.model_copy(update={
            "binding_info": BindingInfo(binder_model_name=prefixes[parameter.name] or None, binding_source="body"),
        })
        if parameter.name in prefixes else parameter
        for parameter in descriptor.parameters
    ]
    return descriptor.model_copy(update={"parameters": parameters})


def _exposed_signature(endpoint: Callable, hidden: set[str], add_request: bool) -> inspect.Signature:
    """The endpoint's signature as FastAPI should see it, with annotations resolved."""
    signature = inspect.signature(endpoint)
    try:
        hints = typing.get_type_hints(endpoint, include_extras=True)
    except (NameError, TypeError):
        hints = {}

    parameters = []
    var_keyword = None
    for param in signature.parameters.values():
        if param.name in hidden:
            continue
        param = param.replace(annotation=hints.get(param.name, param.annotation))
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            var_keyword = param
            continue
        parameters.append(param)

    if add_request:
        parameters.append(inspect.Parameter(_REQUEST_KWARG, inspect.Parameter.KEYWORD_ONLY, annotation=Request))
    if var_keyword is not None:
        parameters.append(var_keyword)

    return signature.replace(parameters=parameters)


def bind_model_validation(endpoint: Callable, path: str = "") -> Callable:
    """Wrap an endpoint so its bound models are validated before it runs.

    `path` is the route path; its {placeholders} are path parameters, never body.
    """
    if getattr(endpoint, _BOUND_MARKER, False):
        return endpoint

    descriptor = ActionDescriptor.from_endpoint(endpoint)
    model_state_params = {p.name for p in descriptor.parameters if _is_subclass(p.runtime_type, ModelStateDictionary)}
    request_param = next((p.name for p in descriptor.parameters if _is_subclass(p.runtime_type, Request)), None)
    is_coroutine = inspect.iscoroutinefunction(endpoint)

    @functools.wraps(endpoint)
    async def wrapper(*args, **kwargs):
        request: Request = kwargs[request_param] if request_param else kwargs.pop(_REQUEST_KWARG)
        state = request.app.state

        object_model_validator: Optional[ObjectModelValidator] = getattr(state, "object_model_validator", None)
        if object_model_validator is None:
            raise RuntimeError("Model validation is not installed; call rulebridge.integration.install(app, ...) first")

        model_state = ModelStateDictionary()
        action_context = ActionContext(
            descriptor,
            model_state=model_state,
            request=request,
            services=dict(getattr(state, "rulebridge_services", {})),
        )
        validation_state = ValidationStateDictionary()

        for parameter, prefix in model_params:
            object_model_validator.validate(action_context, validation_state, prefix, kwargs.get(parameter.name))

        settings: Settings = getattr(state, "rulebridge_settings", None) or get_settings()
        if model_state_params:
            for name in model_state_params:
                kwargs[name] = model_state
        elif not model_state.is_valid and settings.AUTO_REJECT_INVALID_MODELS:
            logger.info(
                "model_state_invalid",
                action=descriptor.display_name,
                path=request.url.path,
                error_count=model_state.error_count,
            )
            raise ModelStateInvalidError(model_state)

        if is_coroutine:
            return await endpoint(*args, **kwargs)
        return await run_in_threadpool(endpoint, *args, **kwargs)

    wrapper.__signature__ = _exposed_signature(endpoint, model_state_params, add_request=request_param is None)
    # FastAPI must see the async wrapper, not unwrap back to the endpoint
    del wrapper.__wrapped__
    # Prefixes follow the body layout FastAPI derives from the exposed signature
    prefixes = _body_prefixes(wrapper, path)
    descriptor = _with_body_bindings(descriptor, prefixes)
    model_params = _model_parameters(descriptor, prefixes, ModelMetadataProvider())
    setattr(wrapper, _BOUND_MARKER, True)
    return wrapper


class ModelValidationRoute(APIRoute):
    """APIRoute that validates bound models; use with APIRouter(route_class=ModelValidationRoute)."""

    def __init__(self, path: str, endpoint: Callable, **kwargs):
        super().__init__(path, bind_model_validation(endpoint, path), **kwargs)


async def model_state_invalid_handler(request: Request, exc: ModelStateInvalidError):
    """Render invalid model state as a validation error response."""
    settings: Settings = getattr(request.app.state, "rulebridge_settings", None) or get_settings()
    return JSONResponse(
        status_code=settings.INVALID_MODEL_STATUS_CODE,
        content=exc.to_dict(),
    )


def install(
    app: FastAPI,
    validator_factory: ValidatorFactory,
    metadata_provider: Optional[ModelMetadataProvider] = None,
    settings: Optional[Settings] = None,
    object_model_validator: Optional[ObjectModelValidator] = None,
) -> ObjectModelValidator:
    """Register the validation pipeline on an application."""
    settings = settings or get_settings()
    metadata_provider = metadata_provider or ModelMetadataProvider()

    if object_model_validator is None:
        object_model_validator = RuleBridgeObjectModelValidator(
            metadata_provider,
            validator_factory=validator_factory,
            run_default_validation=settings.RUN_DEFAULT_VALIDATION,
        )

    app.state.rulebridge_settings = settings
    app.state.validator_factory = validator_factory
    app.state.object_model_validator = object_model_validator
    app.state.rulebridge_services = {
        ValidatorFactory: validator_factory,
        ModelMetadataProvider: metadata_provider,
    }
    app.add_exception_handler(ModelStateInvalidError, model_state_invalid_handler)

    logger.info(
        "model_validation_installed",
        validators=len(validator_factory),
        run_default_validation=settings.RUN_DEFAULT_VALIDATION,
    )
    return object_model_validator
