"""Model metadata — what the pipeline needs to know about a model's type."""

import collections.abc
import dataclasses
import enum
import typing
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

_SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None), enum.Enum)
_SIMPLE_MODULES = {"builtins", "datetime", "decimal", "uuid", "pathlib", "ipaddress", "fractions"}

# Abstract origins that typing generics (Sequence[T], ...) resolve to
_COLLECTION_ORIGINS = (
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
)


class ModelMetadata(BaseModel):
    """Type facts for one model."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, protected_namespaces=())

    model_type: Any                    # runtime class, e.g. list for list[Person]
    declared_type: Any = None          # annotation as declared, e.g. list[Person]
    is_collection_type: bool = False
    element_type: Any = None
    is_complex_type: bool = False


def _is_collection_class(cls: Any) -> bool:
    if not isinstance(cls, type):
        return False
    if issubclass(cls, (str, bytes, bytearray, collections.abc.Mapping)):
        return False
    if issubclass(cls, BaseModel):
        return False
    if cls in _COLLECTION_ORIGINS:
        return True
    return issubclass(cls, (list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Set))


def _is_complex_class(cls: Any) -> bool:
    if not isinstance(cls, type) or issubclass(cls, _SCALAR_TYPES):
        return False
    if issubclass(cls, BaseModel) or dataclasses.is_dataclass(cls):
        return True
    if _is_collection_class(cls) or issubclass(cls, collections.abc.Mapping):
        return False
    return cls.__module__ not in _SIMPLE_MODULES


def _element_type_from_args(origin: Any, args: tuple) -> Any:
    if not args:
        return None
    if origin is tuple:
        # tuple[T, ...] is homogeneous; fixed-shape tuples are not
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return None
    return args[0]


class ModelMetadataProvider:
    """Builds and caches ModelMetadata for declared types and runtime instances."""

    def __init__(self):
        self._cache: dict[Any, ModelMetadata] = {}

    def get_metadata_for_type(self, model_type: Any) -> ModelMetadata:
        try:
            cached = self._cache.get(model_type)
        except TypeError:  # unhashable annotation
            return self._build(model_type)
        if cached is None:
            cached = self._build(model_type)
            self._cache[model_type] = cached
        return cached

    def get_metadata_for_model(self, model: Any, declared_type: Any = None) -> ModelMetadata:
        """Metadata for an instance, using the declared annotation when it matches the instance."""
        runtime_type = type(model)

        if declared_type is not None:
            declared = self.get_metadata_for_type(declared_type)
            if declared.model_type is runtime_type:
                return declared
            if (
                declared.is_collection_type
                and declared.element_type is not None
                and isinstance(model, declared.model_type)
            ):
                return declared.model_copy(update={"model_type": runtime_type})

        metadata = self.get_metadata_for_type(runtime_type)
        if metadata.is_collection_type and metadata.element_type is None:
            element_type = self._infer_element_type(model)
            if element_type is not None:
                return metadata.model_copy(update={"element_type": element_type})
        return metadata

    @staticmethod
    def _infer_element_type(items: Any) -> Optional[type]:
        """The common type of the non-null items, when they all share one."""
        try:
            types = {type(item) for item in items if item is not None}
        except TypeError:
            return None
        if len(types) == 1:
            return types.pop()
        return None

    @staticmethod
    def _build(model_type: Any) -> ModelMetadata:
        if typing.get_origin(model_type) is typing.Annotated:
            model_type = typing.get_args(model_type)[0]

        origin = typing.get_origin(model_type)
        runtime_type = origin if isinstance(origin, type) else model_type

        if _is_collection_class(runtime_type):
            element_type = _element_type_from_args(origin, typing.get_args(model_type)) if origin else None
            return ModelMetadata(
                model_type=runtime_type,
                declared_type=model_type,
                is_collection_type=True,
                element_type=element_type,
            )

        return ModelMetadata(
            model_type=runtime_type,
            declared_type=model_type,
            is_complex_type=_is_complex_class(runtime_type),
        )
