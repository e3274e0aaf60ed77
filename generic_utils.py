"""
Utilities for extracting the actual type arguments of parameterized types.

This module provides structural extraction of generic type information with a
consistent interface across the generic systems found at runtime (built-in
generics, typing aliases, user ``Generic`` classes, dataclasses and Pydantic
models).

Key concepts:
- origin: The base generic type (e.g., list for list[int])
- concrete_args: The actual type arguments, each as a GenericInfo
- annotation: The annotation the information was extracted from
"""

import collections.abc
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Annotated, Any, List, Optional, Union, get_args, get_origin


def is_union_type(origin: Any) -> bool:
    """Check if origin represents a Union type (handles both typing.Union and types.UnionType)."""
    return origin is Union or origin is types.UnionType


@dataclass(frozen=True, kw_only=True)
class GenericInfo:
    """Generic type information extracted from an annotation.

    Attributes:
        origin: The base type (e.g., list for list[int]); the annotation itself for non-generic types
        concrete_args: The actual type arguments as GenericInfo objects
        annotation: The annotation this information describes
    """

    origin: Any = None
    concrete_args: List["GenericInfo"] = field(default_factory=list)
    annotation: Any = None

    @property
    def is_generic(self) -> bool:
        """Whether actual type arguments are present."""
        return bool(self.concrete_args)

    def argument(self, index: int) -> Optional["GenericInfo"]:
        """The index-th type argument, or None when out of range."""
        if index < 0 or index >= len(self.concrete_args):
            return None
        return self.concrete_args[index]


class GenericExtractor(ABC):
    """Abstract base for generic-system-specific extractors."""

    @abstractmethod
    def can_handle(self, annotation: Any) -> bool:
        """Check if this extractor understands the given annotation."""

    @abstractmethod
    def extract(self, annotation: Any) -> GenericInfo:
        """Extract generic information from the annotation."""

    def _from_args(self, origin: Any, args: tuple, annotation: Any) -> GenericInfo:
        return GenericInfo(
            origin=origin,
            concrete_args=[get_generic_info(arg) for arg in args],
            annotation=annotation,
        )


class AnnotatedExtractor(GenericExtractor):
    """Looks through ``Annotated[T, ...]`` to the annotated type."""

    def can_handle(self, annotation: Any) -> bool:
        return get_origin(annotation) is Annotated

    def extract(self, annotation: Any) -> GenericInfo:
        return get_generic_info(get_args(annotation)[0])


class UnionExtractor(GenericExtractor):
    """Extractor for Union types (both typing.Union and types.UnionType)."""

    def can_handle(self, annotation: Any) -> bool:
        return is_union_type(get_origin(annotation))

    def extract(self, annotation: Any) -> GenericInfo:
        return self._from_args(get_origin(annotation), get_args(annotation), annotation)


class BuiltinExtractor(GenericExtractor):
    """Extractor for built-in and collections.abc generics like list[int] or Sequence[str]."""

    def can_handle(self, annotation: Any) -> bool:
        origin = get_origin(annotation)
        if not isinstance(origin, type):
            return False
        return origin.__module__ in ("builtins", collections.abc.__name__, "collections")

    def extract(self, annotation: Any) -> GenericInfo:
        return self._from_args(get_origin(annotation), get_args(annotation), annotation)


class PydanticExtractor(GenericExtractor):
    """Extractor for Pydantic generic models.

    A specialized Pydantic model (``Box[int]``) is a real class rather than a
    typing alias, so its arguments live in ``__pydantic_generic_metadata__``.
    """

    def can_handle(self, annotation: Any) -> bool:
        metadata = getattr(annotation, "__pydantic_generic_metadata__", None)
        return bool(metadata) and bool(metadata.get("origin"))

    def extract(self, annotation: Any) -> GenericInfo:
        metadata = annotation.__pydantic_generic_metadata__
        return self._from_args(metadata["origin"], metadata.get("args", ()), annotation)


class GenericAliasExtractor(GenericExtractor):
    """Extractor for user ``Generic`` classes and generic dataclasses, e.g. ``Box[int]``."""

    def can_handle(self, annotation: Any) -> bool:
        return isinstance(get_origin(annotation), type) and bool(get_args(annotation))

    def extract(self, annotation: Any) -> GenericInfo:
        return self._from_args(get_origin(annotation), get_args(annotation), annotation)


class GenericTypeUtils:
    """Unified interface for extracting generic type information."""

    def __init__(self):
        self.extractors = [
            AnnotatedExtractor(),
            UnionExtractor(),
            BuiltinExtractor(),
            PydanticExtractor(),
            GenericAliasExtractor(),
        ]

    def get_generic_info(self, annotation: Any) -> GenericInfo:
        """Extract generic type information from an annotation."""
        for extractor in self.extractors:
            if extractor.can_handle(annotation):
                return extractor.extract(annotation)

        # Fallback for non-generic types
        return GenericInfo(origin=annotation, annotation=annotation)

    def superclass_generic_info(self, cls: type) -> GenericInfo:
        """Generic information of the first parameterized base declared by cls.

        Only bases written in the class statement are considered; ``__orig_bases__``
        is read from the class's own namespace because it is otherwise inherited.
        """
        bases = cls.__dict__.get("__orig_bases__", cls.__bases__)
        for base in bases:
            info = self.get_generic_info(base)
            if info.is_generic:
                return info
        return GenericInfo(origin=cls, annotation=cls)


def is_plain_class(annotation: Any) -> bool:
    """Whether annotation is a bare class rather than a parameterized alias or special form."""
    return isinstance(annotation, type) and get_origin(annotation) is None


def strip_annotated(annotation: Any) -> tuple:
    """Split ``Annotated[T, *metadata]`` into ``(T, metadata)``."""
    if get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def strip_class_var(annotation: Any) -> tuple:
    """Split ``ClassVar[T]`` into ``(T, True)``; other annotations give ``(annotation, False)``."""
    if annotation is typing.ClassVar:
        return Any, True
    if get_origin(annotation) is typing.ClassVar:
        args = get_args(annotation)
        return (args[0] if args else Any), True
    return annotation, False


# Global instance for convenience
generic_utils = GenericTypeUtils()


# Convenience functions that mirror the class methods
def get_generic_info(annotation: Any) -> GenericInfo:
    """Extract generic type information from an annotation."""
    return generic_utils.get_generic_info(annotation)


def superclass_generic_info(cls: type) -> GenericInfo:
    """Generic information of the first parameterized base declared by cls."""
    return generic_utils.superclass_generic_info(cls)
