"""
Annotations attached to classes, members and functions.

An annotation is any object; its annotation type is its class. Classes and
functions are annotated with the ``annotate`` decorator, members with
``typing.Annotated``:

    @dataclass(frozen=True)
    class Table:
        name: str

    @dataclass(frozen=True)
    class Column:
        name: str

    @annotate(Table("users"))
    class User:
        id: Annotated[int, Column("user_id")]

        @annotate(Deprecated())
        def legacy(self): ...

    annotations_of(User)                 # [Table("users")]
    annotations_of("ID", User)           # [Column("user_id")]
    find_annotation(Table, User).name    # "users"
    is_annotated_on(User.legacy, Deprecated)
"""

import functools
import sys
from typing import Any, Iterable, List, Optional, Set

from member_catalog import Member, find_member
from type_hierarchy import ancestors_of

ANNOTATIONS_ATTRIBUTE = "__declared_annotations__"


def annotate(*annotations: Any):
    """Decorator that attaches annotations to a class or function.

    Stacked decorators keep source order: the topmost decorator's annotations come first.
    """

    def decorator(target):
        existing = _unwrap(target).__dict__.get(ANNOTATIONS_ATTRIBUTE, ())
        setattr(_unwrap(target), ANNOTATIONS_ATTRIBUTE, tuple(annotations) + tuple(existing))
        return target

    return decorator


def _unwrap(target: Any) -> Any:
    """Look through bound methods, staticmethods and classmethods to the underlying function."""
    while hasattr(target, "__func__"):
        target = target.__func__
    return target


def declared_annotations_of(target: Any) -> List[Any]:
    """Annotations declared on target itself: a class, a function or a Member."""
    if target is None:
        return []
    if isinstance(target, Member):
        return list(target.annotations)
    namespace = getattr(_unwrap(target), "__dict__", None)
    if namespace is None:
        return []
    return list(namespace.get(ANNOTATIONS_ATTRIBUTE, ()))


@functools.singledispatch
def annotations_of(target: Any, owner: Optional[type] = None) -> List[Any]:
    """Find the annotations of a target.

    - class: annotations of the class and of every class in ancestors_of(class)
    - Member: annotations of that member only
    - member name and owner class: annotations of the member found by find_member
    - function or method: annotations of that function only

    Returns:
        Empty list if target is None or carries no annotations.
    """
    return declared_annotations_of(target)


@annotations_of.register(type)
def _annotations_of_class(target: type, owner: Optional[type] = None) -> List[Any]:
    annotations = []
    for ancestor in ancestors_of(target):
        annotations.extend(declared_annotations_of(ancestor))
    return annotations


@annotations_of.register(Member)
def _annotations_of_member(target: Member, owner: Optional[type] = None) -> List[Any]:
    return list(target.annotations)


@annotations_of.register(str)
def _annotations_of_member_name(target: str, owner: Optional[type] = None) -> List[Any]:
    member = find_member(target, owner)
    if member is None:
        return []
    return list(member.annotations)


def find_annotation(annotation_type: Optional[type], target: Any) -> Optional[Any]:
    """Find the first annotation of a class, member or function that is an instance of annotation_type.

    Class targets are searched together with their ancestors.

    Returns:
        None if an input is None or no annotation matches.
    """
    if not isinstance(annotation_type, type) or target is None:
        return None
    for annotation in annotations_of(target):
        if isinstance(annotation, annotation_type):
            return annotation
    return None


def annotation_types_of(target: Any) -> Set[type]:
    """The set of annotation types declared on target itself."""
    return {type(annotation) for annotation in declared_annotations_of(target)}


def is_annotated_on(target: Any, *annotation_types: Any) -> bool:
    """Check if target carries at least one of the given annotation types.

    The annotation types are passed either as separate arguments or as a
    single collection. Only annotations declared on target itself count, and
    types must match exactly.

    Returns:
        False if target is None, no annotation type is given, or none is present.
    """
    if target is None or not annotation_types:
        return False

    if len(annotation_types) == 1 and _is_type_collection(annotation_types[0]):
        requested = set(annotation_types[0])
    elif len(annotation_types) == 1:
        return annotation_types[0] in annotation_types_of(target)
    else:
        requested = set(annotation_types)

    requested.discard(None)
    if not requested:
        return False
    return not requested.isdisjoint(annotation_types_of(target))


def _is_type_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (type, str, bytes))


def is_of_package(annotation: Any, package_name: Optional[str]) -> bool:
    """Check if the annotation's type is defined in the given package."""
    if annotation is None or package_name is None:
        return False
    module = sys.modules.get(type(annotation).__module__)
    return getattr(module, "__package__", None) == package_name
