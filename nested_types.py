"""Scanning of classes nested inside container classes."""

from typing import Any, Iterable, List, Optional

from type_coercion import cast_to_class
from type_hierarchy import is_child_class_of


def nested_types_of(container: Any) -> List[type]:
    """Classes declared in the body of container, in declaration order.

    A class merely assigned to a container attribute is not nested in it.
    """
    if not isinstance(container, type):
        return []
    prefix = container.__qualname__ + "."
    return [
        value
        for name, value in vars(container).items()
        if isinstance(value, type) and value.__qualname__ == prefix + name
    ]


def find_nested_types_extending(containers: Optional[Iterable[type]], parent: Optional[type]) -> List[type]:
    """Find nested classes that extend a parent class, inside some container classes.

    Args:
        containers: Classes that declare nested classes. Can be None.
        parent: Class the nested classes must extend. Can be None.

    Returns:
        The nested classes whose ancestors include parent, in container order.
        Empty list if an input is None.
    """
    if containers is None or parent is None:
        return []

    found = []
    for container in containers:
        for nested in nested_types_of(container):
            if not is_child_class_of(parent, nested):
                continue
            narrowed = cast_to_class(parent, nested)
            if narrowed is not None:
                found.append(narrowed)
    return found


def is_static_class(cls: Any) -> bool:
    """Check if cls is declared inside another class.

    Nested classes never capture an enclosing instance, so every one of them is
    static. Top-level classes and classes local to a function are not.
    """
    if not isinstance(cls, type):
        return False
    enclosing, _, _ = cls.__qualname__.rpartition(".")
    return bool(enclosing) and not enclosing.endswith("<locals>")
