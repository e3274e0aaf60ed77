"""
Type ancestry for runtime introspection.

Python classes have a list of bases rather than a superclass plus interfaces.
The walk here treats the first base as the superclass (the single-inheritance
backbone) and the remaining bases as the interfaces a class declares:

    class Base: ...
    class Mixin: ...
    class Child(Base, Mixin): ...

    ancestors_of(Child) == [Child, Mixin, Base, object]

Interfaces are listed but never walked themselves, and an interface reachable
along several paths is listed once per path.
"""

import inspect
import typing
from typing import Any, List, Optional, Set


def superclass_of(cls: Any) -> Optional[type]:
    """The superclass of cls (its first base), or None at the root of the hierarchy."""
    bases = getattr(cls, "__bases__", None)
    if not bases:
        return None
    return bases[0]


def interfaces_of(cls: Any) -> List[type]:
    """The interfaces cls declares directly: every base after the first."""
    bases = getattr(cls, "__bases__", None)
    if not bases:
        return []
    return list(bases[1:])


def ancestors_of(cls: Optional[type]) -> List[type]:
    """Find all ancestors of a class including the class itself.

    Args:
        cls: The class to walk. Can be None.

    Returns:
        Empty list if cls is None. Otherwise ``[cls, cls's interfaces, superclass,
        superclass's interfaces, ...]`` ending with a class that has no superclass.
    """
    if cls is None:
        return []

    classes = []
    current = cls
    while current is not None:
        classes.append(current)
        classes.extend(interfaces_of(current))
        current = superclass_of(current)
    return classes


def ancestor_set_of(cls: Optional[type]) -> Set[type]:
    """Deduplicated variant of ancestors_of for callers that only test membership."""
    return set(ancestors_of(cls))


def is_child_class_of(parent: Optional[type], cls: Optional[type]) -> bool:
    """Check if cls is parent or extends it anywhere along its ancestor walk.

    Returns False if either class is None.
    """
    if parent is None or cls is None:
        return False
    return any(ancestor is parent for ancestor in ancestors_of(cls))


def is_abstract_class_or_interface(cls: Optional[type]) -> bool:
    """Check if cls is an abstract class (unimplemented abstract methods) or a Protocol."""
    if cls is None:
        return False
    if getattr(cls, "_is_protocol", False) and typing.Protocol in cls.__bases__:
        return True
    return inspect.isabstract(cls)
