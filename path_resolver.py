"""Resolution of dotted member paths through nested objects."""

from typing import Any, Optional

from member_access import get_member_value
from member_catalog import find_member

PATH_SEPARATOR = "."


def value_at_path(instance: Any, path: Optional[str]) -> Optional[Any]:
    """Find a nested member value of an object.

    Each segment is looked up, ignoring case, on the runtime class of the
    value reached so far:

        father = Father(child="Hello world")
        value_at_path(Family(father=father), "father")        # father
        value_at_path(Family(father=father), "father.child")  # "Hello world"

    Args:
        instance: Object that holds the value. Can be None.
        path: Member names separated by dots. Can be None.

    Returns:
        None if an input is None, or if any segment names no member or reaches
        a None value. The failing segment is not reported.
    """
    if instance is None or path is None:
        return None

    current = instance
    for segment in path.split(PATH_SEPARATOR):
        if current is None:
            return None
        member = find_member(segment, type(current))
        if member is None:
            return None
        current = get_member_value(current, member)
    return current
