"""
Casting, generic type arguments and primitive/wrapper normalization.

Python's primitive types are the ctypes fundamental data types. A primitive
reads back as an ordinary Python value, its wrapper type:

    wrapper_type_of(ctypes.c_int)     # int
    wrapper_type_of(ctypes.c_double)  # float
    wrapper_type_of(str)              # str, not a primitive
"""

import collections.abc
import ctypes
from types import MappingProxyType
from typing import Any, Optional, Type, TypeVar, get_origin

from generic_utils import get_generic_info, is_plain_class, is_union_type, superclass_generic_info
from member_catalog import Member

T = TypeVar("T")

# Canonical primitive name -> ctypes primitive
PRIMITIVE_TYPES = MappingProxyType({
    "boolean": ctypes.c_bool,
    "byte": ctypes.c_byte,
    "char": ctypes.c_char,
    "short": ctypes.c_short,
    "int": ctypes.c_int,
    "long": ctypes.c_longlong,
    "double": ctypes.c_double,
    "float": ctypes.c_float,
    "void": ctypes.c_void_p,
})

# Canonical primitive name -> the Python type its values read back as
PRIMITIVE_WRAPPER_TYPES = MappingProxyType({
    "boolean": bool,
    "byte": int,
    "char": bytes,
    "short": int,
    "int": int,
    "long": int,
    "double": float,
    "float": float,
    "void": type(None),
})

WRAPPER_TYPES = frozenset(PRIMITIVE_WRAPPER_TYPES.values())

_INTEGER_NAMES_BY_WIDTH = {1: "byte", 2: "short", 4: "int", 8: "long"}

# Unsigned and platform-sized integers share the canonical name of the signed
# integer of the same width.
_SIZED_INTEGER_TYPES = (
    ctypes.c_ubyte, ctypes.c_ushort, ctypes.c_uint, ctypes.c_long, ctypes.c_ulong,
    ctypes.c_ulonglong, ctypes.c_size_t, ctypes.c_ssize_t,
)

# Every ctypes primitive -> its canonical name. On some platforms c_long and
# c_longlong (or c_int and c_long) are the same class; the canonical table wins.
_PRIMITIVE_NAMES = MappingProxyType({
    **{primitive: _INTEGER_NAMES_BY_WIDTH[ctypes.sizeof(primitive)] for primitive in _SIZED_INTEGER_TYPES},
    ctypes.c_longdouble: "double",
    **{primitive: name for name, primitive in PRIMITIVE_TYPES.items()},
})

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


def _primitive_name(cls: Any) -> Optional[str]:
    if not isinstance(cls, type):
        return None
    # Subclasses of a ctypes primitive keep its name
    for base in cls.__mro__:
        name = _PRIMITIVE_NAMES.get(base)
        if name is not None:
            return name
    return None


def is_primitive(cls: Any) -> bool:
    """Check if cls is a ctypes fundamental numeric, boolean, char or void type.

    String pointers (c_char_p, c_wchar_p) and wide chars read back as text and
    are not primitives.
    """
    return _primitive_name(cls) is not None


def cast_to(cls: Optional[Type[T]], obj: Any) -> Optional[T]:
    """Narrow an object to a type.

    Returns:
        None if an input is None or obj is not an instance of cls. Otherwise obj.
    """
    if cls is None or obj is None:
        return None
    try:
        return obj if isinstance(obj, cls) else None
    except TypeError:
        # cls is a parameterized alias or a non-runtime protocol
        return None


def cast_to_class(cls: Optional[type], candidate: Any) -> Optional[type]:
    """Narrow a class to a subclass of cls.

    Returns:
        None if an input is None or candidate is not a subclass of cls. Otherwise candidate.
    """
    if cls is None or candidate is None:
        return None
    try:
        return candidate if isinstance(candidate, type) and issubclass(candidate, cls) else None
    except TypeError:
        return None


def generic_type_argument_of(annotation: Any, index: int = 0) -> Optional[type]:
    """Find an actual type argument of a parameterized type.

    For a class that is not itself parameterized, the first parameterized
    base it declares is used instead:

        generic_type_argument_of(dict[str, int], 1)   # int
        class Names(list[str]): ...
        generic_type_argument_of(Names)               # str

    Args:
        annotation: A parameterized type, or a class with a parameterized base. Can be None.
        index: Position of the type argument.

    Returns:
        None if annotation is None, is not parameterized, the index is out of
        range, or the argument is not a plain class (a TypeVar, a nested
        parameterized type, ...).
    """
    if annotation is None:
        return None

    info = get_generic_info(annotation)
    if not info.is_generic and is_plain_class(annotation):
        info = superclass_generic_info(annotation)

    argument = info.argument(index)
    if argument is None or not is_plain_class(argument.annotation):
        return None
    return argument.annotation


def wrapper_type_of(cls: Optional[type]) -> type:
    """Find the wrapper type of a primitive type. If cls is not primitive, return itself.

    Raises:
        ValueError: If cls is None, or is a primitive without a wrapper type.
    """
    if cls is None:
        raise ValueError("Class should not be None.")
    name = _primitive_name(cls)
    if name is None:
        return cls

    wrapper = PRIMITIVE_WRAPPER_TYPES.get(name)
    if wrapper is None:
        raise ValueError("Can not find the wrapper class of {}.".format(cls.__name__))
    return wrapper


def is_collection_type(annotation: Any) -> bool:
    """Check if annotation is a collection type: sized, iterable containers other than text and mappings."""
    origin = get_origin(annotation) or annotation
    if not isinstance(origin, type):
        return False
    if issubclass(origin, _TEXT_TYPES) or issubclass(origin, collections.abc.Mapping):
        return False
    return issubclass(origin, collections.abc.Collection)


def type_of(member: Optional[Member]) -> Optional[type]:
    """Find the type of a member; for a collection member, its element type.

    A parameterized declared type gives its class (``dict[str, int]`` gives
    ``dict``). Unions and other special forms are returned as declared.

    Returns:
        None if member is None, or if it is a collection without a plain-class
        element type. Otherwise the declared class or the element type.
    """
    if member is None:
        return None
    declared = member.declared_type
    if is_collection_type(declared):
        return generic_type_argument_of(declared, 0)
    origin = get_origin(declared)
    if isinstance(origin, type) and not is_union_type(origin):
        return origin
    return declared


def is_primitive_or_wrapper(member: Optional[Member]) -> bool:
    """Check whether a member is declared with a primitive or a wrapper type."""
    if member is None:
        return False
    declared = member.declared_type
    return is_primitive(declared) or any(declared is wrapper for wrapper in WRAPPER_TYPES)


def is_collection_typed(member: Optional[Member]) -> bool:
    """Check whether a member is declared with a collection type."""
    if member is None:
        return False
    return is_collection_type(member.declared_type)
