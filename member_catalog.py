"""
Discovery of the members (declared fields) of classes and their ancestors.

A member is a name a class declares with an annotation, or an entry of
``_fields_`` for ctypes structures:

    @dataclass
    class Parent:
        x: int

    @dataclass
    class Child(Parent):
        y: str
        registry: ClassVar[dict] = {}

    [m.name for m in members_of(Child)] == ["y", "registry", "x"]
    member_names_of(Child) == ["y", "x"]

Only a class's own declarations belong to it; inherited members come from
walking ancestors_of. Each kind of class (plain, dataclass, Pydantic model,
ctypes structure) has an extractor that knows how to list its declarations and
how to read and write them on an instance.
"""

import ctypes
import dataclasses
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Set, Tuple

from pydantic import BaseModel

from generic_utils import strip_annotated, strip_class_var
from type_hierarchy import ancestors_of


class MemberAccessError(Exception):
    """Raised when the runtime refuses a raw read or write of a member."""


@dataclass(frozen=True, kw_only=True)
class Member:
    """A field declared directly on a class.

    Attributes:
        owner: The class that declares the member
        name: Declared name (``__private`` names arrive already mangled by the compiler)
        declared_type: The annotation with ``Annotated`` and ``ClassVar`` wrappers removed
        is_static: Whether the member is declared ``ClassVar`` (lives on the class)
        annotations: Metadata attached through ``Annotated[T, ...]``
        accessible: Whether raw access is currently allowed (derived field); names
            starting with an underscore start out inaccessible
    """

    owner: type
    name: str
    declared_type: Any = Any
    is_static: bool = False
    annotations: Tuple[Any, ...] = ()
    accessible: bool = field(init=False, compare=False)

    def __post_init__(self):
        """Compute derived fields after initialization."""
        object.__setattr__(self, "accessible", not self.name.startswith("_"))


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def own_annotations(cls: type) -> dict:
    """The annotations cls declares itself, evaluated where possible."""
    try:
        return inspect.get_annotations(cls, eval_str=True)
    except (NameError, SyntaxError, TypeError, AttributeError):
        # Unresolvable forward references stay as strings
        return inspect.get_annotations(cls)


class MemberExtractor(ABC):
    """Abstract base for class-kind-specific member extractors."""

    @abstractmethod
    def can_handle(self, cls: type) -> bool:
        """Check if this extractor can handle the given class."""

    @abstractmethod
    def declared_members(self, cls: type) -> List[Member]:
        """List the members cls declares itself, in declaration order."""

    def read(self, instance: Any, member: Member) -> Any:
        """Read the member's raw value from instance.

        Raises:
            MemberAccessError: If the member is not accessible, holds no value,
                or its getter (a property or ``__getattr__``) fails.
        """
        self._check_accessible(member)
        target = member.owner if member.is_static else instance
        try:
            return getattr(target, member.name)
        except Exception as e:
            raise MemberAccessError(f"Can not read {member.name} of {type(instance).__name__}") from e

    def write(self, instance: Any, member: Member, value: Any) -> None:
        """Write value into the member, bypassing ``__setattr__`` overrides and frozen flags.

        Raises:
            MemberAccessError: If the member is not accessible or refuses the value.
        """
        self._check_accessible(member)
        try:
            if member.is_static:
                setattr(member.owner, member.name, value)
            else:
                self._write_instance(instance, member, value)
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            raise MemberAccessError(f"Can not write {member.name} of {type(instance).__name__}") from e

    def _write_instance(self, instance: Any, member: Member, value: Any) -> None:
        object.__setattr__(instance, member.name, value)

    def _check_accessible(self, member: Member) -> None:
        if not member.accessible:
            raise MemberAccessError(f"Member {member.name} of {member.owner.__name__} is not accessible")

    def _members_from_annotations(self, cls: type, skip=lambda annotation: False) -> List[Member]:
        members = []
        for name, annotation in own_annotations(cls).items():
            if _is_dunder(name) or skip(annotation):
                continue
            # Both Annotated[ClassVar[T], ...] and ClassVar[Annotated[T, ...]] are legal
            declared, metadata = strip_annotated(annotation)
            declared, is_static = strip_class_var(declared)
            declared, inner_metadata = strip_annotated(declared)
            members.append(
                Member(
                    owner=cls,
                    name=name,
                    declared_type=declared,
                    is_static=is_static,
                    annotations=metadata + inner_metadata,
                )
            )
        return members


class CtypesStructureExtractor(MemberExtractor):
    """Extractor for ctypes structures and unions, whose members are listed in ``_fields_``."""

    def can_handle(self, cls: type) -> bool:
        return issubclass(cls, (ctypes.Structure, ctypes.Union))

    def declared_members(self, cls: type) -> List[Member]:
        # A subclass's _fields_ only lists the fields it adds
        return [
            Member(owner=cls, name=entry[0], declared_type=entry[1])
            for entry in cls.__dict__.get("_fields_", ())
        ]


class PydanticModelExtractor(MemberExtractor):
    """Extractor for Pydantic models.

    Field values live in the instance ``__dict__`` and private attributes in
    ``__pydantic_private__``; writes go there directly so that frozen models
    and assignment validation do not refuse them.
    """

    def can_handle(self, cls: type) -> bool:
        return issubclass(cls, BaseModel)

    def declared_members(self, cls: type) -> List[Member]:
        if cls is BaseModel:
            return []
        return self._members_from_annotations(cls)

    def _write_instance(self, instance: Any, member: Member, value: Any) -> None:
        if member.name in type(instance).__private_attributes__:
            # Pydantic routes private names to __pydantic_private__, frozen or not
            setattr(instance, member.name, value)
            return
        instance.__dict__[member.name] = value
        instance.__pydantic_fields_set__.add(member.name)


class DataclassMemberExtractor(MemberExtractor):
    """Extractor for dataclasses; ``InitVar`` and ``KW_ONLY`` pseudo-fields are not members."""

    def can_handle(self, cls: type) -> bool:
        return dataclasses.is_dataclass(cls)

    def declared_members(self, cls: type) -> List[Member]:
        return self._members_from_annotations(cls, skip=self._is_pseudo_field)

    @staticmethod
    def _is_pseudo_field(annotation: Any) -> bool:
        return (
            annotation is dataclasses.KW_ONLY
            or annotation is dataclasses.InitVar
            or isinstance(annotation, dataclasses.InitVar)
        )


class PlainClassExtractor(MemberExtractor):
    """Fallback extractor for any class that declares annotated attributes."""

    def can_handle(self, cls: type) -> bool:
        return True

    def declared_members(self, cls: type) -> List[Member]:
        return self._members_from_annotations(cls)


_EXTRACTORS = [
    CtypesStructureExtractor(),
    PydanticModelExtractor(),
    DataclassMemberExtractor(),
    PlainClassExtractor(),
]


def extractor_for(cls: type) -> MemberExtractor:
    """The extractor responsible for cls."""
    for extractor in _EXTRACTORS:
        if extractor.can_handle(cls):
            return extractor
    raise LookupError(f"No member extractor for {cls!r}")


def declared_members_of(cls: Optional[type]) -> List[Member]:
    """Members cls declares itself, without walking its ancestors."""
    if not isinstance(cls, type):
        return []
    return extractor_for(cls).declared_members(cls)


def members_of(cls: Optional[type]) -> List[Member]:
    """Find all members of a class and its ancestors, private and public alike.

    Args:
        cls: The class to inspect. Can be None.

    Returns:
        Empty list if cls is None. Otherwise the declared members of each class
        of ancestors_of(cls), in that order.
    """
    if not isinstance(cls, type):
        return []
    members = []
    for ancestor in ancestors_of(cls):
        members.extend(declared_members_of(ancestor))
    return members


def static_members_of(cls: Optional[type]) -> List[Member]:
    """Members of cls and its ancestors that are declared ``ClassVar``."""
    return [member for member in members_of(cls) if member.is_static]


def instance_members_of(cls: Optional[type]) -> List[Member]:
    """Members of cls and its ancestors that live on instances."""
    return [member for member in members_of(cls) if not member.is_static]


def member_names_of(cls: Optional[type]) -> List[str]:
    """Names of the instance members of cls and its ancestors."""
    return [member.name for member in instance_members_of(cls)]


def member_name_set_of(cls: Optional[type]) -> Set[str]:
    """Names of the instance members of cls and its ancestors, as a set."""
    return set(member_names_of(cls))


def find_member(name: Optional[str], cls: Optional[type]) -> Optional[Member]:
    """Find a member of a class by name, ignoring case.

    When several members match, the first one in ancestor order wins.

    Returns:
        None if an input is None or no member matches.
    """
    if name is None or cls is None:
        return None
    wanted = name.casefold()
    for member in members_of(cls):
        if member.name.casefold() == wanted:
            return member
    return None


def has_member(name: Optional[str], cls: Optional[type]) -> bool:
    """Check if cls has an instance member with the given name, ignoring case."""
    if name is None or cls is None:
        return False
    wanted = name.casefold()
    return any(member_name.casefold() == wanted for member_name in member_names_of(cls))


def is_static_member(member: Optional[Member]) -> bool:
    """Check if a member is declared ``ClassVar``."""
    if member is None:
        return False
    return member.is_static


def is_static_method(cls: Optional[type], name: Optional[str]) -> bool:
    """Check if cls (or an ancestor) defines name as a ``staticmethod``."""
    if cls is None or name is None:
        return False
    return isinstance(inspect.getattr_static(cls, name, None), staticmethod)
