"""
Reading and writing member values on instances.

Raw access goes through the extractor responsible for the member's class and
is only allowed while the member is accessible. ``AccessGuard`` opens a member
for the duration of a ``with`` block and puts the previous flag back on every
exit path:

    member = find_member("_token", Session)
    with AccessGuard(member):
        value = extractor_for(member.owner).read(session, member)
    assert member.accessible is False

Lookups never raise for missing data; a refused read is logged and reported as
None, a refused write as False.
"""

import logging
from typing import Any, Optional

from member_catalog import Member, MemberAccessError, extractor_for, find_member

logger = logging.getLogger(__name__)


class AccessGuard:
    """Context manager that forces a member accessible and restores the prior flag on exit."""

    def __init__(self, member: Member):
        self.member = member
        self._previous = member.accessible

    def __enter__(self) -> Member:
        self._previous = self.member.accessible
        object.__setattr__(self.member, "accessible", True)
        return self.member

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        object.__setattr__(self.member, "accessible", self._previous)
        return False


def get_member_value(instance: Any, member: Optional[Member]) -> Optional[Any]:
    """Find a member's value on an instance.

    Args:
        instance: Object that holds the value. Can be None.
        member: Member of the object's class. Can be None.

    Returns:
        None if an input is None or the value can not be read. Otherwise, the value.
    """
    if instance is None or member is None:
        return None

    extractor = extractor_for(member.owner)
    with AccessGuard(member):
        try:
            return extractor.read(instance, member)
        except MemberAccessError:
            logger.warning(
                "Failed to read member %s of %s", member.name, type(instance).__name__, exc_info=True
            )
            return None


def set_member_value(instance: Any, name: Optional[str], value: Any) -> bool:
    """Set a member's value on an instance, looking the member up by name (ignoring case).

    None is a legal value. Static members are written on their declaring class.

    Returns:
        True if the value was written. False if instance or name is None, the
        member is not found, or the runtime refused the write.
    """
    if instance is None or name is None:
        return False

    member = find_member(name, type(instance))
    if member is None:
        return False

    extractor = extractor_for(member.owner)
    with AccessGuard(member):
        try:
            extractor.write(instance, member, value)
        except MemberAccessError:
            logger.debug("Failed to write member %s of %s", member.name, type(instance).__name__, exc_info=True)
            return False
    return True
