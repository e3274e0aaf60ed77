import ctypes
import logging
from dataclasses import dataclass
from typing import ClassVar, Optional

import pytest
from pydantic import BaseModel, ConfigDict, PrivateAttr

from member_access import AccessGuard, get_member_value, set_member_value
from member_catalog import MemberAccessError, extractor_for, find_member


@dataclass
class Parent:
    x: int


@dataclass
class Child(Parent):
    y: str


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


class Account(BaseModel):
    owner: str
    balance: float = 0.0
    _token: str = PrivateAttr(default="secret")


class FrozenAccount(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str


class Point(ctypes.Structure):
    _fields_ = [("x", ctypes.c_int), ("y", ctypes.c_int)]


class Lazy:
    value: int
    _hidden: int


class Circle:
    radius: float
    area: float

    def __init__(self, radius: float):
        self.radius = radius

    @property
    def area(self) -> float:
        return 3.14 * self.radius ** 2


class Thermometer:
    reading: float

    @property
    def reading(self) -> float:
        raise RuntimeError("sensor offline")


# =============================================================================
# READING
# =============================================================================

def test_get_member_value():
    child = Child(x=1, y="one")
    assert get_member_value(child, find_member("x", Child)) == 1
    assert get_member_value(child, find_member("y", Child)) == "one"


def test_get_member_value_absent_inputs():
    assert get_member_value(None, find_member("x", Child)) is None
    assert get_member_value(Child(x=1, y="one"), None) is None


def test_get_private_member_restores_accessibility():
    account = Account(owner="ada")
    token = find_member("_token", Account)
    assert get_member_value(account, token) == "secret"
    assert token.accessible is False


def test_failed_read_is_logged_and_empty(caplog):
    member = find_member("value", Lazy)
    with caplog.at_level(logging.WARNING, logger="member_access"):
        assert get_member_value(Lazy(), member) is None
    assert "Failed to read member value of Lazy" in caplog.text


def test_failing_getter_is_logged_and_empty(caplog):
    member = find_member("reading", Thermometer)
    with caplog.at_level(logging.WARNING, logger="member_access"):
        assert get_member_value(Thermometer(), member) is None
    assert "Failed to read member reading of Thermometer" in caplog.text
    assert "sensor offline" in caplog.text


def test_failing_getter_raises_access_error_on_raw_read():
    member = find_member("reading", Thermometer)
    with AccessGuard(member):
        with pytest.raises(MemberAccessError) as excinfo:
            extractor_for(Thermometer).read(Thermometer(), member)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_failed_read_restores_accessibility():
    hidden = find_member("_hidden", Lazy)
    assert get_member_value(Lazy(), hidden) is None
    assert hidden.accessible is False


def test_static_member_reads_from_class():
    class Counter:
        total: ClassVar[int] = 3
        step: int

    assert get_member_value(Counter(), find_member("total", Counter)) == 3


def test_ctypes_member_reads_python_value():
    point = Point(4, 5)
    assert get_member_value(point, find_member("y", Point)) == 5


# =============================================================================
# ACCESS GUARD
# =============================================================================

def test_raw_read_requires_access():
    account = Account(owner="ada")
    token = find_member("_token", Account)
    with pytest.raises(MemberAccessError):
        extractor_for(Account).read(account, token)

    with AccessGuard(token) as opened:
        assert opened.accessible is True
        assert extractor_for(Account).read(account, opened) == "secret"
    assert token.accessible is False


def test_guard_restores_on_error():
    token = find_member("_token", Account)
    with pytest.raises(RuntimeError):
        with AccessGuard(token):
            raise RuntimeError("boom")
    assert token.accessible is False


def test_guard_keeps_accessible_members_accessible():
    owner = find_member("owner", Account)
    with AccessGuard(owner):
        pass
    assert owner.accessible is True


# =============================================================================
# WRITING
# =============================================================================

def test_set_then_get_round_trip():
    child = Child(x=1, y="one")
    assert set_member_value(child, "x", 42)
    assert get_member_value(child, find_member("x", type(child))) == 42


def test_set_ignores_case():
    child = Child(x=1, y="one")
    assert set_member_value(child, "Y", "two")
    assert child.y == "two"


def test_set_none_is_a_legal_value():
    child = Child(x=1, y="one")
    assert set_member_value(child, "y", None)
    assert child.y is None


def test_set_absent_inputs_and_unknown_member():
    child = Child(x=1, y="one")
    assert not set_member_value(None, "x", 1)
    assert not set_member_value(child, None, 1)
    assert not set_member_value(child, "missing", 1)


def test_set_frozen_dataclass():
    coordinates = Coordinates(lat=1.0, lon=2.0)
    assert set_member_value(coordinates, "lat", 10.0)
    assert coordinates.lat == 10.0


def test_set_pydantic_field_and_private_attribute():
    account = Account(owner="ada")
    assert set_member_value(account, "balance", 12.5)
    assert account.balance == 12.5

    assert set_member_value(account, "_token", "rotated")
    assert get_member_value(account, find_member("_token", Account)) == "rotated"
    assert find_member("_token", Account).accessible is False


def test_set_frozen_pydantic_model():
    account = FrozenAccount(owner="ada")
    assert set_member_value(account, "owner", "grace")
    assert account.owner == "grace"


def test_set_static_member_writes_class():
    class Counter:
        total: ClassVar[int] = 3

    counter = Counter()
    assert set_member_value(counter, "total", 7)
    assert Counter.total == 7
    assert "total" not in vars(counter)


def test_set_ctypes_member():
    point = Point(1, 2)
    assert set_member_value(point, "x", 9)
    assert point.x == 9
    assert not set_member_value(point, "x", "nine")
    assert point.x == 9


def test_refused_write_returns_false():
    circle = Circle(radius=1.0)
    assert not set_member_value(circle, "area", 10.0)
    assert set_member_value(circle, "radius", 2.0)
    assert circle.radius == 2.0


def test_nested_optional_value():
    @dataclass
    class Holder:
        inner: Optional[Child] = None

    holder = Holder()
    assert get_member_value(holder, find_member("inner", Holder)) is None
    assert set_member_value(holder, "inner", Child(x=1, y="a"))
    assert holder.inner.x == 1
