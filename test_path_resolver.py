from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel

from member_access import get_member_value
from member_catalog import find_member
from path_resolver import value_at_path


@dataclass
class Father:
    child: Optional[str]


@dataclass
class Family:
    father: Optional[Father]
    _secret: str = "hidden"


class Gauge:
    level: float

    @property
    def level(self) -> float:
        raise RuntimeError("sensor offline")


@dataclass
class Panel:
    gauge: Gauge


class Address(BaseModel):
    city: str


class Customer(BaseModel):
    name: str
    address: Address


@pytest.fixture
def family():
    return Family(father=Father(child="Hello world"))


def test_nested_path(family):
    assert value_at_path(family, "father.child") == "Hello world"


def test_single_segment(family):
    assert value_at_path(family, "father") is family.father


def test_path_ignores_case(family):
    assert value_at_path(family, "FATHER.Child") == "Hello world"


def test_missing_segment_is_empty(family):
    assert value_at_path(family, "father.missing") is None
    assert value_at_path(family, "mother.child") is None
    assert value_at_path(family, "") is None


def test_none_value_stops_resolution():
    assert value_at_path(Family(father=None), "father.child") is None


def test_failing_getter_on_path_is_empty():
    panel = Panel(gauge=Gauge())
    assert value_at_path(panel, "gauge") is panel.gauge
    assert value_at_path(panel, "gauge.level") is None


def test_path_past_a_leaf_is_empty(family):
    assert value_at_path(family, "father.child.length") is None


def test_absent_inputs():
    assert value_at_path(None, "father") is None
    assert value_at_path(Family(father=None), None) is None


def test_private_segment(family):
    assert value_at_path(family, "_secret") == "hidden"


def test_pydantic_models():
    customer = Customer(name="Ada", address=Address(city="London"))
    assert value_at_path(customer, "address.city") == "London"


def test_path_matches_composed_reads(family):
    father = get_member_value(family, find_member("father", Family))
    child = get_member_value(father, find_member("child", type(father)))
    assert value_at_path(family, "father.child") == child
