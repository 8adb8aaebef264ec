from collections.abc import Callable
from typing import Any

import pytest

from cardbinder.models.card import Card
from tests.fakes import FakeLookup


@pytest.fixture
def fake_lookup() -> FakeLookup:
    return FakeLookup()


@pytest.fixture
def make_card() -> Callable[..., Card]:
    """Factory for binder cards with sequential ids."""
    counter = iter(range(1, 10_000))

    def _make(name: str | None = None, **kwargs: Any) -> Card:
        number = next(counter)
        return Card(id=f"card-{number}", name=name or f"Card {number}", **kwargs)

    return _make


@pytest.fixture
def sample_scanner_csv() -> str:
    """Scanner export with a header, a quoted name and a foil row."""
    return (
        "Quantity,Name,Set,Condition,Foil,Notes\n"
        "4,Lightning Bolt,Magic 2010,NM,,\n"
        '1,"Fire // Ice",Apocalypse,LP,foil,trade bait\n'
    )
