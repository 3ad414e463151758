"""Shared fixtures for the Engine Shed tests."""

import threading
from typing import Dict, List

import pytest

from engineshed.catalog.schemas import Train


class FakeFetcher:
    """Stand-in for the image search call.

    ``pages`` maps a 1-based start offset to the links returned for it.
    Offsets missing from the map return no results. ``error`` is raised
    on every call when set.
    """

    def __init__(self, pages: Dict[int, List[str]] = None, error: Exception = None):
        self.pages = pages or {}
        self.error = error
        self.calls = []

    def __call__(self, query: str, start: int) -> List[str]:
        self.calls.append((query, start))
        if self.error is not None:
            raise self.error
        return list(self.pages.get(start, []))


class BlockingFetcher(FakeFetcher):
    """Fetcher that waits for ``release`` before answering."""

    def __init__(self, pages=None):
        super().__init__(pages)
        self.entered = threading.Event()
        self.release = threading.Event()

    def __call__(self, query, start):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().__call__(query, start)


@pytest.fixture
def thomas():
    return Train(id=1, name="Thomas", number="1", color="blue", images=["a.jpg"])


@pytest.fixture
def dataset(thomas):
    return [
        thomas,
        Train(id=2, name="Edward", number="2", color="Blue", images=["e1.jpg", "e2.jpg", "e3.jpg"]),
        Train(id=3, name="Henry", number="3", color="Green", images=[]),
        Train(id=4, name="James", number="5", color="Red", images=["j.jpg"]),
    ]
