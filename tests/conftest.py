import os

import pytest

# Must be set before anything imports valuesmd.config / valuesmd.database
TEST_DB = "test_valuesmd.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///./{TEST_DB}"
os.environ["DILEMMA_COUNT"] = "12"
os.environ["PRIMARY_MOTIF_COUNT"] = "5"
os.environ.pop("VALUES_CATALOG_PATH", None)

from valuesmd.catalog import Catalog, get_catalog
from valuesmd.core import Response


@pytest.fixture(scope="session", autouse=True)
def _remove_test_database():
    yield
    if os.path.exists(TEST_DB):
        os.remove(TEST_DB)


@pytest.fixture
def catalog() -> Catalog:
    """The bundled catalog."""
    return get_catalog()


@pytest.fixture
def small_catalog() -> Catalog:
    """
    Two frameworks, three motifs, three dilemmas. Choice D is never mapped,
    and M1 feeds a single framework so its shares are easy to predict.
    """
    return Catalog.from_dict({
        "frameworks": [
            {"framework_id": "f1", "name": "First"},
            {"framework_id": "f2", "name": "Second"},
        ],
        "motifs": [
            {"motif_id": "M1", "name": "Motif One", "category": "c", "description": "one",
             "frameworks": {"f1": 1.0}, "conflicts_with": ["M2"]},
            {"motif_id": "M2", "name": "Motif Two", "category": "c", "description": "two",
             "frameworks": {"f2": 1.0}},
            {"motif_id": "M3", "name": "Motif Three", "category": "c", "description": "three",
             "frameworks": {"f1": 0.5, "f2": 0.5}, "synergies_with": ["M1"]},
        ],
        "dilemmas": [
            {"dilemma_id": f"D{i}", "title": f"Dilemma {i}", "scenario": "...", "domain": domain,
             "choices": {"A": "a", "B": "b", "C": "c", "D": "d"},
             "motifs": {"A": "M1", "B": "M2", "C": "M3"}}
            for i, domain in ((1, "alpha"), (2, "beta"), (3, "alpha"))
        ],
    })


def answers(*pairs, **extra):
    """Build responses from (dilemma_id, option) pairs."""
    return [Response(dilemma_id=d, chosen_option=o, **extra) for d, o in pairs]


@pytest.fixture
def all_a_responses():
    """Option A for every bundled dilemma: six NUMBERS_FIRST, two UTIL_CALC, four singles."""
    return answers(*[(f"DM{i:03d}", "A") for i in range(1, 13)])


@pytest.fixture
def make_answers():
    return answers
