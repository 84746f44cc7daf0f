"""Shared test fixtures."""
from __future__ import annotations

import pytest

from agrivocab.config import Settings
from agrivocab.db import Database
from agrivocab.models import ProgressState, WordRecord


def make_word(index: int, english: str | None = None) -> WordRecord:
    return WordRecord(
        index=index,
        category="Soil",
        english=english or f"word{index}",
        korean=f"단어{index}",
        example1=f"Example one for word{index}.",
        example2=f"Example two for word{index}.",
        example3=f"Example three for word{index}.",
        frequency="high",
        difficulty=2,
    )


@pytest.fixture
def tmp_db(tmp_path):
    """Create a fresh temporary database."""
    db = Database(tmp_path / "test.db")
    yield db
    db.close()


@pytest.fixture
def catalog():
    """Twenty catalog records, indices 0-19."""
    return [make_word(i) for i in range(20)]


@pytest.fixture
def progress():
    return ProgressState()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def sheet_csv():
    """A small CSV export of the word sheet."""
    return (
        "category,english,korean,example1,example2,example3,frequency,difficulty\n"
        "Soil,soil,흙,Healthy soil holds water.,Test the soil.,Soil pH matters.,high,1\n"
        'Crops,"harvest, late",늦은 수확,"We harvest in May, then rest.",Harvest time.,Big harvest.,medium,3\n'
        "Tools,tractor,트랙터,The tractor is new.,Drive the tractor.,A red tractor.,low,x\n"
        "Short,row,only,three\n"
    )


@pytest.fixture
def sheet_tsv():
    return (
        "category\tenglish\tkorean\texample1\texample2\texample3\tfrequency\tdifficulty\n"
        "Soil\tsoil\t흙\tHealthy soil, rich.\tTest the soil.\tSoil pH.\thigh\t1\n"
        "Water\tirrigation\t관개\tDrip irrigation.\tIrrigation canal.\tPlan irrigation.\tmedium\t4\n"
    )


@pytest.fixture
def word_factory():
    return make_word
