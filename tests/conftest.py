"""
Pytest Configuration and Fixtures

Shared fixtures for the dashboard engine tests.
"""
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from heart_explorer.engine import Dashboard
from heart_explorer.router import InteractionRouter
from heart_explorer.state import StateStore


@pytest.fixture
def sample_records():
    """Small dataset covering every chest pain type and one incomplete row."""
    return [
        {"Age": 40, "Sex": "M", "ChestPainType": "ATA", "RestingBP": 140,
         "Cholesterol": 289, "MaxHR": 172, "ExerciseAngina": "N", "HeartDisease": 0},
        {"Age": 49, "Sex": "F", "ChestPainType": "NAP", "RestingBP": 160,
         "Cholesterol": 180, "MaxHR": 156, "ExerciseAngina": "N", "HeartDisease": 1},
        {"Age": 37, "Sex": "M", "ChestPainType": "ATA", "RestingBP": 130,
         "Cholesterol": 283, "MaxHR": 98, "ExerciseAngina": "N", "HeartDisease": 0},
        {"Age": 48, "Sex": "F", "ChestPainType": "ASY", "RestingBP": 138,
         "Cholesterol": 214, "MaxHR": 108, "ExerciseAngina": "Y", "HeartDisease": 1},
        {"Age": 65, "Sex": "M", "ChestPainType": "TA", "RestingBP": 150,
         "Cholesterol": 236, "MaxHR": 105, "ExerciseAngina": "Y", "HeartDisease": 1},
        {"Age": None, "Sex": "M", "ChestPainType": None, "RestingBP": 120,
         "Cholesterol": None, "MaxHR": 150, "ExerciseAngina": "N", "HeartDisease": 0},
    ]


@pytest.fixture
def store(sample_records) -> StateStore:
    return StateStore(sample_records)


@pytest.fixture
def dashboard(store) -> Dashboard:
    return Dashboard(store)


@pytest.fixture
def notices():
    """Collects (level, message) pairs sent by the router."""
    return []


@pytest.fixture
def router(dashboard, notices) -> InteractionRouter:
    return InteractionRouter(dashboard, notify=lambda level, message: notices.append((level, message)))


@pytest.fixture
def data_dir() -> Path:
    """Path to the bundled sample data."""
    return Path(__file__).parent.parent / "data"
