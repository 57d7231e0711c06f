import pytest
from pillguard.core.storage import MemoryStore
from pillguard.models.medication import Frequency, Medication
from support import NEW_YORK


@pytest.fixture
def make_med():
    def _make(**overrides):
        fields = {
            "id": "med-1",
            "name": "Lisinopril",
            "dosage": "10mg",
            "frequency": Frequency.DAILY,
            "scheduled_times": ["08:00"],
            "origin_timezone": NEW_YORK,
            "stock": 30,
            "refill_threshold": 7,
        }
        fields.update(overrides)
        return Medication(**fields)
    return _make


@pytest.fixture
def store():
    return MemoryStore()
