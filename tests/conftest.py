"""
Pytest Configuration and Fixtures

Shared record factories for the clinic tests.
"""
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from footclinic.models.records import Episode, Patient, Visit


BASE_DATE = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_date() -> datetime:
    return BASE_DATE


@pytest.fixture
def make_patient():
    """Factory for patients with a valid RUT."""
    def _make(id: str = "P1", name: str = "Juan Pérez", **kwargs) -> Patient:
        return Patient(id=id, rut=kwargs.pop("rut", "12345678-5"), name=name, **kwargs)
    return _make


@pytest.fixture
def make_episode():
    """Factory for active episodes; ``abi`` goes into the vascular status."""
    def _make(id: str = "E1", patient_id: str = "P1", abi=None, **kwargs) -> Episode:
        data = {"id": id, "patientId": patient_id, **kwargs}
        if abi is not None:
            data["vascularStatus"] = {"abi": abi}
        return Episode.model_validate(data)
    return _make


@pytest.fixture
def make_visit():
    """Factory for visits ``days`` after BASE_DATE."""
    def _make(
        id: str = "V1",
        episode_id: str = "E1",
        days: int = 0,
        evolution: str = "Igual",
        depth=None,
        infection=None,
        **kwargs,
    ) -> Visit:
        data = {
            "id": id,
            "episodeId": episode_id,
            "date": BASE_DATE + timedelta(days=days),
            "photoUrl": f"https://files.example/{id}.jpg",
            "evolution": evolution,
            **kwargs,
        }
        if depth is not None:
            data["size"] = {"length": 20, "width": 15, "depth": depth}
        if infection is not None:
            data["infectionToday"] = infection
        return Visit.model_validate(data)
    return _make
