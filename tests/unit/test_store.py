"""
Unit Tests for the clinic state stores.
"""
import json
import pytest

from footclinic.models.records import ActiveScales, ClinicalSettings, ClinicState
from footclinic.storage import InMemoryStateStore, JsonFileStateStore, build_store
from footclinic.utils.exceptions import StorageError


@pytest.fixture
def sample_state(make_patient, make_episode, make_visit) -> ClinicState:
    return ClinicState(
        patients=[make_patient("P1")],
        episodes=[make_episode("E1", abi=0.45)],
        visits=[make_visit("V1", evolution="Peor")],
    )


class TestInMemoryStore:

    def test_starts_empty(self):
        state = InMemoryStateStore().load_state()
        assert state.patients == [] and state.episodes == [] and state.visits == [] and state.referrals == []

    def test_save_and_load(self, sample_state):
        store = InMemoryStateStore()
        store.save_state(sample_state)
        assert store.load_state().to_json() == sample_state.to_json()

    def test_loaded_state_is_a_copy(self, sample_state):
        store = InMemoryStateStore(state=sample_state)
        loaded = store.load_state()
        loaded.patients.clear()
        assert len(store.load_state().patients) == 1

    def test_default_settings(self):
        settings = InMemoryStateStore().get_settings()
        assert settings.active_scales.wifi is True
        assert settings.active_scales.wagner is False
        assert settings.active_scales.texas is False


class TestJsonFileStore:

    def test_creates_file(self, tmp_path):
        path = tmp_path / "data" / "clinic.json"
        JsonFileStateStore(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["appState"] == {"patients": [], "episodes": [], "visits": [], "referrals": []}
        assert data["settings"]["activeScales"] == {"wifi": True, "wagner": False, "texas": False}

    def test_round_trip_uses_camel_case(self, tmp_path, sample_state):
        path = tmp_path / "clinic.json"
        store = JsonFileStateStore(path)
        store.save_state(sample_state)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["appState"]["episodes"][0]["vascularStatus"]["abi"] == 0.45
        assert raw["appState"]["episodes"][0]["patientId"] == "P1"

        reopened = JsonFileStateStore(path)
        assert reopened.load_state().to_json() == sample_state.to_json()

    def test_settings_survive_state_writes(self, tmp_path, sample_state):
        store = JsonFileStateStore(tmp_path / "clinic.json")
        store.save_settings(ClinicalSettings(active_scales=ActiveScales(wifi=False, texas=True), updated_by="Admin"))
        store.save_state(sample_state)

        settings = store.get_settings()
        assert settings.active_scales.wifi is False
        assert settings.active_scales.texas is True
        assert settings.updated_by == "Admin"

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "clinic.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStateStore(path)

        with pytest.raises(StorageError) as exc_info:
            store.load_state()
        assert exc_info.value.backend == "json-file"

    def test_undecodable_bytes_raise_storage_error(self, tmp_path):
        path = tmp_path / "clinic.json"
        path.write_bytes(b'{"appState": {"patients": [{"name": "\xff\xfe"}]}}')

        with pytest.raises(StorageError) as exc_info:
            JsonFileStateStore(path).load_state()
        assert exc_info.value.code == "STORAGE_ERROR"

    def test_non_object_document_raises_storage_error(self, tmp_path):
        path = tmp_path / "clinic.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            JsonFileStateStore(path).get_settings()
        assert exc_info.value.details["found"] == "list"

    def test_invalid_settings_raise_storage_error(self, tmp_path):
        path = tmp_path / "clinic.json"
        path.write_text(json.dumps({"settings": {"activeScales": {"wifi": "maybe"}}}), encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            JsonFileStateStore(path).get_settings()
        errors = exc_info.value.details["errors"]
        assert errors[0]["loc"] == ("activeScales", "wifi")
        json.dumps(exc_info.value.to_dict())

    def test_invalid_records_raise_storage_error(self, tmp_path):
        path = tmp_path / "clinic.json"
        path.write_text(json.dumps({"appState": {"episodes": [{"id": "E1"}]}}), encoding="utf-8")

        with pytest.raises(StorageError):
            JsonFileStateStore(path).load_state()


class TestBuildStore:

    def test_memory_by_default(self):
        assert isinstance(build_store(""), InMemoryStateStore)

    def test_file_when_path_given(self, tmp_path):
        store = build_store(str(tmp_path / "clinic.json"))
        assert isinstance(store, JsonFileStateStore)
