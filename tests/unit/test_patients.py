"""
Unit Tests for patient registration and RUT handling.
"""
import pytest

from footclinic.core.patients import format_rut, register_patient, validate_rut
from footclinic.models.records import Patient
from footclinic.utils.exceptions import RecordValidationError


class TestRut:

    @pytest.mark.parametrize("rut", ["12345678-5", "11111111-1", "6-k", "6-K", "0-0", "1-9"])
    def test_valid(self, rut):
        assert validate_rut(rut)

    @pytest.mark.parametrize("rut", ["12345678-4", "12.345.678-5", "123456785", "", "abc-1", "6-kk"])
    def test_invalid(self, rut):
        assert not validate_rut(rut)

    @pytest.mark.parametrize("raw,expected", [
        ("12.345.678-5", "12345678-5"),
        ("123456785", "12345678-5"),
        ("6k", "6-k"),
        ("7", "7"),
    ])
    def test_format(self, raw, expected):
        assert format_rut(raw) == expected


class TestRegister:

    def test_normalises_rut(self):
        patients = register_patient([], Patient(rut="12.345.678-5", name="Luis Soto"))
        assert len(patients) == 1
        assert patients[0].rut == "12345678-5"

    def test_rejects_bad_rut(self):
        with pytest.raises(RecordValidationError) as exc_info:
            register_patient([], Patient(rut="12345678-4", name="Luis Soto"))
        assert exc_info.value.field == "rut"
        assert exc_info.value.to_dict()["error"] == "VALIDATION_ERROR"

    def test_rejects_blank_name(self):
        with pytest.raises(RecordValidationError):
            register_patient([], Patient(rut="12345678-5", name="  "))

    def test_does_not_mutate_input(self, make_patient):
        existing = [make_patient("P1")]
        register_patient(existing, Patient(rut="11111111-1", name="Nuevo"))
        assert len(existing) == 1
