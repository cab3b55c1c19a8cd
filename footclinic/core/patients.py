"""
Patient registry helpers.

Chilean RUT handling and patient registration checks.
"""
import re
from typing import List

from footclinic.models.records import Patient
from footclinic.utils import RecordValidationError, get_logger

logger = get_logger(__name__)

_RUT_PATTERN = re.compile(r"^[0-9]+-[0-9kK]$")
_RUT_STRIP = re.compile(r"[^0-9kK]")


def format_rut(rut: str) -> str:
    """Normalise ``12.345.678-5`` style input to ``12345678-5``."""
    clean = _RUT_STRIP.sub("", rut)
    if len(clean) < 2:
        return clean
    return f"{clean[:-1]}-{clean[-1]}"


def validate_rut(rut: str) -> bool:
    """Check a normalised RUT against its modulo-11 verifier digit."""
    if not _RUT_PATTERN.match(rut):
        return False
    number, dv = rut.split("-")

    total = 0
    multiplier = 2
    for digit in reversed(number):
        total += int(digit) * multiplier
        multiplier = 2 if multiplier == 7 else multiplier + 1

    expected = 11 - (total % 11)
    if expected == 11:
        expected_dv = "0"
    elif expected == 10:
        expected_dv = "k"
    else:
        expected_dv = str(expected)
    return expected_dv == dv.lower()


def register_patient(patients: List[Patient], patient: Patient) -> List[Patient]:
    """
    Validate a new patient and return the patient list with it appended.

    Raises:
        RecordValidationError: empty name or RUT, or an invalid RUT.
    """
    if not patient.name.strip() or not patient.rut.strip():
        raise RecordValidationError("Nombre y RUT son obligatorios", field="name")

    rut = format_rut(patient.rut)
    if not validate_rut(rut):
        raise RecordValidationError("RUT inválido", field="rut", details={"rut": patient.rut})

    patient = patient.model_copy(update={"rut": rut})
    logger.info("Patient registered", extra={"patient_id": patient.id})
    return [*patients, patient]
