"""
Record and API schemas.
"""
from .records import (
    ClinicalSettings,
    ClinicState,
    Episode,
    Evolution,
    Patient,
    ReferralReport,
    ReferralStatus,
    TreatmentStrategy,
    UserRole,
    Visit,
)

__all__ = [
    "ClinicalSettings",
    "ClinicState",
    "Episode",
    "Evolution",
    "Patient",
    "ReferralReport",
    "ReferralStatus",
    "TreatmentStrategy",
    "UserRole",
    "Visit",
]
