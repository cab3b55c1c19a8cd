"""
Clinical Decision Layer: Base Types

Defines the derived, never-persisted results of the clinical layer: the WIfI
score of an episode and the alerts raised over the clinic's active episodes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AlertType(str, Enum):
    """Which team an alert is routed to."""
    CLINICAL       = "Clinical"
    ADMINISTRATIVE = "Administrative"
    PROA           = "PROA"
    SOCIAL         = "Social"
    NURSING        = "Nursing"
    SURGICAL       = "Surgical"


class AlertSeverity(str, Enum):
    LOW    = "Low"
    MEDIUM = "Medium"
    HIGH   = "High"


class AmputationRisk(str, Enum):
    VERY_LOW = "Muy Bajo"
    LOW      = "Bajo"
    MODERATE = "Moderado"
    HIGH     = "Alto"


class RevascularizationBenefit(str, Enum):
    MINIMAL  = "Mínimo"
    LOW      = "Bajo"
    MODERATE = "Moderado"
    HIGH     = "Alto"


@dataclass(frozen=True)
class WifiScore:
    """
    Wound / Ischemia / foot Infection classification of one episode.

    Each grade is 0-3. ``clinical_stage`` is 1-4 and the two labels are the
    composite amputation risk and expected benefit of revascularization.
    """
    wound: int
    ischemia: int
    foot_infection: int
    clinical_stage: int
    amputation_risk: AmputationRisk
    revascularization_benefit: RevascularizationBenefit

    @property
    def total(self) -> int:
        return self.wound + self.ischemia + self.foot_infection

    @property
    def label(self) -> str:
        """Compact form used in referrals and case presentations, e.g. ``W1 I2 fI0``."""
        return f"W{self.wound} I{self.ischemia} fI{self.foot_infection}"

    def to_dict(self) -> dict:
        return {
            "wound": self.wound,
            "ischemia": self.ischemia,
            "footInfection": self.foot_infection,
            "clinicalStage": self.clinical_stage,
            "amputationRisk": self.amputation_risk.value,
            "revascularizationBenefit": self.revascularization_benefit.value,
        }


@dataclass
class Alert:
    """
    One alert derived from the current clinic state.

    Alerts are rebuilt from scratch on every change; the id is deterministic
    per rule and episode (e.g. ``isch-<episodeId>``) so an unchanged state
    always yields the same ids.
    """
    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    created_at: datetime
    episode_id: Optional[str] = None
    patient_id: Optional[str] = None
    is_resolved: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "episodeId": self.episode_id,
            "patientId": self.patient_id,
            "createdAt": self.created_at.isoformat(),
            "isResolved": self.is_resolved,
        }


def format_clinical_number(value: float) -> str:
    """Shortest exact rendering of a measurement: 0.4512345 stays whole, 1.0 -> "1"."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text
