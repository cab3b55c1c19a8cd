"""
Referral snapshot

Collects the facts a surgeon needs from an episode (comorbidities, WIfI,
vascular status, latest labs, recent evolution) and renders the plain-text
draft that opens a surgical referral.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from footclinic.core.clinical.base import format_clinical_number
from footclinic.core.clinical.wifi import calculate_wifi_score, visits_newest_first
from footclinic.models.records import Episode, LabResult, Patient, Visit

RECENT_VISITS = 3
NOT_AVAILABLE = "N/A"


def format_clinic_date(value: Optional[datetime]) -> str:
    """dd-mm-yyyy, the way the clinic writes dates."""
    if value is None:
        return NOT_AVAILABLE
    return value.strftime("%d-%m-%Y")


def _fmt(value) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    if isinstance(value, float):
        return format_clinical_number(value)
    return str(value)


@dataclass
class ReferralSnapshot:
    patient_name: str
    comorbidities: List[str] = field(default_factory=list)
    wifi: str = ""
    vascular: str = ""
    labs: str = ""
    evolution: str = ""

    def to_dict(self) -> dict:
        return {
            "patient": {"name": self.patient_name, "comorbidities": self.comorbidities},
            "wifi": self.wifi,
            "vascular": self.vascular,
            "labs": self.labs,
            "evolution": self.evolution,
        }


def _latest_lab(patient: Patient) -> Optional[LabResult]:
    # Lab history is kept in entry order; the last one is the newest
    return patient.lab_history[-1] if patient.lab_history else None


def build_referral_snapshot(patient: Patient, episode: Episode, visits: Iterable[Visit]) -> ReferralSnapshot:
    own = visits_newest_first(v for v in visits if v.episode_id == episode.id)
    score = calculate_wifi_score(episode, own[0] if own else None)

    vs = episode.vascular_status
    lab = _latest_lab(patient)
    if lab is not None:
        labs = (
            f"PCR: {_fmt(lab.pcr)}, VHS: {_fmt(lab.vhs)}, "
            f"Albúmina: {_fmt(lab.albumin)}, VFG: {_fmt(lab.vfg)}"
        )
    else:
        labs = "No disponibles"

    evolution = " | ".join(
        f"{format_clinic_date(v.date)}: {v.evolution.value} (Plan previo: {v.plan})"
        for v in own[:RECENT_VISITS]
    )

    return ReferralSnapshot(
        patient_name=patient.name,
        comorbidities=list(patient.comorbidities),
        wifi=(
            f"W:{score.wound} I:{score.ischemia} fI:{score.foot_infection} "
            f"(Riesgo: {score.amputation_risk.value}, "
            f"Beneficio Revasc: {score.revascularization_benefit.value})"
        ),
        vascular=f"ABI: {_fmt(vs.abi)}, Pulsos: DP {_fmt(vs.pulses.dp)}/PT {_fmt(vs.pulses.pt)}",
        labs=labs,
        evolution=evolution,
    )


def draft_referral_content(snapshot: ReferralSnapshot) -> str:
    """Plain-text body the doctor edits before sending the referral."""
    comorbidities = ", ".join(snapshot.comorbidities) or "Sin antecedentes registrados"
    return "\n".join([
        "SOLICITUD DE EVALUACIÓN",
        f"Paciente: {snapshot.patient_name}",
        "",
        f"Antecedentes: {comorbidities}",
        f"Score WIfI: {snapshot.wifi}",
        f"Estado Vascular: {snapshot.vascular}",
        f"Laboratorio Reciente: {snapshot.labs}",
        f"Evolución de Herida: {snapshot.evolution or 'Sin visitas registradas'}",
    ])
