"""
Episode Alert Rules

Each rule inspects one active wound episode and returns an Alert or None.

Rules (registration order = output order per episode):
    1. Critical ischemia: ABI strictly below 0.5
    2. Consecutive deterioration: the two most recent visits are both "Peor"
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from footclinic.models.records import Episode, Evolution, Patient, Visit
from .base import Alert, AlertSeverity, AlertType, format_clinical_number


# ── Thresholds ────────────────────────────────────────────────────────────────

ABI_CRITICAL = 0.5
WORSENING_STREAK = 2

UNKNOWN_PATIENT_LABEL = "paciente"


@dataclass
class EpisodeContext:
    """Everything a rule may look at for one episode."""
    episode: Episode
    patient: Optional[Patient]
    visits: List[Visit]          # this episode only, most recent first
    now: datetime

    @property
    def patient_name(self) -> str:
        if self.patient is None or not self.patient.name:
            return UNKNOWN_PATIENT_LABEL
        return self.patient.name

    @property
    def patient_id(self) -> Optional[str]:
        return self.patient.id if self.patient is not None else None


# ── Rule 1: Critical Ischemia ─────────────────────────────────────────────────

def rule_critical_ischemia(ctx: EpisodeContext) -> Optional[Alert]:
    """ABI < 0.5 → route to vascular surgery. ABI exactly 0.5 does not fire."""
    abi = ctx.episode.vascular_status.abi
    if abi is None or abi >= ABI_CRITICAL:
        return None

    return Alert(
        id=f"isch-{ctx.episode.id}",
        type=AlertType.SURGICAL,
        severity=AlertSeverity.HIGH,
        message=f"VASCULAR: Isquemia Crítica (ABI {format_clinical_number(abi)}) en {ctx.patient_name}.",
        episode_id=ctx.episode.id,
        patient_id=ctx.patient_id,
        created_at=ctx.now,
    )


# ── Rule 2: Consecutive Deterioration ─────────────────────────────────────────

def rule_consecutive_worsening(ctx: EpisodeContext) -> Optional[Alert]:
    """The two most recent visits were both judged "Peor". Older visits are ignored."""
    if len(ctx.visits) < WORSENING_STREAK:
        return None
    recent = ctx.visits[:WORSENING_STREAK]
    if not all(v.evolution == Evolution.WORSE for v in recent):
        return None

    return Alert(
        id=f"peor-{ctx.episode.id}",
        type=AlertType.CLINICAL,
        severity=AlertSeverity.HIGH,
        message=f'CRÍTICO: 2 evoluciones "Peor" consecutivas en {ctx.patient_name}.',
        episode_id=ctx.episode.id,
        patient_id=ctx.patient_id,
        created_at=ctx.now,
    )


EPISODE_RULES = (
    rule_critical_ischemia,
    rule_consecutive_worsening,
)
