"""
WIfI Scoring: Wound, Ischemia, foot Infection

Grades an episode from its vascular status and its most recent visit.

Inputs consumed:
    episode.vascular_status.abi        ankle-brachial index (optional)
    last_visit.size.depth              wound depth in mm (optional)
    last_visit.infection_today         has / severity label (optional)

Grading:
    W   depth > 10 → 3,  > 3 → 2,  > 0 → 1,  else 0
    I   abi < 0.4 → 3,  < 0.6 → 2,  < 0.8 → 1,  else / absent 0
    fI  only with an active infection: "Grado 4" → 3, "Grado 3" → 2,
        "Grado 2" → 1, else 0

Absent data never raises; it grades as 0.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

from footclinic.models.records import Episode, Visit
from .base import AmputationRisk, RevascularizationBenefit, WifiScore

# ── Thresholds ────────────────────────────────────────────────────────────────

# Wound depth (mm)
DEPTH_GRADE_3 = 10
DEPTH_GRADE_2 = 3
DEPTH_GRADE_1 = 0

# Ankle-brachial index
ABI_GRADE_3 = 0.4
ABI_GRADE_2 = 0.6
ABI_GRADE_1 = 0.8

# Infection severity labels, most severe first
INFECTION_GRADES: Tuple[Tuple[str, int], ...] = (
    ("Grado 4", 3),
    ("Grado 3", 2),
    ("Grado 2", 1),
)

# Composite
SUM_HIGH_RISK     = 7
SUM_MODERATE_RISK = 4
SUM_LOW_RISK      = 1
MAX_STAGE         = 4


# ── Grades ────────────────────────────────────────────────────────────────────

def wound_grade(last_visit: Optional[Visit]) -> int:
    if last_visit is None or last_visit.size is None:
        return 0
    depth = last_visit.size.depth
    if depth is None:
        return 0
    if depth > DEPTH_GRADE_3:
        return 3
    if depth > DEPTH_GRADE_2:
        return 2
    if depth > DEPTH_GRADE_1:
        return 1
    return 0


def ischemia_grade(episode: Episode) -> int:
    abi = episode.vascular_status.abi if episode.vascular_status else None
    if abi is None:
        return 0
    if abi < ABI_GRADE_3:
        return 3
    if abi < ABI_GRADE_2:
        return 2
    if abi < ABI_GRADE_1:
        return 1
    return 0


def foot_infection_grade(last_visit: Optional[Visit]) -> int:
    if last_visit is None or last_visit.infection_today is None:
        return 0
    infection = last_visit.infection_today
    if not infection.has:
        return 0
    severity = infection.severity or ""
    for marker, grade in INFECTION_GRADES:
        if marker in severity:
            return grade
    return 0


def _composite(total: int, wound: int, ischemia: int) -> Tuple[AmputationRisk, RevascularizationBenefit]:
    # Grade 3 wound or ischemia alone is enough for the highest band
    if total >= SUM_HIGH_RISK or ischemia == 3 or wound == 3:
        return AmputationRisk.HIGH, RevascularizationBenefit.HIGH
    if total >= SUM_MODERATE_RISK:
        return AmputationRisk.MODERATE, RevascularizationBenefit.MODERATE
    if total >= SUM_LOW_RISK:
        return AmputationRisk.LOW, RevascularizationBenefit.LOW
    return AmputationRisk.VERY_LOW, RevascularizationBenefit.MINIMAL


def clinical_stage(total: int) -> int:
    """Stage 1-4 from the grade sum; a zero sum is stage 1, not 0."""
    return min(MAX_STAGE, math.ceil(total / 2) or 1)


# ── Public API ────────────────────────────────────────────────────────────────

def calculate_wifi_score(episode: Episode, last_visit: Optional[Visit] = None) -> WifiScore:
    """
    Compute the WIfI classification of an episode.

    Args:
        episode: The wound episode (only its vascular status is read).
        last_visit: The episode's most recent visit, if any.

    Returns:
        WifiScore with the three grades, clinical stage and risk labels.
    """
    w = wound_grade(last_visit)
    i = ischemia_grade(episode)
    fi = foot_infection_grade(last_visit)
    total = w + i + fi
    risk, benefit = _composite(total, w, i)

    return WifiScore(
        wound=w,
        ischemia=i,
        foot_infection=fi,
        clinical_stage=clinical_stage(total),
        amputation_risk=risk,
        revascularization_benefit=benefit,
    )


def visits_newest_first(visits: Iterable[Visit]) -> List[Visit]:
    """Sort visits by date, most recent first. Same-date visits keep their input order."""
    return sorted(visits, key=lambda v: v.date, reverse=True)


def latest_visit(visits: Iterable[Visit]) -> Optional[Visit]:
    ordered = visits_newest_first(visits)
    return ordered[0] if ordered else None


def score_episode(episode: Episode, visits: Iterable[Visit]) -> WifiScore:
    """Score an episode against its own most recent visit."""
    own = [v for v in visits if v.episode_id == episode.id]
    return calculate_wifi_score(episode, latest_visit(own))
