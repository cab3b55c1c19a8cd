"""
Clinical Worklist

Orders the clinic's active episodes for the daily round and computes the
headline counters shown on the dashboard.

Priority:
    1  High alert on the episode, or its last visit was "Peor"
    2  No photo in the last PHOTO_STALE_DAYS days (or no visit at all)
    3  Everything else
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from footclinic.core.clinical.base import Alert, AlertSeverity
from footclinic.core.clinical.wifi import visits_newest_first
from footclinic.models.records import Episode, Evolution, Patient, Visit

PHOTO_STALE_DAYS = 7

PRIORITY_HIGH = 1
PRIORITY_MEDIUM = 2
PRIORITY_LOW = 3


@dataclass
class EpisodePriority:
    episode: Episode
    patient: Optional[Patient]
    last_visit: Optional[Visit]
    has_photo_alert: bool
    is_worse: bool
    is_critical: bool
    priority: int

    def to_dict(self) -> dict:
        return {
            "episodeId": self.episode.id,
            "patientId": self.episode.patient_id,
            "patientName": self.patient.name if self.patient else None,
            "location": self.episode.location,
            "lastVisitDate": self.last_visit.date.isoformat() if self.last_visit else None,
            "hasPhotoAlert": self.has_photo_alert,
            "isWorse": self.is_worse,
            "isCritical": self.is_critical,
            "priority": self.priority,
        }


def prioritize_episodes(
    patients: Iterable[Patient],
    episodes: Iterable[Episode],
    visits: Iterable[Visit],
    alerts: Iterable[Alert],
    now: Optional[datetime] = None,
    stale_days: int = PHOTO_STALE_DAYS,
) -> List[EpisodePriority]:
    """Active episodes, most urgent first; equal priorities keep episode order."""
    now = now or datetime.now(timezone.utc)
    stale_after = timedelta(days=stale_days)
    patients_by_id = {p.id: p for p in patients}

    visits_by_episode: Dict[str, List[Visit]] = defaultdict(list)
    for visit in visits:
        visits_by_episode[visit.episode_id].append(visit)

    critical_episodes = {
        a.episode_id for a in alerts
        if a.severity == AlertSeverity.HIGH and a.episode_id is not None
    }

    rows = []
    for episode in episodes:
        if not episode.is_active:
            continue
        ordered = visits_newest_first(visits_by_episode.get(episode.id, []))
        last = ordered[0] if ordered else None

        has_photo_alert = last is None or (now - last.date) > stale_after
        is_worse = last is not None and last.evolution == Evolution.WORSE
        is_critical = episode.id in critical_episodes

        if is_critical or is_worse:
            priority = PRIORITY_HIGH
        elif has_photo_alert:
            priority = PRIORITY_MEDIUM
        else:
            priority = PRIORITY_LOW

        rows.append(EpisodePriority(
            episode=episode,
            patient=patients_by_id.get(episode.patient_id),
            last_visit=last,
            has_photo_alert=has_photo_alert,
            is_worse=is_worse,
            is_critical=is_critical,
            priority=priority,
        ))

    rows.sort(key=lambda r: r.priority)
    return rows


def dashboard_stats(
    patients: List[Patient],
    episodes: List[Episode],
    visits: List[Visit],
    alerts: List[Alert],
) -> Dict[str, int]:
    active_ids = {e.id for e in episodes if e.is_active}
    return {
        "patients": len(patients),
        "activeEpisodes": len(active_ids),
        "criticalAlerts": sum(1 for a in alerts if a.severity == AlertSeverity.HIGH),
        "onAntibiotics": sum(
            1 for v in visits if v.episode_id in active_ids and v.atb.in_course
        ),
    }


def social_risk_patients(patients: Iterable[Patient]) -> List[Patient]:
    """Retinopathy without an effective support network: reinforce education."""
    return [
        p for p in patients
        if p.complications.retinopathy and not p.social_determinants.has_effective_support
    ]
