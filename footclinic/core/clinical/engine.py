"""
Alert Engine

Rebuilds the full alert list from the clinic's patients, episodes and visits.
There is no incremental update: the host calls it after every write and
replaces whatever alert list it held before.

Usage:
    from footclinic.core.clinical import generate_alerts

    alerts = generate_alerts(patients, episodes, visits)
    for a in alerts:
        print(a.id, a.severity, a.message)

Adding a rule:
    1. Write  rule_<name>(EpisodeContext) -> Optional[Alert]  in rules_episode.py
    2. Append it to EPISODE_RULES.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from footclinic.models.records import Episode, Patient, Visit
from footclinic.utils import get_logger
from .base import Alert, AlertSeverity
from .rules_episode import EPISODE_RULES, EpisodeContext
from .wifi import visits_newest_first

logger = get_logger(__name__)

EpisodeRule = Callable[[EpisodeContext], Optional[Alert]]


class AlertEngine:
    """
    Applies the episode rules to every active episode.

    Stateless apart from its rule list; it only reads its arguments, so one
    instance can serve concurrent requests.
    """

    def __init__(self, rules: Optional[Sequence[EpisodeRule]] = None):
        self.rules: Sequence[EpisodeRule] = tuple(rules) if rules is not None else EPISODE_RULES

    def generate(
        self,
        patients: Iterable[Patient],
        episodes: Iterable[Episode],
        visits: Iterable[Visit],
        now: Optional[datetime] = None,
    ) -> List[Alert]:
        """
        Evaluate every rule against every active episode.

        Args:
            patients: All patients (used to resolve the episode owner's name).
            episodes: All episodes; inactive ones are skipped.
            visits:   All visits of all episodes.
            now:      Alert creation time. Defaults to the current UTC time.

        Returns:
            Alerts in episode order, then rule order within an episode.
            An empty list is the expected result for a quiet clinic.
        """
        now = now or datetime.now(timezone.utc)
        patients_by_id: Dict[str, Patient] = {p.id: p for p in patients}

        visits_by_episode: Dict[str, List[Visit]] = defaultdict(list)
        for visit in visits:
            visits_by_episode[visit.episode_id].append(visit)

        alerts: List[Alert] = []
        active = [ep for ep in episodes if ep.is_active]

        for episode in active:
            patient = patients_by_id.get(episode.patient_id)
            if patient is None:
                logger.debug(
                    "AlertEngine: owner not found, using placeholder name",
                    extra={"episode_id": episode.id, "patient_id": episode.patient_id},
                )

            ctx = EpisodeContext(
                episode=episode,
                patient=patient,
                visits=visits_newest_first(visits_by_episode.get(episode.id, [])),
                now=now,
            )
            for rule in self.rules:
                alert = rule(ctx)
                if alert is not None:
                    logger.debug(
                        f"AlertEngine: {rule.__name__} fired ({alert.id})",
                        extra={"episode_id": episode.id},
                    )
                    alerts.append(alert)

        logger.info(f"AlertEngine: {len(alerts)} alert(s) over {len(active)} active episode(s)")
        return alerts

    @staticmethod
    def summarise(alerts: List[Alert]) -> Dict:
        """
        Build a compact summary dict suitable for JSON API responses.

        Example output:
        {
            "total_alerts": 2,
            "high_count": 2,
            "medium_count": 0,
            "low_count": 0,
            "alerts": [{...}, {...}]
        }
        """
        return {
            "total_alerts": len(alerts),
            "high_count":   sum(1 for a in alerts if a.severity == AlertSeverity.HIGH),
            "medium_count": sum(1 for a in alerts if a.severity == AlertSeverity.MEDIUM),
            "low_count":    sum(1 for a in alerts if a.severity == AlertSeverity.LOW),
            "alerts":       [a.to_dict() for a in alerts],
        }


_default_engine = AlertEngine()


def generate_alerts(
    patients: Iterable[Patient],
    episodes: Iterable[Episode],
    visits: Iterable[Visit],
    now: Optional[datetime] = None,
) -> List[Alert]:
    """Recompute the whole alert set with the default rules."""
    return _default_engine.generate(patients, episodes, visits, now=now)
