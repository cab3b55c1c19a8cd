"""
Clinical Decision Layer

WIfI scoring of wound episodes and the rule-based alert generator.

Usage:
    from footclinic.core.clinical import calculate_wifi_score, generate_alerts

    score = calculate_wifi_score(episode, last_visit)
    alerts = generate_alerts(patients, episodes, visits)
"""
from .base import (
    Alert,
    AlertSeverity,
    AlertType,
    AmputationRisk,
    RevascularizationBenefit,
    WifiScore,
    format_clinical_number,
)
from .engine import AlertEngine, generate_alerts
from .wifi import calculate_wifi_score, latest_visit, score_episode, visits_newest_first

__all__ = [
    "Alert",
    "AlertSeverity",
    "AlertType",
    "AmputationRisk",
    "RevascularizationBenefit",
    "WifiScore",
    "format_clinical_number",
    "AlertEngine",
    "generate_alerts",
    "calculate_wifi_score",
    "latest_visit",
    "score_episode",
    "visits_newest_first",
]
