"""
Request/response schemas for the HTTP API.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .records import ActiveScales, ClinicRecord, ReferralReport


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    store: str


class ReferralCreateRequest(ClinicRecord):
    """Body of POST /api/v1/referrals. Empty content sends the generated draft."""
    episode_id: str
    content: Optional[str] = None


class ReferralInboxResponse(ClinicRecord):
    unread: int
    referrals: List[ReferralReport] = Field(default_factory=list)


class ClinicalSettingsUpdate(ClinicRecord):
    active_scales: ActiveScales


class AlertsResponse(BaseModel):
    total_alerts: int
    high_count: int
    medium_count: int
    low_count: int
    alerts: List[Dict[str, Any]]


class EpisodeSummaryResponse(BaseModel):
    episode_id: str
    patient_id: str
    patient_name: Optional[str] = None
    wifi: Optional[Dict[str, Any]] = None
    wifi_label: Optional[str] = None
    last_visit: Optional[Dict[str, Any]] = None
    alerts: List[Dict[str, Any]] = Field(default_factory=list)
    referral_draft: Optional[str] = None


class DashboardResponse(BaseModel):
    stats: Dict[str, int]
    worklist: List[Dict[str, Any]]
    social_alerts: List[Dict[str, Any]]
