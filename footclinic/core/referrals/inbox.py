"""
Surgical Referral Inbox

A referral is created ``Pendiente`` by the diabetology doctor and flipped to
``Revisado`` once a surgeon has looked at it. ``Revisado`` is terminal.

All functions are pure: they return new objects and never mutate the
referrals they are given.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from footclinic.models.records import ReferralReport, ReferralStatus, UserRole
from footclinic.utils import PermissionDeniedError, get_logger

logger = get_logger(__name__)

# Only diabetology sends surgical evaluation requests
SENDER_ROLES = frozenset({UserRole.DOCTOR})

# Roles that see the surgical inbox
INBOX_ROLES = frozenset({UserRole.SURGERY, UserRole.VASCULAR, UserRole.ADMIN})


def create_referral(
    episode_id: str,
    patient_id: str,
    content: str,
    sender_role: UserRole,
    now: Optional[datetime] = None,
) -> ReferralReport:
    """
    Open a new surgical evaluation request.

    Raises:
        PermissionDeniedError: if ``sender_role`` may not send referrals.
    """
    if sender_role not in SENDER_ROLES:
        raise PermissionDeniedError(
            f"El rol {sender_role.value} no puede solicitar evaluación quirúrgica",
            role=sender_role.value,
        )
    referral = ReferralReport(
        episode_id=episode_id,
        patient_id=patient_id,
        date=now or datetime.now(timezone.utc),
        content=content,
        status=ReferralStatus.PENDING,
        sender_role=sender_role,
    )
    logger.info(
        "Referral opened",
        extra={"referral_id": referral.id, "episode_id": episode_id, "role": sender_role.value},
    )
    return referral


def mark_reviewed(referrals: Iterable[ReferralReport], referral_id: str) -> List[ReferralReport]:
    """
    Return a copy of ``referrals`` with ``referral_id`` set to ``Revisado``.

    Only the status field changes. Already-reviewed referrals and unknown ids
    leave the list as it was.
    """
    updated = []
    for referral in referrals:
        if referral.id == referral_id and referral.status != ReferralStatus.REVIEWED:
            referral = referral.model_copy(update={"status": ReferralStatus.REVIEWED})
            logger.info("Referral marked as reviewed", extra={"referral_id": referral_id})
        updated.append(referral)
    return updated


def unread_count(referrals: Iterable[ReferralReport]) -> int:
    return sum(1 for r in referrals if r.status == ReferralStatus.PENDING)


def inbox(referrals: Iterable[ReferralReport]) -> List[ReferralReport]:
    """Referrals newest first."""
    return sorted(referrals, key=lambda r: r.date, reverse=True)


def can_view_inbox(role: UserRole) -> bool:
    return role in INBOX_ROLES
