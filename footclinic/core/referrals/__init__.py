"""
Surgical referrals: inbox lifecycle and referral drafts.
"""
from .inbox import (
    INBOX_ROLES,
    SENDER_ROLES,
    can_view_inbox,
    create_referral,
    inbox,
    mark_reviewed,
    unread_count,
)
from .snapshot import ReferralSnapshot, build_referral_snapshot, draft_referral_content, format_clinic_date

__all__ = [
    "INBOX_ROLES",
    "SENDER_ROLES",
    "can_view_inbox",
    "create_referral",
    "inbox",
    "mark_reviewed",
    "unread_count",
    "ReferralSnapshot",
    "build_referral_snapshot",
    "draft_referral_content",
    "format_clinic_date",
]
