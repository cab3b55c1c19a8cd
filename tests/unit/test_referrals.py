"""
Unit Tests for the Surgical Referral Inbox and referral drafts.
"""
import pytest
from datetime import timedelta

from footclinic.core.referrals import (
    build_referral_snapshot,
    can_view_inbox,
    create_referral,
    draft_referral_content,
    inbox,
    mark_reviewed,
    unread_count,
)
from footclinic.models.records import ReferralStatus, UserRole
from footclinic.utils.exceptions import PermissionDeniedError


@pytest.fixture
def referrals(base_date):
    return [
        create_referral("E1", "P1", "primera", UserRole.DOCTOR, now=base_date),
        create_referral("E2", "P2", "segunda", UserRole.DOCTOR, now=base_date + timedelta(days=2)),
        create_referral("E3", "P3", "tercera", UserRole.DOCTOR, now=base_date + timedelta(days=1)),
    ]


class TestLifecycle:

    def test_created_pending(self, base_date):
        ref = create_referral("E1", "P1", "Evaluar revascularización", UserRole.DOCTOR, now=base_date)
        assert ref.status == ReferralStatus.PENDING
        assert ref.sender_role == UserRole.DOCTOR
        assert ref.date == base_date
        assert ref.id

    @pytest.mark.parametrize("role", [UserRole.NURSE, UserRole.VASCULAR, UserRole.ADMIN])
    def test_only_doctor_sends(self, role):
        with pytest.raises(PermissionDeniedError) as exc_info:
            create_referral("E1", "P1", "x", role)
        assert exc_info.value.code == "FORBIDDEN"

    def test_mark_reviewed_changes_only_status(self, referrals):
        target = referrals[1]
        updated = mark_reviewed(referrals, target.id)

        reviewed = updated[1]
        assert reviewed.status == ReferralStatus.REVIEWED
        assert reviewed.model_dump(exclude={"status"}) == target.model_dump(exclude={"status"})
        assert [r.status for r in (updated[0], updated[2])] == [ReferralStatus.PENDING] * 2

    def test_mark_reviewed_does_not_mutate_input(self, referrals):
        mark_reviewed(referrals, referrals[0].id)
        assert referrals[0].status == ReferralStatus.PENDING

    def test_mark_reviewed_is_idempotent(self, referrals):
        once = mark_reviewed(referrals, referrals[0].id)
        twice = mark_reviewed(once, referrals[0].id)
        assert [r.model_dump() for r in once] == [r.model_dump() for r in twice]

    def test_unknown_id_is_noop(self, referrals):
        updated = mark_reviewed(referrals, "missing")
        assert [r.model_dump() for r in updated] == [r.model_dump() for r in referrals]

    def test_unread_count_recomputed(self, referrals):
        assert unread_count(referrals) == 3
        assert unread_count(mark_reviewed(referrals, referrals[2].id)) == 2
        assert unread_count([]) == 0

    def test_inbox_newest_first(self, referrals):
        assert [r.content for r in inbox(referrals)] == ["segunda", "tercera", "primera"]

    def test_inbox_roles(self):
        assert can_view_inbox(UserRole.VASCULAR)
        assert can_view_inbox(UserRole.SURGERY)
        assert not can_view_inbox(UserRole.NURSE)


class TestSnapshot:

    def test_full_snapshot(self, make_patient, make_episode, make_visit):
        patient = make_patient(
            comorbidities=["HTA", "ERC"],
            labHistory=[
                {"pcr": 80.0, "vhs": 40, "albumin": 3.1, "vfg": 55},
                {"pcr": 120.5, "vhs": 60, "albumin": 2.8, "vfg": 50},
            ],
        )
        episode = make_episode(vascularStatus={"abi": 0.45, "pulses": {"dp": "Ausente", "pt": "Débil"}})
        visits = [
            make_visit("V1", days=0, evolution="Mejor", plan="Curación"),
            make_visit("V2", days=7, evolution="Igual", plan="Aseo"),
            make_visit("V3", days=14, evolution="Peor", plan="Desbridamiento", depth=5),
            make_visit("V4", days=21, evolution="Peor", plan="Derivar", depth=12),
        ]

        snap = build_referral_snapshot(patient, episode, visits)

        assert snap.wifi == "W:3 I:2 fI:0 (Riesgo: Alto, Beneficio Revasc: Alto)"
        assert snap.vascular == "ABI: 0.45, Pulsos: DP Ausente/PT Débil"
        assert snap.labs == "PCR: 120.5, VHS: 60, Albúmina: 2.8, VFG: 50"
        assert snap.evolution == (
            "22-03-2024: Peor (Plan previo: Derivar) | "
            "15-03-2024: Peor (Plan previo: Desbridamiento) | "
            "08-03-2024: Igual (Plan previo: Aseo)"
        )

    def test_snapshot_without_labs_or_visits(self, make_patient, make_episode):
        snap = build_referral_snapshot(make_patient(), make_episode(), [])
        assert snap.labs == "No disponibles"
        assert snap.vascular == "ABI: N/A, Pulsos: DP N/A/PT N/A"
        assert snap.evolution == ""

    def test_vascular_line_keeps_full_abi(self, make_patient, make_episode):
        snap = build_referral_snapshot(make_patient(), make_episode(abi=0.4512345), [])
        assert snap.vascular.startswith("ABI: 0.4512345,")

    def test_draft_content(self, make_patient, make_episode):
        snap = build_referral_snapshot(make_patient(name="Ana Rojas"), make_episode(), [])
        draft = draft_referral_content(snap)
        assert draft.startswith("SOLICITUD DE EVALUACIÓN\nPaciente: Ana Rojas")
        assert "Sin antecedentes registrados" in draft
        assert "Sin visitas registradas" in draft
