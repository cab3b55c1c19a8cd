"""
Clinical record models for the diabetic-foot clinic.

These are the persisted documents (patients, wound episodes, weekly visits,
surgical referrals, clinic settings). Stored JSON uses camelCase field names;
Python code uses the snake_case attributes.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional
from uuid import uuid4

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    """Generate a unique record identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC so mixed inputs stay comparable
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# =============================================================================
# ENUMS
# =============================================================================


class UserRole(str, Enum):
    ADMIN = "Admin"
    DOCTOR = "Médico Diabetología"
    NURSE = "Enfermería"
    SURGERY = "Cirugía General"
    VASCULAR = "Cirugía Vascular"
    PHYSIATRY = "Fisiatría"
    AUDITOR = "Auditor"
    PARAMEDIC = "Paramédico"

    @classmethod
    def parse(cls, raw: str) -> "UserRole":
        """Accept either the member name (``VASCULAR``) or the display value."""
        raw = raw.strip()
        try:
            return cls[raw.upper()]
        except KeyError:
            return cls(raw)


class Evolution(str, Enum):
    """Clinician's judgement of the wound trajectory since the previous visit."""
    BETTER = "Mejor"
    SAME = "Igual"
    WORSE = "Peor"


class TreatmentStrategy(str, Enum):
    SALVAGE = "Salvataje"
    PALLIATIVE = "Paliativo"
    AMPUTATION_PLAN = "Plan Amputación"


class ReferralStatus(str, Enum):
    PENDING = "Pendiente"
    REVIEWED = "Revisado"


class CultureStatus(str, Enum):
    PENDING = "Pendiente"
    AVAILABLE = "Disponible"
    NOT_TAKEN = "No tomado"


class Side(str, Enum):
    RIGHT = "D"
    LEFT = "I"


# =============================================================================
# BASE
# =============================================================================


class ClinicRecord(BaseModel):
    """Base for every stored document: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# PATIENT
# =============================================================================


class PriorEvent(ClinicRecord):
    has: bool = False
    year: Optional[int] = None


class Complications(ClinicRecord):
    retinopathy: bool = False
    nephropathy: bool = False
    erc_stage: str = ""
    iam: PriorEvent = Field(default_factory=PriorEvent)
    acv: PriorEvent = Field(default_factory=PriorEvent)


class NeuropathyAssessment(ClinicRecord):
    has: bool = False
    method: Optional[str] = None  # Monofilamento / Diapasón / Ambos
    last_update: Optional[str] = None


class MetabolicTargets(ClinicRecord):
    hba1c: str = ""
    pa: str = ""
    ldl: str = ""
    last_date: Optional[str] = None


class SocialDeterminants(ClinicRecord):
    has_effective_support: bool = False
    living_conditions: str = ""


class LabResult(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    date: Optional[UtcDatetime] = None
    albumin: Optional[float] = None
    vfg: Optional[float] = None
    pcr: Optional[float] = None
    vhs: Optional[float] = None
    leucocitos: Optional[float] = None
    hba1c: Optional[float] = None


class ImagingResult(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    date: Optional[UtcDatetime] = None
    type: str
    report: str = ""
    image_url: Optional[str] = None


class Patient(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    rut: str
    name: str
    birth_date: Optional[date] = None
    comuna: str = ""
    contact: Optional[str] = None
    comorbidities: List[str] = Field(default_factory=list)
    complications: Complications = Field(default_factory=Complications)
    neuropathy: NeuropathyAssessment = Field(default_factory=NeuropathyAssessment)
    metabolic_targets: MetabolicTargets = Field(default_factory=MetabolicTargets)
    social_determinants: SocialDeterminants = Field(default_factory=SocialDeterminants)
    lab_history: List[LabResult] = Field(default_factory=list)
    imaging_history: List[ImagingResult] = Field(default_factory=list)
    created_at: UtcDatetime = Field(default_factory=utc_now)


# =============================================================================
# EPISODE
# =============================================================================


class Pulses(ClinicRecord):
    dp: str = ""
    pt: str = ""


class VascularStatus(ClinicRecord):
    pulses: Pulses = Field(default_factory=Pulses)
    abi: Optional[float] = Field(default=None, allow_inf_nan=False)
    tbi: Optional[float] = Field(default=None, allow_inf_nan=False)
    revascularizable: Optional[str] = None  # Sí / No / En estudio
    exam_requested: Optional[str] = None
    exam_status: Optional[str] = None
    plan: Optional[str] = None


class BaselineInfection(ClinicRecord):
    has: bool = False
    severity: Optional[str] = None  # Leve / Moderada / Severa


class AmputationDecision(ClinicRecord):
    enabled: bool = False
    criteria: List[str] = Field(default_factory=list)
    decision_date: Optional[UtcDatetime] = None


class SurgicalProcedure(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    date: UtcDatetime
    type: str  # Vascular / General
    description: str = ""
    specialist_id: str = ""
    specialist_role: Optional[UserRole] = None
    notes: Optional[str] = None


class MedicalDocument(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    date: UtcDatetime
    type: str
    title: str = ""
    content: str = ""
    author_role: Optional[UserRole] = None


class Episode(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    patient_id: str
    start_date: Optional[UtcDatetime] = None
    side: Optional[Side] = None
    location: str = ""
    etiology: str = ""
    vascular_status: VascularStatus = Field(default_factory=VascularStatus)
    infection_basal: BaselineInfection = Field(default_factory=BaselineInfection)
    strategy: TreatmentStrategy = TreatmentStrategy.SALVAGE
    amputation_major_risk: AmputationDecision = Field(default_factory=AmputationDecision)
    procedures: List[SurgicalProcedure] = Field(default_factory=list)
    documents: List[MedicalDocument] = Field(default_factory=list)
    is_active: bool = True


# =============================================================================
# VISIT
# =============================================================================


class WoundSize(ClinicRecord):
    """Wound dimensions in millimetres."""
    length: Optional[float] = Field(default=None, ge=0)
    width: Optional[float] = Field(default=None, ge=0)
    depth: Optional[float] = Field(default=None, ge=0)
    not_measured_reason: Optional[str] = None


class InfectionAssessment(ClinicRecord):
    has: bool = False
    severity: Optional[str] = None  # e.g. "Grado 3 (Moderada)"
    signs: List[str] = Field(default_factory=list)


class AntibioticCourse(ClinicRecord):
    in_course: bool = False
    scheme: Optional[str] = None
    dose: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    responsible: Optional[str] = None


class Sensitivity(ClinicRecord):
    drug: str
    sensitive: bool


class CultureState(ClinicRecord):
    taken: bool = False
    type: Optional[str] = None  # Tejido profundo / Óseo / Hisopo
    result_status: CultureStatus = CultureStatus.NOT_TAKEN
    result_details: Optional[str] = None
    sensitivities: List[Sensitivity] = Field(default_factory=list)


class NursingTactics(ClinicRecord):
    cleaning: str = ""
    debridement: str = ""
    dressings: List[str] = Field(default_factory=list)
    advanced_therapies: List[str] = Field(default_factory=list)
    other_technique: Optional[str] = None


class WifiGrades(ClinicRecord):
    """Sub-scores recorded by hand on the visit form."""
    wound: int = Field(ge=0, le=3)
    ischemia: int = Field(ge=0, le=3)
    foot_infection: int = Field(ge=0, le=3)


class Visit(ClinicRecord):
    id: str = Field(default_factory=generate_id)
    episode_id: str
    date: UtcDatetime
    professional_id: str = ""
    professional_role: Optional[UserRole] = None
    photo_url: str
    evolution: Evolution
    size: WoundSize = Field(default_factory=WoundSize)
    infection_today: InfectionAssessment = Field(default_factory=InfectionAssessment)
    atb: AntibioticCourse = Field(default_factory=AntibioticCourse)
    culture: CultureState = Field(default_factory=CultureState)
    nursing_tactics: Optional[NursingTactics] = None
    plan: str = ""
    responsible_plan: Optional[UserRole] = None
    wifi: Optional[WifiGrades] = None
    wagner: Optional[int] = Field(default=None, ge=0, le=5)
    texas: Optional[str] = None
    is_clinical_alert: Optional[bool] = None


# =============================================================================
# REFERRALS & SETTINGS
# =============================================================================


class ReferralReport(ClinicRecord):
    """Surgical evaluation request sent from diabetology to the surgical teams."""
    id: str = Field(default_factory=generate_id)
    episode_id: str
    patient_id: str
    date: UtcDatetime = Field(default_factory=utc_now)
    content: str = ""
    status: ReferralStatus = ReferralStatus.PENDING
    sender_role: UserRole


class ActiveScales(ClinicRecord):
    wifi: bool = True
    wagner: bool = False
    texas: bool = False


class ClinicalSettings(ClinicRecord):
    active_scales: ActiveScales = Field(default_factory=ActiveScales)
    updated_at: Optional[UtcDatetime] = None
    updated_by: Optional[str] = None


class ClinicState(ClinicRecord):
    """The four collections the clinic persists and re-derives alerts from."""
    patients: List[Patient] = Field(default_factory=list)
    episodes: List[Episode] = Field(default_factory=list)
    visits: List[Visit] = Field(default_factory=list)
    referrals: List[ReferralReport] = Field(default_factory=list)
