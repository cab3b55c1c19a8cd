"""
Diabetic-Foot Clinic - FastAPI Application

Thin host around the clinical core. Every write re-derives alert state from
the stored collections; nothing derived is persisted.

Endpoints:
- Clinic state load/save
- Patient registration
- Alerts, episode summary (WIfI) and dashboard worklist
- Surgical referral inbox
- Clinical settings

Store-backed handlers are plain ``def`` so FastAPI runs their file I/O in its
threadpool. Every load → modify → save cycle holds ``_write_lock``; the lock
is per process, so run a single worker when the JSON file store is in use.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import threading

from footclinic import __version__, config
from footclinic.core.clinical import AlertEngine, generate_alerts, latest_visit, calculate_wifi_score
from footclinic.core.patients import register_patient
from footclinic.core.referrals import (
    SENDER_ROLES,
    build_referral_snapshot,
    can_view_inbox,
    create_referral,
    draft_referral_content,
    inbox,
    mark_reviewed,
    unread_count,
)
from footclinic.core.worklist import dashboard_stats, prioritize_episodes, social_risk_patients
from footclinic.models.api import (
    AlertsResponse,
    ClinicalSettingsUpdate,
    DashboardResponse,
    EpisodeSummaryResponse,
    HealthResponse,
    ReferralCreateRequest,
    ReferralInboxResponse,
)
from footclinic.models.records import ClinicalSettings, ClinicState, Patient, UserRole
from footclinic.storage import StateStore, build_store
from footclinic.utils.exceptions import FootClinicError, PermissionDeniedError, RecordNotFoundError
from footclinic.utils.logging import setup_logging

setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    "VALIDATION_ERROR": 422,
    "NOT_FOUND": 404,
    "FORBIDDEN": 403,
    "STORAGE_ERROR": 500,
}


# ---- Store Singleton ----
_store: StateStore = build_store(config.DATA_PATH)
_write_lock = threading.Lock()
START_TIME = datetime.now()


def get_store() -> StateStore:
    return _store


def get_role(x_clinic_role: Optional[str] = Header(default=None)) -> UserRole:
    """Acting clinical role, passed explicitly on every role-sensitive call."""
    if not x_clinic_role:
        raise HTTPException(status_code=400, detail="X-Clinic-Role header is required")
    try:
        return UserRole.parse(x_clinic_role)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown role: {x_clinic_role}. Valid: {[r.name for r in UserRole]}"
        )


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Foot clinic API ready", extra={"store": _store.backend})
    yield
    logger.info("Foot clinic API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Diabetic Foot Clinic API",
    description="Wound episode tracking, WIfI scoring, clinical alerts and surgical referrals",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FootClinicError)
async def clinic_error_handler(request: Request, exc: FootClinicError):
    status_code = _ERROR_STATUS.get(exc.code, 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ---- Utility Functions ----

def _alerts_for(state: ClinicState):
    return generate_alerts(state.patients, state.episodes, state.visits)


def _find_episode(state: ClinicState, episode_id: str):
    for episode in state.episodes:
        if episode.id == episode_id:
            return episode
    raise RecordNotFoundError(
        f"Episode {episode_id} not found", record_type="episode", record_id=episode_id
    )


def _find_patient(state: ClinicState, patient_id: str) -> Optional[Patient]:
    return next((p for p in state.patients if p.id == patient_id), None)


# ---- API Endpoints ----

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(store: StateStore = Depends(get_store)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        store=store.backend,
    )


@app.get("/api/v1/state", tags=["State"])
def get_state(store: StateStore = Depends(get_store)) -> Dict[str, Any]:
    """Return all four collections."""
    return store.load_state().to_json()


@app.put("/api/v1/state", tags=["State"])
def save_state(state: ClinicState, store: StateStore = Depends(get_store)) -> Dict[str, Any]:
    """
    Replace the stored collections and return the alert set derived from them.
    """
    with _write_lock:
        store.save_state(state)
    alerts = _alerts_for(state)
    return {"ok": True, "alerts": AlertEngine.summarise(alerts)}


@app.post("/api/v1/patients", status_code=201, tags=["Patients"])
def add_patient(patient: Patient, store: StateStore = Depends(get_store)) -> Dict[str, Any]:
    """Register a patient after RUT validation."""
    with _write_lock:
        state = store.load_state()
        state.patients = register_patient(state.patients, patient)
        store.save_state(state)
    return state.patients[-1].to_json()


@app.get("/api/v1/alerts", response_model=AlertsResponse, tags=["Alerts"])
def list_alerts(store: StateStore = Depends(get_store)):
    """Alerts recomputed from the current state."""
    return AlertEngine.summarise(_alerts_for(store.load_state()))


@app.get("/api/v1/episodes/{episode_id}/summary", response_model=EpisodeSummaryResponse, tags=["Episodes"])
def episode_summary(episode_id: str, store: StateStore = Depends(get_store)):
    """
    WIfI score, last visit, alerts and a referral draft for one episode.

    The WIfI score is omitted when the scale is disabled in the clinical settings.
    """
    state = store.load_state()
    episode = _find_episode(state, episode_id)
    patient = _find_patient(state, episode.patient_id)
    own_visits = [v for v in state.visits if v.episode_id == episode.id]
    last = latest_visit(own_visits)

    summary = EpisodeSummaryResponse(
        episode_id=episode.id,
        patient_id=episode.patient_id,
        patient_name=patient.name if patient else None,
        last_visit=last.to_json() if last else None,
        alerts=[a.to_dict() for a in _alerts_for(state) if a.episode_id == episode.id],
    )
    if store.get_settings().active_scales.wifi:
        score = calculate_wifi_score(episode, last)
        summary.wifi = score.to_dict()
        summary.wifi_label = score.label
    if patient is not None:
        summary.referral_draft = draft_referral_content(
            build_referral_snapshot(patient, episode, own_visits)
        )
    return summary


@app.get("/api/v1/dashboard", response_model=DashboardResponse, tags=["Dashboard"])
def dashboard(store: StateStore = Depends(get_store)):
    """Headline counters, prioritised worklist and social-risk patients."""
    state = store.load_state()
    alerts = _alerts_for(state)
    worklist = prioritize_episodes(
        state.patients, state.episodes, state.visits, alerts,
        stale_days=config.PHOTO_STALE_DAYS,
    )
    return DashboardResponse(
        stats=dashboard_stats(state.patients, state.episodes, state.visits, alerts),
        worklist=[row.to_dict() for row in worklist],
        social_alerts=[
            {"patientId": p.id, "name": p.name}
            for p in social_risk_patients(state.patients)
        ],
    )


@app.get("/api/v1/referrals", tags=["Referrals"])
def referral_inbox(
    role: UserRole = Depends(get_role),
    store: StateStore = Depends(get_store),
) -> Dict[str, Any]:
    """Surgical inbox, newest first, with the unread counter."""
    if not can_view_inbox(role):
        raise PermissionDeniedError(f"El rol {role.value} no accede a la bandeja quirúrgica", role=role.value)
    referrals = store.load_state().referrals
    return ReferralInboxResponse(
        unread=unread_count(referrals),
        referrals=inbox(referrals),
    ).to_json()


@app.post("/api/v1/referrals", status_code=201, tags=["Referrals"])
def send_referral(
    request: ReferralCreateRequest,
    role: UserRole = Depends(get_role),
    store: StateStore = Depends(get_store),
) -> Dict[str, Any]:
    """Send a surgical evaluation request for an episode."""
    if role not in SENDER_ROLES:
        raise PermissionDeniedError(
            f"El rol {role.value} no puede solicitar evaluación quirúrgica", role=role.value
        )
    with _write_lock:
        state = store.load_state()
        episode = _find_episode(state, request.episode_id)
        content = request.content
        if not content:
            patient = _find_patient(state, episode.patient_id)
            if patient is None:
                raise RecordNotFoundError(
                    f"Patient {episode.patient_id} not found",
                    record_type="patient",
                    record_id=episode.patient_id,
                )
            content = draft_referral_content(build_referral_snapshot(patient, episode, state.visits))

        referral = create_referral(episode.id, episode.patient_id, content, role)
        state.referrals.append(referral)
        store.save_state(state)
    return referral.to_json()


@app.post("/api/v1/referrals/{referral_id}/review", tags=["Referrals"])
def review_referral(
    referral_id: str,
    role: UserRole = Depends(get_role),
    store: StateStore = Depends(get_store),
) -> Dict[str, Any]:
    """Mark a referral as reviewed. Reviewing twice is harmless."""
    if not can_view_inbox(role):
        raise PermissionDeniedError(f"El rol {role.value} no accede a la bandeja quirúrgica", role=role.value)
    with _write_lock:
        state = store.load_state()
        if not any(r.id == referral_id for r in state.referrals):
            raise RecordNotFoundError(
                f"Referral {referral_id} not found", record_type="referral", record_id=referral_id
            )
        state.referrals = mark_reviewed(state.referrals, referral_id)
        store.save_state(state)
    reviewed = next(r for r in state.referrals if r.id == referral_id)
    return reviewed.to_json()


@app.get("/api/v1/settings/clinical", tags=["Settings"])
def get_clinical_settings(store: StateStore = Depends(get_store)) -> Dict[str, Any]:
    return store.get_settings().to_json()


@app.put("/api/v1/settings/clinical", tags=["Settings"])
def update_clinical_settings(
    update: ClinicalSettingsUpdate,
    role: UserRole = Depends(get_role),
    store: StateStore = Depends(get_store),
) -> Dict[str, Any]:
    """Enable or disable clinical scales. Admin only."""
    if role != UserRole.ADMIN:
        raise PermissionDeniedError("Solo Admin puede modificar la configuración clínica", role=role.value)
    settings = ClinicalSettings(
        active_scales=update.active_scales,
        updated_at=datetime.now(timezone.utc),
        updated_by=role.value,
    )
    with _write_lock:
        store.save_settings(settings)
    logger.info(f"Clinical settings updated: {settings.active_scales.to_json()}", extra={"role": role.value})
    return settings.to_json()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("footclinic.main:app", host="0.0.0.0", port=8000)
