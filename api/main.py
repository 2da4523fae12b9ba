import time

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import (
    BatchTriageRequest,
    PatientListResponse,
    TimelineResponse,
    TriageRequest,
)
from triage.batch import triage_batch
from triage.config.logger import configure_logging, get_logger
from triage.config.settings import settings
from triage.directory.patients import DIRECTORY, list_patients, lookup
from triage.engine import triage
from triage.errors import InvalidInputError
from triage.rules.classifier import DEFAULT_RULE_ID, RULES

app = FastAPI(title="Symptom Triage Engine")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

configure_logging()
logger = get_logger(__name__)


def _error_response(exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": exc.to_dict()})


@app.middleware("http")
async def log_requests(request, call_next):
    start = time.perf_counter()
    logger.info("[request.start] %s %s", request.method, request.url.path)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "[request.end] %s %s status=%s elapsed=%.1fms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


@app.get("/api/health")
async def health():
    return {
        "ok": True,
        "ruleset": settings.RULESET_LABEL,
        "rules": len(RULES) + 1,
        "patients": len(DIRECTORY),
    }


@app.get("/api/triage")
async def triage_info():
    return {
        "service": "Rule-based Symptom Triage",
        "ruleset": settings.RULESET_LABEL,
        "rules": [rule.rule_id for rule in RULES] + [DEFAULT_RULE_ID],
        "endpoints": {
            "triage": "POST /api/triage",
            "batch": "POST /api/triage/batch",
            "patients": "GET /api/patients",
            "timeline": "GET /api/patients/{patient_key}/timeline",
            "health": "GET /api/health",
        },
    }


@app.post("/api/triage")
async def run_triage(payload: TriageRequest):
    try:
        result = triage(payload.text, payload.patient_key)
    except InvalidInputError as exc:
        logger.info("[triage] rejected: %s", exc.message)
        return _error_response(exc)
    return JSONResponse(
        content=result.model_dump(mode="json"),
        headers={"X-Risk-Band": result.risk.band},
    )


@app.post("/api/triage/batch")
async def run_triage_batch(payload: BatchTriageRequest):
    try:
        summary = triage_batch(
            [item.model_dump() for item in payload.requests],
            batch_id=payload.batch_id,
            system_load=payload.system_load,
        )
    except InvalidInputError as exc:
        logger.info("[batch] rejected: %s", exc.message)
        return _error_response(exc)
    return summary


@app.get("/api/patients", response_model=PatientListResponse)
async def patients(include_unregistered: bool = True):
    return PatientListResponse(patients=list_patients(include_unregistered=include_unregistered))


@app.get("/api/patients/{patient_key}/timeline", response_model=TimelineResponse)
async def patient_timeline(patient_key: str):
    record = lookup(patient_key)
    return TimelineResponse(
        key=record.patient.key,
        label=record.patient.label,
        registered=record.patient.registered,
        timeline=[entry.model_dump() for entry in record.timeline],
    )
