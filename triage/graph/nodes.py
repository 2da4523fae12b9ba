from triage.config.logger import get_logger, log_stage
from triage.config.settings import settings
from triage.directory.patients import lookup
from triage.graph.state import TriageState
from triage.models import PatientRef, RiskAssessment, RoutingMeta, TriageResult
from triage.rules.care_plans import build_plan
from triage.rules.classifier import classify
from triage.rules.rationale import build_rationale
from triage.rules.taxonomy import check_test_category, compute_priority

logger = get_logger(__name__)


# ── Classification ──────────────────────────────────────────────────
def classify_node(state: TriageState) -> TriageState:
    """Classify once; both synthesizers read this single result."""
    classification = classify(state["text"])
    log_stage(logger, "classify", f"rule={classification.rule_id} band={classification.band}")
    return {"classification": classification}


# ── Synthesizers (independent branches) ─────────────────────────────
def care_plan_node(state: TriageState) -> TriageState:
    classification = state["classification"]
    plan = build_plan(classification.band, classification.rule_id)
    log_stage(logger, "care_plan", plan.disposition)
    return {"care_plan": plan}


def rationale_node(state: TriageState) -> TriageState:
    classification = state["classification"]
    rationale = build_rationale(
        classification.rule_id,
        state.get("patient_key"),
        band=classification.band,
        now=state.get("now"),
    )
    log_stage(logger, "rationale", f"confidence={rationale.confidence}")
    return {"rationale": rationale}


# ── Assembly ────────────────────────────────────────────────────────
def assemble_node(state: TriageState) -> TriageState:
    classification = state["classification"]
    patient = lookup(state.get("patient_key")).patient

    priority = compute_priority(
        classification.band,
        background=bool(state.get("background", False)),
        system_load=state.get("system_load", "normal"),
    )
    check_test_category(classification.band, classification.test_category)
    routing = RoutingMeta(
        priority=priority,
        test_category=None if settings.is_production() else classification.test_category,
    )

    result = TriageResult(
        risk=RiskAssessment(
            band=classification.band,
            probability=classification.probability,
            explanations=list(classification.explanations),
        ),
        care_plan=state["care_plan"],
        rationale=state["rationale"],
        routing=routing,
        patient=PatientRef(key=patient.key, label=patient.label, registered=patient.registered),
        matched_rule=classification.rule_id,
    ).check_consistency()

    log_stage(
        logger,
        "assemble",
        f"rule={result.matched_rule} band={result.risk.band} priority={priority} patient={patient.key}",
    )
    return {"result": result}
