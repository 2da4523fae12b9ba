"""Care plans authored per classifier rule, with a generic fallback per band."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from triage.config.logger import get_logger
from triage.errors import UnmappedRuleError
from triage.models import CarePlan, RiskBand

logger = get_logger(__name__)

_EMERGENCY_WARNING = "Call 999 if syncope, collapse or any worsening"

AUTHORED_PLANS: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "chest_pain": {
        "severity": "immediate",
        "disposition": "Go to Emergency Department now",
        "primary_recommendation": "Go to Emergency Department now - do not drive yourself.",
        "actions": [
            "Call 999 or go directly to the nearest Emergency Department",
            "Chew 300mg aspirin if not allergic and not already taken",
            "Stop all activity and rest while waiting for help",
        ],
        "timeframe": "Immediately",
        "follow_up": ["ECG on arrival", "Serial troponin"],
        "warnings": ["Call 999 if syncope or worsening"],
        "confidence": 0.9,
    },
    "breathing_difficulty": {
        "severity": "immediate",
        "disposition": "Call emergency services now",
        "primary_recommendation": "Call 999 now for breathing difficulty.",
        "actions": [
            "Call 999 immediately",
            "Sit upright and loosen tight clothing",
            "Use your reliever inhaler if prescribed",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Oxygen saturation and peak flow on arrival"],
        "warnings": [_EMERGENCY_WARNING, "Blue lips or confusion means life-threatening hypoxia"],
        "confidence": 0.88,
    },
    "stroke_signs": {
        "severity": "immediate",
        "disposition": "Call emergency services now",
        "primary_recommendation": "Call 999 now - suspected stroke (FAST positive).",
        "actions": [
            "Call 999 immediately",
            "Note the time symptoms started",
            "Do not give food, drink or medication by mouth",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Urgent brain imaging", "Stroke team assessment"],
        "warnings": [_EMERGENCY_WARNING],
        "confidence": 0.9,
    },
    "anaphylaxis": {
        "severity": "immediate",
        "disposition": "Call emergency services now",
        "primary_recommendation": "Use an adrenaline auto-injector if available and call 999.",
        "actions": [
            "Use adrenaline auto-injector into the outer thigh if available",
            "Call 999 and say 'anaphylaxis'",
            "Lie flat with legs raised unless breathing is easier sitting up",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Observation after adrenaline", "Allergy clinic referral"],
        "warnings": ["Give a second adrenaline dose after 5 minutes if no improvement"],
        "confidence": 0.9,
    },
    "thunderclap_headache": {
        "severity": "immediate",
        "disposition": "Go to Emergency Department now",
        "primary_recommendation": "Go to Emergency Department now for urgent headache assessment.",
        "actions": [
            "Attend the nearest Emergency Department",
            "Do not drive yourself",
            "Bring a list of current medications",
        ],
        "timeframe": "Immediately",
        "follow_up": ["CT head", "Lumbar puncture if CT is negative"],
        "warnings": [_EMERGENCY_WARNING, "Call 999 if drowsiness, fits or a new rash develop"],
        "confidence": 0.85,
    },
    "mental_health_crisis": {
        "severity": "immediate",
        "disposition": "Emergency mental health support now",
        "primary_recommendation": "Call 999 or attend the Emergency Department now; do not stay alone.",
        "actions": [
            "Call 999 or go to the nearest Emergency Department",
            "Stay with someone you trust",
            "Remove access to means of harm if safe to do so",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Crisis team assessment", "Toxicology screen if overdose suspected"],
        "warnings": ["Call 999 if any medication or substance has been taken"],
        "confidence": 0.88,
    },
    "major_trauma": {
        "severity": "immediate",
        "disposition": "Call emergency services now",
        "primary_recommendation": "Call 999 now for major trauma or loss of consciousness.",
        "actions": [
            "Call 999 immediately",
            "Apply firm pressure to any bleeding",
            "Keep the person still if a head or neck injury is possible",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Trauma team assessment", "Imaging as indicated"],
        "warnings": [_EMERGENCY_WARNING],
        "confidence": 0.87,
    },
    "suspected_fracture": {
        "severity": "urgent",
        "disposition": "Urgent treatment centre for X-ray today",
        "primary_recommendation": "Attend an urgent treatment centre today for assessment and X-ray.",
        "actions": [
            "Immobilise the injured limb",
            "Avoid putting weight on it",
            "Take simple analgesia such as paracetamol",
        ],
        "timeframe": "Within 4 hours",
        "follow_up": ["X-ray of the injured area", "Fracture clinic if a break is confirmed"],
        "warnings": ["Go to A&E if the limb becomes cold, pale or numb"],
        "confidence": 0.8,
    },
    "high_fever": {
        "severity": "urgent",
        "disposition": "Same-day clinical assessment",
        "primary_recommendation": "Arrange a same-day GP or urgent care assessment.",
        "actions": [
            "Book a same-day appointment or call NHS 111",
            "Drink plenty of fluids",
            "Take paracetamol to manage fever",
        ],
        "timeframe": "Within 4 hours",
        "follow_up": ["Temperature, pulse and blood pressure check", "Blood tests if unwell"],
        "warnings": ["Call 999 if a non-blanching rash, confusion or breathing difficulty appears"],
        "confidence": 0.78,
    },
    "abdominal_pain": {
        "severity": "urgent",
        "disposition": "Same-day clinical assessment",
        "primary_recommendation": "Arrange a same-day assessment for abdominal pain.",
        "actions": [
            "Book a same-day appointment or call NHS 111",
            "Avoid eating until assessed",
            "Sip clear fluids",
        ],
        "timeframe": "Within 4 hours",
        "follow_up": ["Abdominal examination", "Urine and blood tests"],
        "warnings": ["Go to A&E if pain becomes severe, constant or you vomit blood"],
        "confidence": 0.75,
    },
    "persistent_vomiting": {
        "severity": "urgent",
        "disposition": "Same-day clinical assessment",
        "primary_recommendation": "Arrange a same-day assessment for persistent vomiting.",
        "actions": [
            "Take small frequent sips of oral rehydration solution",
            "Book a same-day appointment or call NHS 111",
        ],
        "timeframe": "Within 6 hours",
        "follow_up": ["Hydration assessment", "Electrolytes if vomiting persists"],
        "warnings": ["Go to A&E if you vomit blood or cannot keep any fluids down for 24 hours"],
        "confidence": 0.74,
    },
    "mild_headache": {
        "severity": "routine",
        "disposition": "Primary care or pharmacy advice",
        "primary_recommendation": (
            "Primary care or pharmacy advice: rest, fluids and simple analgesia are appropriate."
        ),
        "actions": [
            "Rest in a quiet, dark room",
            "Drink plenty of water",
            "Take paracetamol or ibuprofen as directed by a pharmacist",
        ],
        "timeframe": "Within 1-2 weeks if symptoms persist",
        "follow_up": ["Book a GP appointment if headaches recur or last more than a week"],
        "warnings": ["Seek urgent care if headache becomes sudden, severe or comes with a stiff neck"],
        "confidence": 0.85,
    },
    "ankle_sprain": {
        "severity": "routine",
        "disposition": "Self-care with pharmacy advice",
        "primary_recommendation": "Self-care with pharmacy advice for a soft-tissue ankle injury.",
        "actions": [
            "RICE protocol: rest, ice, compression and elevation for 48 hours",
            "Use simple analgesia as advised by a pharmacist",
            "Gradually return to walking as pain allows",
        ],
        "timeframe": "Review if not improving within 1 week",
        "follow_up": ["See a physiotherapist or GP if not improving after 1 week"],
        "warnings": ["Seek urgent care if you become unable to bear weight"],
        "confidence": 0.86,
    },
    "soft_tissue_injury": {
        "severity": "routine",
        "disposition": "Self-care with pharmacy advice",
        "primary_recommendation": "Self-care with pharmacy advice for a minor soft-tissue injury.",
        "actions": [
            "Rest the injured area and apply ice wrapped in a cloth for 20 minutes at a time",
            "Use simple analgesia as advised by a pharmacist",
            "Resume normal movement gradually as pain allows",
        ],
        "timeframe": "Review if not improving within 1-2 weeks",
        "follow_up": ["See a physiotherapist or GP if not improving after 2 weeks"],
        "warnings": ["Seek urgent care if the area becomes deformed, numb or you cannot use it"],
        "confidence": 0.8,
    },
    "common_cold": {
        "severity": "routine",
        "disposition": "Self-care with pharmacy advice",
        "primary_recommendation": "Self-care with pharmacy advice for cold symptoms.",
        "actions": [
            "Rest and drink plenty of fluids",
            "Ask a pharmacist about decongestants or throat lozenges",
        ],
        "timeframe": "Usually improves within 7-10 days",
        "follow_up": ["See a GP if symptoms last more than 3 weeks"],
        "warnings": ["Seek urgent care if breathing becomes difficult"],
        "confidence": 0.88,
    },
    "general_assessment": {
        "severity": "urgent",
        "disposition": "Urgent clinical assessment",
        "primary_recommendation": "Arrange a clinical assessment today to establish the cause.",
        "actions": [
            "Contact your GP practice or NHS 111 today",
            "Write down when symptoms started and any changes",
        ],
        "timeframe": "Within 24 hours",
        "follow_up": ["See healthcare provider within 24 hours"],
        "warnings": ["Go to A&E or call 999 if symptoms suddenly worsen"],
        "confidence": 0.6,
    },
})

FALLBACK_PLANS: Mapping[str, Mapping[str, Any]] = MappingProxyType({
    "immediate": {
        "severity": "immediate",
        "disposition": "Emergency Department immediately",
        "primary_recommendation": "Go to the Emergency Department immediately or call 999.",
        "actions": [
            "Call 999 or attend the nearest Emergency Department",
            "Do not drive yourself",
        ],
        "timeframe": "Immediately",
        "follow_up": ["Emergency assessment on arrival"],
        "warnings": [_EMERGENCY_WARNING],
        "confidence": 0.4,
    },
    "urgent": {
        "severity": "urgent",
        "disposition": "Urgent clinical assessment",
        "primary_recommendation": "Arrange an urgent clinical assessment today.",
        "actions": [
            "Contact your GP practice or NHS 111 today",
            "Return immediately if symptoms worsen significantly",
        ],
        "timeframe": "Within 24 hours",
        "follow_up": ["See healthcare provider within 24 hours"],
        "warnings": ["Call 999 for severe worsening or emergency symptoms"],
        "confidence": 0.4,
    },
    "routine": {
        "severity": "routine",
        "disposition": "Primary care appointment",
        "primary_recommendation": "Book a routine primary care appointment.",
        "actions": [
            "Book an appointment with your GP practice",
            "Ask a pharmacist for advice in the meantime",
        ],
        "timeframe": "Within 2-3 days",
        "follow_up": ["Follow up as clinically indicated"],
        "warnings": ["Seek urgent care if symptoms worsen"],
        "confidence": 0.4,
    },
})


def _materialize(template: Mapping[str, Any]) -> CarePlan:
    # Fresh lists per call so callers can never mutate the authored tables.
    data = {k: (list(v) if isinstance(v, list) else v) for k, v in template.items()}
    return CarePlan(**data)


def authored_plan(band: RiskBand, rule_id: str) -> CarePlan:
    template = AUTHORED_PLANS.get(rule_id)
    if template is None:
        raise UnmappedRuleError(rule_id, component="care_plan")
    if template["severity"] != band:
        raise UnmappedRuleError(
            rule_id,
            component="care_plan",
            details={"band": band, "plan_severity": template["severity"]},
        )
    return _materialize(template)


def fallback_plan(band: RiskBand) -> CarePlan:
    return _materialize(FALLBACK_PLANS[band])


def build_plan(band: RiskBand, rule_id: str) -> CarePlan:
    """Return the plan authored for ``rule_id``, or the band's generic plan."""
    try:
        return authored_plan(band, rule_id)
    except UnmappedRuleError as exc:
        logger.warning(
            "[care_plan] configuration defect: %s; using %s fallback plan",
            exc.message,
            band,
            extra={"details": exc.details},
        )
        return fallback_plan(band)
