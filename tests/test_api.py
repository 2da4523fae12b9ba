import asyncio
import json

import api.main as main
from api.schemas import BatchTriageRequest, TriageRequest
from triage.errors import InvalidInputError


def _run(coro):
    return asyncio.run(coro)


def _body(response) -> dict:
    return json.loads(response.body)


def test_triage_endpoint_success():
    response = _run(main.run_triage(TriageRequest(text="Severe chest pain for 20 minutes", patient_key="P001")))
    assert response.status_code == 200
    assert response.headers.get("x-risk-band") == "immediate"
    body = _body(response)
    assert body["risk"]["band"] == "immediate"
    assert body["care_plan"]["disposition"] == "Go to Emergency Department now"
    assert body["patient"]["key"] == "P001"


def test_triage_endpoint_empty_text_is_422():
    response = _run(main.run_triage(TriageRequest(text="   ")))
    assert response.status_code == 422
    assert _body(response)["error"]["code"] == "INVALID_INPUT"


def test_triage_endpoint_missing_text_is_422():
    response = _run(main.run_triage(TriageRequest()))
    assert response.status_code == 422
    assert _body(response)["error"]["details"]["field"] == "text"


def test_triage_endpoint_unexpected_error_propagates(monkeypatch):
    def _boom(*_args, **_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(main, "triage", _boom)
    try:
        _run(main.run_triage(TriageRequest(text="runny nose")))
    except RuntimeError as exc:
        assert str(exc) == "boom"
    else:
        raise AssertionError("Expected RuntimeError")


def test_batch_endpoint():
    payload = BatchTriageRequest(
        batch_id="api-batch",
        requests=[TriageRequest(text="runny nose"), TriageRequest(text="")],
    )
    summary = _run(main.run_triage_batch(payload))
    assert summary["batch_id"] == "api-batch"
    assert summary["succeeded"] == 1
    assert summary["failed"] == 1
    assert summary["results"][0]["data"]["routing"]["priority"] == "batch"


def test_batch_endpoint_empty_is_422():
    response = _run(main.run_triage_batch(BatchTriageRequest(requests=[])))
    assert response.status_code == 422
    assert _body(response)["error"]["details"]["field"] == "requests"


def test_batch_endpoint_rejection_from_engine(monkeypatch):
    def _reject(*_args, **_kwargs):
        raise InvalidInputError("Batch size limited to 1 requests", field="requests")

    monkeypatch.setattr(main, "triage_batch", _reject)
    response = _run(main.run_triage_batch(BatchTriageRequest(requests=[TriageRequest(text="a")])))
    assert response.status_code == 422


def test_patients_endpoint():
    response = _run(main.patients())
    keys = [p.key for p in response.patients]
    assert keys == ["P001", "P002", "P003", "UNREG"]
    response = _run(main.patients(include_unregistered=False))
    assert "UNREG" not in [p.key for p in response.patients]


def test_timeline_endpoint():
    response = _run(main.patient_timeline("p002"))
    assert response.key == "P002"
    assert response.registered is True
    assert response.timeline[-1].note == "Nausea and photophobia reported."

    unknown = _run(main.patient_timeline("nobody"))
    assert unknown.registered is False
    assert unknown.timeline == []


def test_service_info_and_health():
    info = _run(main.triage_info())
    assert "general_assessment" in info["rules"]
    assert info["endpoints"]["triage"] == "POST /api/triage"

    health = _run(main.health())
    assert health["ok"] is True
    assert health["rules"] == len(info["rules"])
    assert health["patients"] == 3
