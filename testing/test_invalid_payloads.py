# testing/test_invalid_payloads.py
"""
Test that invalid payloads properly return 400 errors on every endpoint
"""

import pytest
from fastapi.testclient import TestClient

from src.webapp import app
from testing.mock_data import at, job_payload, placement_payload

client = TestClient(app)

GOOD_JOBS = [job_payload("A", start=at(9), hours=2, team=["Maria"])]
GOOD_PLACEMENT = placement_payload("A", at(10), 2, ["Maria"])


@pytest.mark.parametrize("path", ["/conflicts", "/reschedule/preview", "/layout", "/duration/resolve"])
@pytest.mark.parametrize("payload", [{}, [], "just a string", 5])
def test_non_object_payloads_rejected(path, payload):
    response = client.post(path, json=payload)
    assert response.status_code == 400


@pytest.mark.parametrize("path", ["/conflicts", "/reschedule/preview"])
@pytest.mark.parametrize("payload", [
    {"jobs": GOOD_JOBS},                                            # no placement
    {"jobs": "A", "placement": GOOD_PLACEMENT},                     # jobs not a list
    {"jobs": [{"start": "2025-06-02"}], "placement": GOOD_PLACEMENT},  # job without id
    {"jobs": GOOD_JOBS, "placement": {"newStart": "2025-06-02T10:00", "newDurationHours": 2}},
    {"jobs": GOOD_JOBS, "placement": placement_payload("A", None, 2)},
    {"jobs": GOOD_JOBS, "placement": placement_payload("A", at(10), 0)},
    {"jobs": GOOD_JOBS, "placement": {**GOOD_PLACEMENT, "newDurationHours": "two"}},
    {"jobs": GOOD_JOBS, "placement": {**GOOD_PLACEMENT, "newTeam": "Maria"}},
])
def test_invalid_engine_payloads(path, payload):
    response = client.post(path, json=payload)
    assert response.status_code == 400
    assert response.json()["detail"]


@pytest.mark.parametrize("payload", [
    {"originalDurationHours": -2, "originalCrewSize": 1, "newCrewSize": 2},
    {"originalDurationHours": "3", "originalCrewSize": 1, "newCrewSize": 2},
    {"originalDurationHours": 3, "originalCrewSize": "two", "newCrewSize": 2},
    {"originalDurationHours": 3, "originalCrewSize": 1, "newCrewSize": True},
])
def test_invalid_duration_payloads(payload):
    response = client.post("/duration/resolve", json=payload)
    assert response.status_code == 400


def test_valid_payload():
    """Test that valid payloads still work"""
    response = client.post("/reschedule/preview", json={"jobs": GOOD_JOBS, "placement": GOOD_PLACEMENT})
    assert response.status_code == 200
    assert response.json()["primaryChange"]["deltaMinutes"] == 60


# NaN and Infinity literals are accepted by the JSON parser, so these
# bodies are sent as raw text
RAW_JOBS = '[{"id": "A", "start": "2025-06-02T09:00", "durationHours": 2, "team": ["Maria"]}]'


@pytest.mark.parametrize("path,body", [
    ("/reschedule/preview",
     '{"jobs": %s, "placement": {"jobId": "A", "newStart": "2025-06-02T10:00", "newDurationHours": NaN}}' % RAW_JOBS),
    ("/conflicts",
     '{"jobs": %s, "placement": {"jobId": "A", "newStart": "2025-06-02T10:00", "newDurationHours": Infinity}}' % RAW_JOBS),
    ("/conflicts",
     '{"jobs": %s, "placement": {"jobId": "A", "newStart": "2025-06-02T10:00", "newDurationHours": 1e12}}' % RAW_JOBS),
    ("/layout", '{"jobs": [{"id": "A", "start": "2025-06-02T09:00", "durationHours": "nan"}]}'),
    ("/layout", '{"jobs": [{"id": "A", "start": "2025-06-02T09:00", "durationHours": 1e12}]}'),
    ("/duration/resolve", '{"originalDurationHours": NaN, "originalCrewSize": 1, "newCrewSize": 2}'),
    ("/duration/resolve", '{"originalDurationHours": 1e12, "originalCrewSize": 1, "newCrewSize": 2}'),
    ("/duration/resolve", '{"originalDurationHours": 3, "originalCrewSize": NaN, "newCrewSize": 2}'),
    ("/duration/resolve", '{"originalDurationHours": 3, "originalCrewSize": 1, "newCrewSize": Infinity}'),
])
def test_non_finite_and_oversized_numbers_rejected(path, body):
    response = client.post(path, content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 400


@pytest.mark.parametrize("auto_adjust", ["false", "true", 0, None])
def test_auto_adjust_must_be_a_json_boolean(auto_adjust):
    response = client.post("/duration/resolve", json={
        "originalDurationHours": 3, "originalCrewSize": 2, "newCrewSize": 3, "autoAdjust": auto_adjust,
    })
    assert response.status_code == 400
