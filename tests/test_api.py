"""Tests for the election API handler."""

import json
from unittest.mock import MagicMock

import pytest
from tests.conftest import ADMIN, make_election

from api import election as election_api
from ballotbox.config import ADMINISTRATOR_ENV_VAR, CONFIG_ENV_VAR
from ballotbox.machine import Election


def make_request(method="POST", body=None, caller=None, path="/api/election"):
    request = MagicMock()
    request.method = method
    request.path = path
    request.headers = {"content-type": "application/json"}
    if caller is not None:
        request.headers["X-Caller-Identity"] = caller
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    request.body = body.encode("utf-8") if body is not None else b""
    return request


def call(request):
    response = election_api.handler(request)
    body = json.loads(response["body"]) if response["body"] else None
    return response["statusCode"], body


@pytest.fixture
def election(monkeypatch):
    instance = make_election(voters=["V1", "V2"])
    monkeypatch.setattr(election_api, "_election", instance)
    return instance


class TestHandlerBasics:
    def test_options(self, election):
        response = election_api.handler(make_request("OPTIONS"))
        assert response["statusCode"] == 204
        assert "X-Caller-Identity" in response["headers"]["Access-Control-Allow-Headers"]

    def test_method_not_allowed(self, election):
        status, body = call(make_request("DELETE"))
        assert status == 405

    def test_snapshot(self, election):
        status, body = call(make_request("GET"))
        assert status == 200
        assert body["phase"] == "not_started"
        assert body["candidates_count"] == 2
        assert body["eligible_voters_count"] == 2

    def test_get_candidate(self, election):
        status, body = call(make_request("GET", path="/api/election?candidate_id=1"))
        assert (status, body) == (200, {"id": 1, "name": "Candidate 2", "vote_count": 0})

    def test_get_role(self, election):
        status, body = call(make_request("GET", path="/api/election?identity=V1"))
        assert body == {"identity": "V1", "role": "authorized_voter"}

    def test_missing_caller(self, election):
        status, body = call(make_request(body={"action": "start"}))
        assert status == 400
        assert "X-Caller-Identity" in body["error"]
        assert election.phase.value == "not_started"

    def test_invalid_json(self, election):
        status, body = call(make_request(body="{nope", caller=ADMIN))
        assert status == 400
        assert "Invalid JSON" in body["error"]

    def test_body_must_be_object(self, election):
        status, _ = call(make_request(body=["start"], caller=ADMIN))
        assert status == 400

    def test_unknown_action(self, election):
        status, body = call(make_request(body={"action": "rig"}, caller=ADMIN))
        assert status == 400
        assert "Unknown action" in body["error"]


class TestActions:
    def test_full_election(self, election):
        assert call(make_request(body={"action": "start"}, caller=ADMIN)) == (200, {"phase": "in_progress"})
        assert call(make_request(body={"action": "vote", "candidate_id": 0}, caller="V1"))[0] == 200
        assert call(make_request(body={"action": "vote", "candidate_id": "1"}, caller="V2"))[0] == 200
        assert call(make_request(body={"action": "end"}, caller=ADMIN)) == (200, {"phase": "ended"})
        assert election.tallies() == [("Candidate 1", 1), ("Candidate 2", 1)]

    def test_register_candidate(self, election):
        status, body = call(make_request(body={"action": "register_candidate", "name": "Carol"}, caller=ADMIN))
        assert (status, body) == (200, {"candidate": {"id": 2, "name": "Carol", "vote_count": 0}})

    def test_register_voter(self, election):
        status, _ = call(make_request(body={"action": "register_voter", "identity": "V3"}, caller=ADMIN))
        assert status == 200
        assert election.is_eligible("V3")

    def test_missing_field(self, election):
        status, body = call(make_request(body={"action": "register_voter"}, caller=ADMIN))
        assert status == 400
        assert "identity" in body["error"]

    def test_role_and_candidate_actions(self, election):
        assert call(make_request(body={"action": "role", "identity": ADMIN}, caller="anyone"))[1]["role"] == "administrator"
        assert call(make_request(body={"action": "candidate", "candidate_id": 0}, caller="anyone"))[1]["name"] == "Candidate 1"

    def test_read_only_actions_need_no_caller(self, election):
        status, body = call(make_request(body={"action": "role", "identity": "V1"}))
        assert (status, body) == (200, {"identity": "V1", "role": "authorized_voter"})
        status, body = call(make_request(body={"action": "candidate", "candidate_id": 1}))
        assert (status, body) == (200, {"id": 1, "name": "Candidate 2", "vote_count": 0})

    def test_mutating_actions_still_need_caller(self, election):
        status, _ = call(make_request(body={"action": "register_voter", "identity": "V3"}))
        assert status == 400
        assert not election.is_eligible("V3")


class TestErrorMapping:
    def test_not_administrator_is_forbidden(self, election):
        status, body = call(make_request(body={"action": "start"}, caller="V1"))
        assert status == 403
        assert "administrator" in body["error"]

    def test_not_eligible_is_forbidden(self, election):
        election.start_election(ADMIN)
        status, _ = call(make_request(body={"action": "vote", "candidate_id": 0}, caller="V9"))
        assert status == 403

    def test_wrong_phase_is_conflict(self, election):
        status, _ = call(make_request(body={"action": "vote", "candidate_id": 0}, caller="V1"))
        assert status == 409

    def test_double_vote_is_conflict(self, election):
        election.start_election(ADMIN)
        call(make_request(body={"action": "vote", "candidate_id": 0}, caller="V1"))
        status, _ = call(make_request(body={"action": "vote", "candidate_id": 0}, caller="V1"))
        assert status == 409
        assert election.get_candidate(0) == ("Candidate 1", 1)

    def test_duplicate_voter_is_conflict(self, election):
        status, _ = call(make_request(body={"action": "register_voter", "identity": "V1"}, caller=ADMIN))
        assert status == 409

    def test_out_of_range_is_not_found(self, election):
        election.start_election(ADMIN)
        status, _ = call(make_request(body={"action": "vote", "candidate_id": 2}, caller="V1"))
        assert status == 404
        assert not election.has_voted("V1")

    @pytest.mark.parametrize("candidate_id", ["one", 1.5, True, None])
    def test_malformed_candidate_id(self, election, candidate_id):
        election.start_election(ADMIN)
        status, _ = call(make_request(body={"action": "vote", "candidate_id": candidate_id}, caller="V1"))
        assert status == 400

    @pytest.mark.parametrize("identity", [None, "", "   ", {"a": 1}, 7])
    def test_malformed_voter_identity(self, election, identity):
        status, body = call(make_request(body={"action": "register_voter", "identity": identity}, caller=ADMIN))
        assert status == 400
        assert "identity" in body["error"]
        assert election.eligible_voters_count == 2

    @pytest.mark.parametrize("identity", [None, "", {"a": 1}])
    def test_malformed_role_identity(self, election, identity):
        status, _ = call(make_request(body={"action": "role", "identity": identity}))
        assert status == 400

    def test_internal_error(self, election, monkeypatch):
        monkeypatch.setattr(election, "to_dict", MagicMock(side_effect=RuntimeError("boom")))
        status, body = call(make_request("GET"))
        assert status == 500
        assert "boom" in body["error"]


class TestGetElection:
    def test_created_once_from_environment(self, monkeypatch):
        monkeypatch.setattr(election_api, "_election", None)
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.setenv(ADMINISTRATOR_ENV_VAR, "boss")
        first = election_api.get_election()
        assert isinstance(first, Election)
        assert first.administrator == "boss"
        assert election_api.get_election() is first
