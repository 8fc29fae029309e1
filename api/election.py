"""Serverless function exposing the election over JSON."""

import json
import logging
import sys
import threading
from pathlib import Path
from urllib.parse import parse_qs, urlparse

# Add the project root to the path so we can import ballotbox modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from ballotbox.config import build_election, configure_logging, load_config
from ballotbox.errors import AuthorizationError, CandidateRangeError, StateError
from ballotbox.machine import Election

logger = logging.getLogger(__name__)

CALLER_HEADER = "x-caller-identity"
READ_ONLY_ACTIONS = ("role", "candidate")

_election: Election | None = None
_election_lock = threading.Lock()


class RequestError(Exception):
    """Malformed request; reported to the client as HTTP 400."""
    pass


def get_election() -> Election:
    """Return the process-wide election, creating it from config on first use."""
    global _election
    with _election_lock:
        if _election is None:
            config = load_config()
            configure_logging(config.log_level)
            _election = build_election(config)
            logger.info("Election created with administrator %s", config.administrator)
        return _election


def handler(request):
    """Handle incoming election requests.

    Accepts:
    - GET: election snapshot; ?candidate_id=N for one candidate; ?identity=X for a role
    - POST with JSON body {"action": ..., ...} where action is one of
      start, end, register_candidate, register_voter, vote, role, candidate

    The caller identity is read from the X-Caller-Identity header; the
    read-only role and candidate actions do not need one.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type, X-Caller-Identity",
            },
        )

    if request.method not in ("GET", "POST"):
        return create_response(
            {"error": "Method not allowed. Use GET or POST."},
            status=405,
        )

    try:
        election = get_election()
        if request.method == "GET":
            query = parse_qs(urlparse(getattr(request, "path", "") or "").query)
            result = handle_query(election, {k: v[0] for k, v in query.items()})
        else:
            body = request.body.decode("utf-8") if request.body else ""
            data = json.loads(body or "{}")
            if not isinstance(data, dict):
                raise RequestError("Request body must be a JSON object")
            # read-only actions are open to anonymous callers
            caller = None if data.get("action") in READ_ONLY_ACTIONS else get_caller(request)
            result = handle_action(election, caller, data)

        return create_response(result)

    except AuthorizationError as e:
        logger.warning("Rejected (forbidden): %s", e)
        return create_response({"error": str(e)}, status=403)
    except StateError as e:
        logger.warning("Rejected (conflict): %s", e)
        return create_response({"error": str(e)}, status=409)
    except CandidateRangeError as e:
        return create_response({"error": str(e)}, status=404)
    except RequestError as e:
        return create_response({"error": str(e)}, status=400)
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        logger.exception("Unhandled error in election handler")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def get_caller(request) -> str:
    """Read the caller identity from the request headers."""
    headers = {k.lower(): v for k, v in request.headers.items()}
    caller = headers.get(CALLER_HEADER, "").strip()
    if not caller:
        raise RequestError("Missing X-Caller-Identity header")
    return caller


def handle_query(election: Election, params: dict[str, str]) -> dict:
    if "candidate_id" in params:
        return candidate_body(election, parse_candidate_id(params["candidate_id"]))
    if "identity" in params:
        return role_body(election, params["identity"])
    return election.to_dict()


def handle_action(election: Election, caller: str | None, data: dict) -> dict:
    """Dispatch a POSTed action to the election with an explicit caller."""
    action = data.get("action")

    if action == "start":
        election.start_election(caller)
    elif action == "end":
        election.end_election(caller)
    elif action == "register_candidate":
        name = require_field(data, "name")
        if not isinstance(name, str):
            raise RequestError("'name' must be a string")
        return {"candidate": election.register_candidate(caller, name).to_dict()}
    elif action == "register_voter":
        election.register_voter(caller, require_identity(data))
    elif action == "vote":
        candidate_id = parse_candidate_id(require_field(data, "candidate_id"))
        election.cast_vote(caller, candidate_id)
        return {"voted": True, "candidate_id": candidate_id}
    elif action == "role":
        return role_body(election, require_identity(data))
    elif action == "candidate":
        return candidate_body(election, parse_candidate_id(require_field(data, "candidate_id")))
    else:
        raise RequestError(f"Unknown action: {action!r}")

    return {"phase": election.phase.value}


def require_field(data: dict, key: str):
    if key not in data:
        raise RequestError(f"Missing {key!r} in request body")
    return data[key]


def require_identity(data: dict) -> str:
    """Return the "identity" field, which must be a non-blank string."""
    identity = require_field(data, "identity")
    if not isinstance(identity, str) or not identity.strip():
        raise RequestError("'identity' must be a non-empty string")
    return identity


def parse_candidate_id(value) -> int:
    if isinstance(value, (bool, float)):
        raise RequestError(f"Invalid candidate_id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise RequestError(f"Invalid candidate_id: {value!r}")


def candidate_body(election: Election, candidate_id: int) -> dict:
    name, vote_count = election.get_candidate(candidate_id)
    return {"id": candidate_id, "name": name, "vote_count": vote_count}


def role_body(election: Election, identity: str) -> dict:
    return {"identity": identity, "role": election.resolve_role(identity).value}


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
