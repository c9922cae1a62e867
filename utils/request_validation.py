"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    required_keys: Iterable[str] | None = None,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    if required_keys:
        missing = [key for key in required_keys if data.get(key) in (None, "")]
        if missing:
            raise BadRequest(
                "Missing required fields: {}.".format(
                    ", ".join(sorted(missing))
                )
            )

    return data


def parse_optional_json(req: Request) -> dict:
    """Return the JSON object body, or an empty dict when there is none."""

    if not req.content_length:
        return {}
    return parse_json_request(req, allow_empty=True)


def parse_bool(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    return None


def parse_int(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise BadRequest(f"{field} must be an integer.")
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise BadRequest(f"{field} must be an integer.") from None


def parse_datetime(value: object, field: str) -> datetime:
    """Parse an ISO 8601 value into a naive UTC datetime."""

    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"{field} must be an ISO 8601 date.")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise BadRequest(f"{field} must be an ISO 8601 date.") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def query_int(req: Request, *names: str) -> int:
    """Read a required integer query parameter, accepting several spellings."""

    for name in names:
        raw = req.args.get(name)
        if raw:
            return parse_int(raw, names[0])
    raise BadRequest(f"Missing {names[0]}.")
