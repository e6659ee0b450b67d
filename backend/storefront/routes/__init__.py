from flask import request
from werkzeug.routing import IntegerConverter

from ..errors import ValidationError
from ..validation import MAX_INT


class IdConverter(IntegerConverter):
    """<int:...> bounded to the INTEGER column range; larger ids do not match (404)."""

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault("max", MAX_INT)
        super().__init__(map, *args, **kwargs)


def json_body() -> dict:
    """Request JSON as a dict; a missing body is an empty dict."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload
