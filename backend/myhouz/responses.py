# Overview: JSON envelope shared by every API route.

"""
Response envelope

Success:  {"success": true, "data": ..., "message"?: str, "pagination"?: {...}}
Error:    {"success": false, "message": str, "errors"?: {...}}
"""

from __future__ import annotations

from flask import jsonify

from .errors import DomainError
from .services.pagination import Page


def success_response(data=None, *, message: str | None = None, status: int = 200):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return jsonify(body), status


def page_response(page: Page, serialize=None, *, extra: dict | None = None):
    """Render a Page; `serialize` maps each item to a dict (default: to_dict())."""
    serialize = serialize or (lambda item: item.to_dict())
    body = {
        "success": True,
        "data": [serialize(item) for item in page.items],
        "pagination": page.pagination(),
    }
    if extra:
        body.update(extra)
    return jsonify(body), 200


def error_response(message: str, status: int = 400, *, errors: dict | None = None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def domain_error_response(exc: DomainError):
    return error_response(exc.message, exc.status_code, errors=exc.errors)


def server_error_response():
    return error_response("Internal server error", 500)
