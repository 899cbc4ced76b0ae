"""Response helper utilities for consistent API envelopes.

All API endpoints return one of two shapes:
{
    "success": true,
    "message": "<human readable>",
    "data": <payload or null>
}
{
    "success": false,
    "message": "<human readable>",
    "code": "<STABLE_CODE>"
}
"""
from __future__ import annotations

from flask import jsonify
from typing import Any


def json_success(message: str, data: Any = None, *, status: int = 200):
    payload = {
        "success": True,
        "message": message,
        "data": data,
    }
    return jsonify(payload), status


def json_created(message: str, data: Any = None):
    return json_success(message, data, status=201)


def json_error(message: str, *, code: str = "BAD_REQUEST", status: int = 400, details: Any | None = None):
    payload = {
        "success": False,
        "message": message,
        "code": code,
    }
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


__all__ = ["json_success", "json_created", "json_error"]
