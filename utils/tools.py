from typing import Any

from flask import request

from core.errors import ValidationError


def trim_strings(value: Any) -> Any:
	"""Recursively strip whitespace from every string in a JSON-like value."""
	if isinstance(value, str):
		return value.strip()
	if isinstance(value, dict):
		return {k: trim_strings(v) for k, v in value.items()}
	if isinstance(value, list):
		return [trim_strings(v) for v in value]
	return value


def json_body() -> dict:
	"""Trimmed JSON object from the current request; empty body -> {}."""
	if not request.get_data(cache=True):
		return {}
	data = request.get_json(force=True, silent=True)
	if data is None:
		raise ValidationError("Invalid JSON format in request body", "INVALID_JSON")
	if not isinstance(data, dict):
		raise ValidationError("Request body must be a JSON object", "INVALID_JSON")
	return trim_strings(data)


def query_number(name: str, code: str, message: str) -> Any:
	"""Parse an optional numeric query-string parameter.

	Missing or empty -> None; anything float() rejects -> ValidationError(code).
	"""
	raw = request.args.get(name)
	if raw is None or not raw.strip():
		return None
	try:
		return float(raw)
	except ValueError:
		raise ValidationError(message, code)
