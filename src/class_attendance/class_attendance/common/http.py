from __future__ import annotations

from datetime import date
from typing import Any, Optional

from flask import request

from ..core.exceptions import ValidationError
from .time_utils import parse_iso_date


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def date_arg(name: str, *, required: bool = False, source: Optional[dict] = None) -> Optional[date]:
    value: Any = (source if source is not None else request.args).get(name)
    if not value:
        if required:
            raise ValidationError(f"{name} is required", field=name)
        return None
    return parse_iso_date(str(value), field=name)


def flag_arg(name: str, default: bool = False) -> bool:
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes"}
