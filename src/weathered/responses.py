"""Turn HTTP status + JSON body into a success model or an ErrorResponse."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import ResponseDecodeError
from .models import ErrorResponse

ModelT = TypeVar("ModelT", bound=BaseModel)


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def decode_json_body(response: httpx.Response, *, url: str | None = None) -> Any:
    """Parse the response body as JSON, raising ResponseDecodeError otherwise."""
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseDecodeError(
            f"Response with status {response.status_code} was not valid JSON.",
            url=url,
            status_code=response.status_code,
        ) from exc


def normalize_response(
    status_code: int,
    body: Any,
    model: type[ModelT],
    *,
    url: str | None = None,
) -> ModelT | ErrorResponse:
    """Validate a 2xx body into ``model``; map anything else to ErrorResponse."""
    if not is_success(status_code):
        return build_error_response(status_code, body)
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise ResponseDecodeError(
            f"Response body did not match {model.__name__}: {exc.error_count()} error(s).",
            url=url,
            status_code=status_code,
        ) from exc


def build_error_response(status_code: int, body: Any = None) -> ErrorResponse:
    """Build an ErrorResponse from a problem-details body, filling gaps from the status."""
    fields: dict[str, Any] = body if isinstance(body, dict) else {}

    status = fields.get("status")
    if not isinstance(status, int) or isinstance(status, bool):
        status = status_code

    title = fields.get("title")
    if not isinstance(title, str) or not title.strip():
        title = _reason_phrase(status_code)

    detail = fields.get("detail")
    if not isinstance(detail, str) or not detail.strip():
        detail = f"Request failed with status {status_code}."

    extras = {
        key: fields[key]
        for key in ("type", "instance", "correlationId")
        if isinstance(fields.get(key), str)
    }
    return ErrorResponse(status=status, title=title, detail=detail, **extras)


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP Error"
