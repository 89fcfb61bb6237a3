"""Immutable snapshot of the inbound request consumed by the CRUD pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
import json
from types import MappingProxyType
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError


@dataclass(frozen=True)
class RequestData:
    """Path params, query params, headers and decoded JSON body of one request."""

    path_params: Mapping[str, Any] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None


async def get_request_data(request: Request) -> RequestData:
    """Read the request once so synchronous handlers can validate it."""
    raw_body = await request.body()
    body: Any = None
    if raw_body:
        try:
            body = json.loads(raw_body)
        except ValueError as exc:
            raise RequestValidationError(
                [{"loc": ("body",), "msg": "Malformed JSON body", "type": "json_invalid"}]
            ) from exc

    return RequestData(
        path_params=MappingProxyType(dict(request.path_params)),
        query_params=MappingProxyType(dict(request.query_params)),
        # Header names are lower-cased so lookups are case-insensitive.
        headers=MappingProxyType({key.lower(): value for key, value in request.headers.items()}),
        body=body,
    )
