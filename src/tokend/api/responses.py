"""Helpers shared by the lookup routes."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from typing import Any

from fastapi.responses import JSONResponse

from ..exceptions import FetchError
from ..leases.storage import LeaseLookup

CORRELATION_HEADER = "X-Correlation-Id"


def lease_response(result: LeaseLookup, content: Any | None = None) -> JSONResponse:
    """Serialize lookup data, moving the correlation id into a header."""

    body = result.data if content is None else content
    return JSONResponse(content=body, headers={CORRELATION_HEADER: result.correlation_id})


def decode_plaintext(data: Any, field: str = "plaintext") -> Any:
    """Return ``data`` with its base64 ``field`` decoded to text."""

    if not isinstance(data, Mapping) or field not in data:
        return data
    decoded = dict(data)
    try:
        decoded[field] = base64.b64decode(str(data[field])).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise FetchError(f"Unable to decode {field}") from exc
    return decoded


__all__ = ["CORRELATION_HEADER", "decode_plaintext", "lease_response"]
