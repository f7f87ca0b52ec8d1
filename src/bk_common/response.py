"""Response envelope shared by every endpoint.

Success:
    {"code": 0, "message": "Order created successfully", "data": {...},
     "timestamp": "...", "request_id": "req_..."}

Failure (``code`` is the AppError code, ``data.kind`` its category):
    {"code": 2002, "message": "...", "data": {"kind": "ValidationError",
     "minimum_order": "50.00", "shortfall": "10.00"}, ...}
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.bk_common.datetime_utils import utc_now


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return ApiResponse(message=message, data=data)


def error_response(
    code: int, message: str, kind: str, details: dict[str, Any] | None = None
) -> ApiResponse:
    payload: dict[str, Any] = {"kind": kind}
    payload.update(details or {})
    return ApiResponse(code=code, message=message, data=payload)
