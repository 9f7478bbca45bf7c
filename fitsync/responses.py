from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

_MISSING = object()


def ok(data: Any = _MISSING, message: Optional[str] = None) -> dict:
    """Success envelope: {success, data?, message?}."""
    body: dict = {"success": True}
    if data is not _MISSING:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def fail(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body: dict = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
