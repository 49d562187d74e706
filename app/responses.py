"""
Response envelopes shared by every admin API route.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(data: Any = None, message: str = "Success") -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": jsonable_encoder(data),
        "timestamp": _timestamp(),
    }


def error_response(message: str, code: int = 400, details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "success": False,
            "error": {
                "message": message,
                "code": code,
                "details": jsonable_encoder(details or {}),
            },
            "timestamp": _timestamp(),
        },
    )
