from typing import Any, Optional
from fastapi.encoders import jsonable_encoder


def envelope(message: str, data: Any = None, status_code: int = 200, count: Optional[int] = None, **extra) -> dict:
    """Uniform success body: {status_code, message, data, count?}"""
    body = {"status_code": status_code, "message": message, "data": data}
    if count is not None:
        body["count"] = count
    body.update(extra)
    return jsonable_encoder(body)
