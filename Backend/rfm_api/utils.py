from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from typing import Any, Optional

def success_resp(message: str, data: Any = None, status_code: int = 200):
    """
    Standardized Success Response
    """
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": True,
            "message": message,
            "data": data
        })
    )

def error_resp(message: str, status_code: int = 500, error: Optional[str] = None):
    """
    Standardized Error Response. ``error`` carries a machine-readable code
    (e.g. "DUPLICATE_EMAIL") for clients that branch on it.
    """
    content = {
        "success": False,
        "message": message,
        "data": None
    }
    if error:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))
