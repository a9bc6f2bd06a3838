"""Envelope helpers shared by routers and exception handlers."""

from typing import Any, Optional

from fastapi.responses import JSONResponse

from app.core.pagination import Page


def ok(data: Any = None) -> dict:
    return {"success": True, "data": data}


def paginated(items: list, total: int, page: Page) -> dict:
    return {"success": True, "data": items, "meta": page.meta(total)}


def error_response(
    status_code: int,
    code: Optional[str],
    message: str,
    details: Any = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    error: dict = {"message": message}
    if code:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error},
        headers=headers,
    )
