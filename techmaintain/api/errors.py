from collections.abc import Sequence
from typing import Protocol

from fastapi import HTTPException


class ServiceError(Protocol):
    code: str
    message: str


def _detail(errors: Sequence[ServiceError]) -> list[dict[str, str | None]]:
    return [
        {"code": err.code, "message": err.message, "field": getattr(err, "field", None)}
        for err in errors
    ]


def raise_for_errors(errors: Sequence[ServiceError], not_found: str = "Not found") -> None:
    """
    Map service validation errors to HTTP errors.

    404 for missing items, 403 for refused permissions, else 400.
    """
    if not errors:
        return
    if any(err.code.endswith("_not_found") for err in errors):
        raise HTTPException(status_code=404, detail=not_found)
    if any(err.code.endswith("_forbidden") for err in errors):
        raise HTTPException(status_code=403, detail=_detail(errors))
    raise HTTPException(status_code=400, detail=_detail(errors))
