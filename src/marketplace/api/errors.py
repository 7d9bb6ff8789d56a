"""HTTP mapping for marketplace errors.

Protean's handlers cover its base exceptions; the marketplace subclasses
are registered on top so Starlette picks the most specific one.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.shared.errors import (
    ConflictError,
    CouponRejected,
    PartialApplicationError,
    PermissionDenied,
)


async def _coupon_rejected(request: Request, exc: CouponRejected) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages, "reason": exc.reason})


async def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.messages})


async def _permission_denied(request: Request, exc: PermissionDenied) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": exc.messages})


async def _partial_application(request: Request, exc: PartialApplicationError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.messages, "partial": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(CouponRejected, _coupon_rejected)
    app.add_exception_handler(ConflictError, _conflict)
    app.add_exception_handler(PermissionDenied, _permission_denied)
    app.add_exception_handler(PartialApplicationError, _partial_application)
