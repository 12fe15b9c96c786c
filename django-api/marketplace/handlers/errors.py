"""Mapping of domain errors onto HTTP responses.

Installed as REST_FRAMEWORK["EXCEPTION_HANDLER"], so every view shares one
error body shape: ``{"error": message, "code": code, "details": ...}``.
"""

from typing import Any

from loguru import logger
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from marketplace.domain.errors import (
    DomainError,
    ErrorCode,
    InsufficientInventoryError,
    InvalidQuantityError,
    ValidationError,
)

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TIER_NOT_SELECTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TIER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_EVENT: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_409_CONFLICT,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _details(exc: DomainError) -> Any:
    if isinstance(exc, ValidationError):
        return [{"field": e.field, "message": e.message} for e in exc.errors]
    if isinstance(exc, InsufficientInventoryError):
        return {"requested": exc.requested, "available": exc.available}
    if isinstance(exc, InvalidQuantityError):
        return {"quantity": exc.quantity, "available": exc.available}
    return None


def domain_response(exc: DomainError) -> Response:
    body: dict[str, Any] = {"error": exc.message, "code": exc.code.value}
    details = _details(exc)
    if details is not None:
        body["details"] = details
    return Response(body, status=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST))


def domain_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    if isinstance(exc, DomainError):
        if exc.code == ErrorCode.STORE_UNAVAILABLE:
            logger.error(f"Store unavailable: {exc}")
        else:
            logger.info(f"Request rejected: {exc}")
        return domain_response(exc)

    response = exception_handler(exc, context)
    if response is not None:
        # Framework errors (405, malformed JSON) keep their status but use our body shape.
        detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
        response.data = {"error": str(detail)}
        return response

    logger.exception(f"Unhandled exception: {exc}")
    return Response(
        {"error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
