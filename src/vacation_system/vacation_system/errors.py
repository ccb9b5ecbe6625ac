from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .core.exceptions import (
    AuthorizationError,
    Busy,
    CommentRequired,
    DomainError,
    InsufficientBalance,
    InvalidRange,
    InvalidTransition,
    NotFound,
    PolicyInUse,
    ValidationError,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

BUSY_RETRY_AFTER_SECONDS = 1

# Most specific first; the first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (NotFound, 404),
    (ValidationFailed, 422),
    (InvalidRange, 400),
    (CommentRequired, 400),
    (ValidationError, 400),
    (InsufficientBalance, 409),
    (InvalidTransition, 409),
    (PolicyInUse, 409),
    (AuthorizationError, 403),
    (Busy, 503),
)


def status_for(err: DomainError) -> int:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(err, kind):
            return status
    return 400


def _payload(err: DomainError) -> dict:
    body = {"error": type(err).__name__, "message": str(err), "retryable": err.retryable}
    if isinstance(err, ValidationFailed):
        body["errors"] = list(err.errors)
    elif isinstance(err, InsufficientBalance):
        body["requested"] = float(err.requested)
        body["available"] = float(err.available)
    elif isinstance(err, InvalidTransition):
        body["current"] = getattr(err.current, "value", err.current)
        body["attempted"] = getattr(err.attempted, "value", err.attempted)
    elif isinstance(err, NotFound):
        body["entity"] = err.entity_kind
        body["key"] = str(err.key)
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(err: DomainError):
        status = status_for(err)
        if status >= 500:
            logger.warning("%s: %s", type(err).__name__, err)
        response = jsonify(_payload(err))
        response.status_code = status
        if isinstance(err, Busy):
            response.headers["Retry-After"] = str(BUSY_RETRY_AFTER_SECONDS)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(err: HTTPException):
        return jsonify(error=err.name, message=err.description), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        logger.exception("unhandled error")
        return jsonify(error="InternalError", message="Internal server error"), 500
