import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# --- Project-specific API errors ---
# The rest of the error taxonomy maps onto DRF's own exceptions:
# ValidationError (400), NotAuthenticated/AuthenticationFailed (401),
# PermissionDenied (403) and NotFound (404).


class ConflictError(APIException):
    """The request collides with existing data (duplicate name, dependents)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = "conflict"


class InvalidStateError(APIException):
    """A state-machine transition was attempted from the wrong state."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "This action is not allowed in the current state."
    default_code = "invalid_state"


def api_exception_handler(exc, context):
    """
    Wraps DRF's default handler so that every error response carries a
    'detail' and a 'code', and every failure is logged once.
    """
    if isinstance(exc, DjangoValidationError):
        # Raised by model-level validation (full_clean / validators)
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        exc = ValidationError(detail=detail)
    elif isinstance(exc, Http404):
        # get_object_or_404 and friends
        exc = exceptions.NotFound(*exc.args)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(*exc.args)

    response = exception_handler(exc, context)

    view = context.get("view")
    view_name = getattr(view, "__name__", None) or view.__class__.__name__

    if response is None:
        # Unhandled: Django turns this into a 500
        logger.error("Unhandled error in %s", view_name, exc_info=exc)
        return None

    code = getattr(exc, "default_code", "error")
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes

    if isinstance(response.data, dict) and "detail" in response.data:
        response.data.setdefault("code", code)
    else:
        # Field errors from serializers: keep them under 'errors'
        errors = response.data
        detail = "Invalid input."
        if isinstance(errors, list) and errors:
            detail = " ".join(str(error) for error in errors)
        elif isinstance(errors, dict) and errors:
            # First message of the first failing field
            first = next(iter(errors.values()))
            detail = str(first[0] if isinstance(first, list) and first else first)
        response.data = {"detail": detail, "code": code, "errors": errors}

    log = logger.error if response.status_code >= 500 else logger.warning
    log(
        "%s %s -> %s (%s)",
        view_name,
        getattr(context.get("request"), "method", "?"),
        response.status_code,
        response.data.get("detail"),
    )
    return response
