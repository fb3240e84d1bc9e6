import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BusinessRuleViolation(exceptions.APIException):
    """A well-formed request that breaks a domain rule. Carries machine-readable ``data``."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request violates a business rule."
    default_code = "business_rule"

    def __init__(self, detail=None, *, data=None):
        super().__init__(detail)
        self.data = data


class ScheduleConflict(BusinessRuleViolation):
    default_detail = "The teacher already has a session at that time."
    default_code = "schedule_conflict"


class DependentRowsExist(BusinessRuleViolation):
    default_detail = "Dependent records exist; pass force=true to delete them too."
    default_code = "dependent_rows"


def _first_message(detail):
    if isinstance(detail, list):
        return _first_message(detail[0]) if detail else ""
    if isinstance(detail, dict):
        if not detail:
            return ""
        key, value = next(iter(detail.items()))
        message = _first_message(value)
        if key in ("non_field_errors", "detail"):
            return message
        return f"{key}: {message}"
    return str(detail)


def envelope_exception_handler(exc, context):
    """
    Render every error as ``{code, message, data}`` with the HTTP status
    mirrored in ``code``.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or "Not found.")
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}", exc_info=exc)
        return Response(
            {"code": 500, "message": "Internal server error.", "data": None},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data = None
    if isinstance(exc, BusinessRuleViolation):
        message = str(exc.detail)
        data = exc.data
    elif isinstance(exc, exceptions.ValidationError):
        message = _first_message(exc.detail) or "Invalid input."
        data = exc.detail
    else:
        message = _first_message(getattr(exc, "detail", "")) or response.status_text

    response.data = {"code": response.status_code, "message": message, "data": data}
    return response


class InvalidCredentials(exceptions.APIException):
    """Wrong login name or password. Not an AuthenticationFailed, so it stays 401 on open endpoints."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid username or password."
    default_code = "invalid_credentials"
