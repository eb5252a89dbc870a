"""
Domain errors and the DRF exception handler.

Every error leaving the API has the shape
``{"ok": false, "error": {"code": ..., "message": ...}}``; some carry
extra keys (validation details, the current slot collection on a
version conflict).
"""
import structlog
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class SlotConflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A slot with the same date and time already exists.'
    default_code = 'slot_conflict'


class SlotBooked(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Booked slots cannot be changed or removed.'
    default_code = 'slot_booked'


class VersionConflict(exceptions.APIException):
    """The caller wrote against a stale version.

    ``current`` is echoed to the client so it can rebase without an
    extra round trip.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The slot collection was modified by another request.'
    default_code = 'version_conflict'

    def __init__(self, detail=None, code=None, current=None):
        super().__init__(detail, code)
        self.current = current


class VersionRequired(exceptions.APIException):
    status_code = status.HTTP_428_PRECONDITION_REQUIRED
    default_detail = 'A collection version is required for a full replace.'
    default_code = 'version_required'


class ProfessionalNotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Professional profile not found.'
    default_code = 'professional_not_found'


class SlotNotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Slot not found.'
    default_code = 'slot_not_found'


class SlotExpired(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This slot has already passed.'
    default_code = 'slot_expired'


class InvalidState(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The operation is not allowed in the current state.'
    default_code = 'invalid_state'


class BookingStateError(InvalidState):
    default_detail = 'The booking does not allow this operation in its current state.'


_STATUS_CODES = {
    400: 'bad_request',
    401: 'not_authenticated',
    403: 'permission_denied',
    404: 'not_found',
    405: 'method_not_allowed',
    409: 'conflict',
    428: 'precondition_required',
    429: 'throttled',
}


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled_error', view=getattr(view, '__name__', type(view).__name__))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}}, status=500)

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            {'ok': False, 'error': {'code': 'validation_error', 'message': 'Invalid input.', 'fields': resp.data}},
            status=resp.status_code,
        )

    # normalize response
    if isinstance(resp.data, dict) and 'detail' in resp.data:
        message = resp.data['detail']
    else:
        message = resp.data
    code = getattr(exc, 'default_code', None)
    if code in (None, 'error', 'invalid'):
        code = _STATUS_CODES.get(resp.status_code, 'api_error')
    if isinstance(exc, exceptions.APIException):
        codes = exc.get_codes()
        if isinstance(codes, str) and codes not in ('error', 'invalid'):
            code = codes

    body = {'ok': False, 'error': {'code': code, 'message': str(message)}}
    if isinstance(exc, VersionConflict) and exc.current is not None:
        body['current'] = exc.current
    return Response(body, status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp):
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
