from collections import defaultdict
from typing import Optional

import structlog
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.exceptions import InvalidState
from clinic.models import Booking, Professional, User
from clinic.services.audit import log_action
from clinic.services.notifications import notify
from clinic.services.slots import invalidate_listing

logger = structlog.get_logger(__name__)


def user_payload(u: User) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'name': u.display_name,
        'email': u.email,
        'phone': u.phone,
        'role': u.role,
        'isSuspended': u.is_suspended,
        'suspendedAt': u.suspended_at.isoformat() if u.suspended_at else None,
        'suspensionReason': u.suspension_reason,
        'dateJoined': u.date_joined.isoformat(),
    }


def list_users(*, role: Optional[str] = None, q: Optional[str] = None, page: int = 1, page_size: int = 50):
    qs = User.objects.all().order_by('-date_joined', '-id')
    if role:
        qs = qs.filter(role=role)
    if q:
        qs = qs.filter(Q(username__icontains=q) | Q(email__icontains=q) | Q(first_name__icontains=q) | Q(last_name__icontains=q))
    total = qs.count()
    start = (page - 1) * page_size
    return [user_payload(u) for u in qs[start:start + page_size]], total


def _get_user(user_id: int) -> User:
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound('User not found')


@transaction.atomic
def suspend(user_id: int, admin: User, reason: str) -> User:
    user = _get_user(user_id)
    if user.role == User.ROLE_ADMIN:
        raise PermissionDenied('Cannot suspend admin users')
    if user.is_suspended:
        raise InvalidState('User is already suspended')
    user.is_suspended = True
    user.suspended_at = timezone.now()
    user.suspension_reason = reason
    user.save(update_fields=['is_suspended', 'suspended_at', 'suspension_reason'])
    log_action(user=admin, action='user_suspended', object_type='user', object_id=user.id, detail={'reason': reason})
    logger.info('user_suspended', user_id=user.id, admin_id=admin.id)
    return user


@transaction.atomic
def unsuspend(user_id: int, admin: User) -> User:
    user = _get_user(user_id)
    if not user.is_suspended:
        raise InvalidState('User is not suspended')
    user.is_suspended = False
    user.suspended_at = None
    user.suspension_reason = ''
    user.save(update_fields=['is_suspended', 'suspended_at', 'suspension_reason'])
    log_action(user=admin, action='user_unsuspended', object_type='user', object_id=user.id)
    return user


@transaction.atomic
def create_professional(admin: User, user_id: int, kind: str, data: dict) -> Professional:
    """Bind a professional profile to an existing account and set its role."""
    user = _get_user(user_id)
    if user.role == User.ROLE_ADMIN:
        raise InvalidState('Administrators cannot hold a professional profile')
    if Professional.objects.filter(user=user).exists():
        raise InvalidState('User already has a professional profile')
    professional = Professional(user=user, kind=kind)
    for attr, value in data.items():
        setattr(professional, attr, value)
    professional.save()
    user.role = kind
    user.save(update_fields=['role'])
    invalidate_listing(kind)
    log_action(user=admin, action='professional_created', object_type='professional', object_id=professional.id,
               detail={'user_id': user.id, 'kind': kind})
    return professional


@transaction.atomic
def delete_professional(admin: User, professional_id: int) -> None:
    professional = Professional.objects.select_related('user').filter(pk=professional_id).first()
    if professional is None:
        raise NotFound('Professional not found')
    if professional.bookings.filter(status__in=Booking.ACTIVE_STATUSES).exists():
        raise InvalidState('Professional has active bookings')
    user = professional.user
    kind = professional.kind
    professional.delete()
    user.role = User.ROLE_PATIENT
    user.save(update_fields=['role'])
    invalidate_listing(kind)
    log_action(user=admin, action='professional_deleted', object_type='professional', object_id=professional_id,
               detail={'user_id': user.id, 'kind': kind})


@transaction.atomic
def mark_payouts_done(admin: User, booking_ids: list[int]) -> int:
    """Mark the professional share of completed bookings as paid out."""
    bookings = list(
        Booking.objects.select_for_update(of=('self',)).select_related('professional__user')
        .filter(pk__in=booking_ids, status=Booking.STATUS_COMPLETED, professional_paid=False)
    )
    per_professional = defaultdict(lambda: {'amount': 0, 'count': 0})
    for b in bookings:
        entry = per_professional[b.professional]
        entry['amount'] += b.professional_share
        entry['count'] += 1
    Booking.objects.filter(pk__in=[b.id for b in bookings]).update(professional_paid=True)

    for professional, entry in per_professional.items():
        notify(professional.user, 'payment_approved', 'Payment Processed',
               f"Payment of {entry['amount']} for {entry['count']} session(s) has been processed.")
    log_action(user=admin, action='payouts_marked', object_type='booking',
               detail={'booking_ids': [b.id for b in bookings]})
    return len(bookings)
