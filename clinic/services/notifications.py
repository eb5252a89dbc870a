from typing import Iterable, Optional

import structlog

from clinic.models import Booking, Notification, User

logger = structlog.get_logger(__name__)


def notify(user: User, type: str, title: str, message: str, *, booking: Optional[Booking] = None) -> Notification:
    n = Notification.objects.create(user=user, type=type, title=title, message=message, booking=booking)
    logger.debug('notification_created', user_id=user.id, type=type, notification_id=n.id)
    return n


def notify_admins(type: str, title: str, message: str, *, booking: Optional[Booking] = None) -> int:
    admins = User.objects.filter(role=User.ROLE_ADMIN, is_active=True)
    Notification.objects.bulk_create([
        Notification(user=a, type=type, title=title, message=message, booking=booking) for a in admins
    ])
    return len(admins)


def notification_payload(n: Notification) -> dict:
    return {
        'id': n.id,
        'type': n.type,
        'title': n.title,
        'message': n.message,
        'bookingId': n.booking_id,
        'isRead': n.is_read,
        'createdAt': n.created_at.isoformat(),
    }


def list_for(user: User, *, unread_only: bool = False, limit: int = 50) -> list[dict]:
    qs = Notification.objects.filter(user=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    return [notification_payload(n) for n in qs.order_by('-created_at', '-id')[:limit]]


def unread_count(user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


def mark_read(user: User, notification_ids: Optional[Iterable[int]] = None) -> int:
    qs = Notification.objects.filter(user=user, is_read=False)
    if notification_ids is not None:
        qs = qs.filter(pk__in=list(notification_ids))
    return qs.update(is_read=True)


def delete_for(user: User, notification_ids: Optional[Iterable[int]] = None) -> int:
    qs = Notification.objects.filter(user=user)
    if notification_ids is not None:
        qs = qs.filter(pk__in=list(notification_ids))
    deleted, _ = qs.delete()
    return deleted
