from typing import Optional

import structlog
from django.db import transaction
from django.db.models import Case, Count, IntegerField, Q, Value, When
from django.db.models.functions import TruncMonth
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from clinic.exceptions import InvalidState
from clinic.models import Booking, Complaint, ComplaintNote, Professional, User
from clinic.services.audit import log_action
from clinic.services.notifications import notify, notify_admins

logger = structlog.get_logger(__name__)

PRIORITY_RANK = {'urgent': 4, 'high': 3, 'medium': 2, 'low': 1}


def complaint_payload(c: Complaint, *, include_notes: bool = False) -> dict:
    data = {
        'id': c.id,
        'userId': c.user_id,
        'userName': c.user.display_name,
        'title': c.title,
        'description': c.description,
        'category': c.category,
        'priority': c.priority,
        'status': c.status,
        'attachments': c.attachments,
        'tags': c.tags,
        'relatedBookingId': c.related_booking_id,
        'relatedProfessionalId': c.related_professional_id,
        'assignedTo': c.assigned_to_id,
        'adminResponse': {
            'message': c.admin_response,
            'respondedBy': c.responded_by_id,
            'respondedAt': c.responded_at.isoformat() if c.responded_at else None,
        } if c.admin_response else None,
        'resolution': {
            'message': c.resolution_message,
            'resolvedBy': c.resolved_by_id,
            'resolvedAt': c.resolved_at.isoformat() if c.resolved_at else None,
            'satisfactionRating': c.satisfaction_rating,
        } if (c.resolved_at or c.satisfaction_rating) else None,
        'createdAt': c.created_at.isoformat(),
        'updatedAt': c.updated_at.isoformat(),
    }
    if include_notes:
        data['internalNotes'] = [
            {'note': n.note, 'addedBy': n.added_by_id, 'addedAt': n.added_at.isoformat()}
            for n in c.internal_notes.order_by('added_at', 'id')
        ]
    return data


def _get(complaint_id: int, *, lock: bool = False) -> Complaint:
    qs = Complaint.objects.select_related('user')
    if lock:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.get(pk=complaint_id)
    except Complaint.DoesNotExist:
        raise NotFound('Complaint not found')


def _is_admin(user: User) -> bool:
    return getattr(user, 'role', None) == User.ROLE_ADMIN


def submit(user: User, data: dict) -> Complaint:
    booking_id = data.get('related_booking')
    booking = None
    if booking_id:
        booking = Booking.objects.filter(pk=booking_id, patient=user).first()
        if booking is None:
            raise ValidationError({'relatedBooking': ['Unknown booking.']})
    professional = None
    if data.get('related_professional'):
        professional = Professional.objects.filter(pk=data['related_professional']).first()
        if professional is None:
            raise ValidationError({'relatedProfessional': ['Unknown professional.']})

    complaint = Complaint.objects.create(
        user=user,
        title=data['title'],
        description=data['description'],
        category=data['category'],
        priority=data.get('priority') or 'medium',
        attachments=data.get('attachments') or [],
        tags=data.get('tags') or [],
        related_booking=booking,
        related_professional=professional or (booking.professional if booking else None),
    )
    log_action(user=user, action='complaint_submitted', object_type='complaint', object_id=complaint.id,
               detail={'category': complaint.category, 'priority': complaint.priority})
    notify_admins('new_complaint', 'New Complaint',
                  f'{user.display_name} submitted a complaint: {complaint.title}')
    logger.info('complaint_submitted', complaint_id=complaint.id, category=complaint.category)
    return complaint


def list_mine(user: User) -> list[dict]:
    qs = Complaint.objects.filter(user=user).select_related('user').order_by('-created_at', '-id')
    return [complaint_payload(c) for c in qs]


def detail(complaint_id: int, user: User) -> dict:
    c = _get(complaint_id)
    if c.user_id != user.id and not _is_admin(user):
        raise PermissionDenied('Access denied')
    return complaint_payload(c, include_notes=_is_admin(user))


@transaction.atomic
def update_own(complaint_id: int, user: User, data: dict) -> Complaint:
    c = _get(complaint_id, lock=True)
    if c.user_id != user.id:
        raise PermissionDenied('Access denied')
    if c.status != Complaint.STATUS_OPEN:
        raise InvalidState('Cannot update complaint that is no longer open')
    for field in ('title', 'description', 'category', 'priority', 'attachments'):
        if field in data:
            setattr(c, field, data[field])
    c.save()
    return c


@transaction.atomic
def rate(complaint_id: int, user: User, rating: int) -> Complaint:
    c = _get(complaint_id, lock=True)
    if c.user_id != user.id:
        raise PermissionDenied('Access denied')
    if c.status not in (Complaint.STATUS_RESOLVED, Complaint.STATUS_CLOSED):
        raise InvalidState('Can only rate resolved complaints')
    c.satisfaction_rating = rating
    c.save(update_fields=['satisfaction_rating', 'updated_at'])
    return c


def admin_list(*, status: Optional[str] = None, category: Optional[str] = None, priority: Optional[str] = None,
               assigned_to: Optional[int] = None, search: Optional[str] = None, page: int = 1, limit: int = 20) -> dict:
    qs = Complaint.objects.select_related('user')
    if status:
        qs = qs.filter(status=status)
    if category:
        qs = qs.filter(category=category)
    if priority:
        qs = qs.filter(priority=priority)
    if assigned_to:
        qs = qs.filter(assigned_to_id=assigned_to)
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))

    total = qs.count()
    page = max(1, int(page or 1))
    limit = min(100, max(1, int(limit or 20)))
    rank = Case(*[When(priority=p, then=Value(r)) for p, r in PRIORITY_RANK.items()],
                default=Value(0), output_field=IntegerField())
    start = (page - 1) * limit
    window = qs.annotate(priority_rank=rank).order_by('-priority_rank', '-created_at', '-id')[start:start + limit]

    stats = {row['status']: row['n'] for row in Complaint.objects.values('status').annotate(n=Count('id'))}
    return {
        'complaints': [complaint_payload(c) for c in window],
        'total': total,
        'currentPage': page,
        'totalPages': (total + limit - 1) // limit,
        'stats': stats,
    }


@transaction.atomic
def assign(complaint_id: int, admin: User, assignee_id: int) -> Complaint:
    c = _get(complaint_id, lock=True)
    assignee = User.objects.filter(pk=assignee_id, role=User.ROLE_ADMIN).first()
    if assignee is None:
        raise ValidationError({'assignedTo': ['Complaints can only be assigned to administrators.']})
    c.assigned_to = assignee
    if c.status == Complaint.STATUS_OPEN:
        c.status = Complaint.STATUS_IN_PROGRESS
    c.save(update_fields=['assigned_to', 'status', 'updated_at'])
    log_action(user=admin, action='complaint_assigned', object_type='complaint', object_id=c.id,
               detail={'assignee': assignee.id})
    return c


@transaction.atomic
def set_status(complaint_id: int, admin: User, status: str, message: str = '') -> Complaint:
    c = _get(complaint_id, lock=True)
    c.status = status
    if status == Complaint.STATUS_RESOLVED:
        c.resolution_message = message or c.resolution_message
        c.resolved_by = admin
        c.resolved_at = timezone.now()
    c.save()
    log_action(user=admin, action='complaint_status', object_type='complaint', object_id=c.id, detail={'status': status})
    notify(c.user, 'complaint_updated', 'Complaint Updated',
           f'Your complaint "{c.title}" is now {c.get_status_display().lower()}.')
    return c


@transaction.atomic
def respond(complaint_id: int, admin: User, message: str) -> Complaint:
    c = _get(complaint_id, lock=True)
    c.admin_response = message
    c.responded_by = admin
    c.responded_at = timezone.now()
    if c.status == Complaint.STATUS_OPEN:
        c.status = Complaint.STATUS_IN_PROGRESS
    c.save()
    log_action(user=admin, action='complaint_responded', object_type='complaint', object_id=c.id)
    notify(c.user, 'complaint_updated', 'Response to your complaint',
           f'An administrator responded to "{c.title}".')
    return c


def add_note(complaint_id: int, admin: User, note: str) -> Complaint:
    c = _get(complaint_id)
    ComplaintNote.objects.create(complaint=c, note=note, added_by=admin)
    c.save(update_fields=['updated_at'])
    return c


def statistics() -> dict:
    def grouped(field):
        return {row[field]: row['n'] for row in Complaint.objects.values(field).annotate(n=Count('id'))}

    monthly = (
        Complaint.objects.annotate(month=TruncMonth('created_at'))
        .values('month').annotate(n=Count('id')).order_by('-month')[:12]
    )
    resolved = Complaint.objects.filter(status=Complaint.STATUS_RESOLVED, resolved_at__isnull=False)
    durations = [(c.resolved_at - c.created_at).total_seconds() / 86400 for c in resolved.only('created_at', 'resolved_at')]
    return {
        'statusStats': grouped('status'),
        'categoryStats': grouped('category'),
        'priorityStats': grouped('priority'),
        'monthlyStats': [{'month': row['month'].strftime('%Y-%m'), 'count': row['n']} for row in monthly if row['month']],
        'avgResolutionDays': round(sum(durations) / len(durations), 2) if durations else None,
    }
