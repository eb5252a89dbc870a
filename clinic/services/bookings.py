"""
Booking lifecycle.

A booking claims its slot with a conditional ``UPDATE ... WHERE
is_booked = false`` so that of two concurrent requests for the same
slot exactly one succeeds.  Cancelling or rescheduling is the only way
a slot goes back to unbooked.
"""
from typing import Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Avg, F
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from clinic.exceptions import BookingStateError, SlotBooked, SlotExpired, SlotNotFound
from clinic.models import Booking, Professional, Slot, User
from clinic.services.audit import log_action
from clinic.services.identity import professional_for
from clinic.services.notifications import notify, notify_admins
from clinic.services.slots import record_change, slot_payload, upcoming_q

logger = structlog.get_logger(__name__)

SERVICES_BY_KIND = {
    Professional.KIND_PHARMACIST: {Booking.SERVICE_PRESCRIPTION_REVIEW, Booking.SERVICE_FULL_CONSULTATION},
    Professional.KIND_DOCTOR: {Booking.SERVICE_DOCTOR_CONSULTATION},
    Professional.KIND_NUTRITIONIST: {Booking.SERVICE_NUTRITIONIST_CONSULTATION},
}


def price_for(service_type: str, professional: Professional) -> tuple[int, int]:
    """Return ``(payment_amount, professional_share)``."""
    if service_type == Booking.SERVICE_PRESCRIPTION_REVIEW:
        amount = settings.PRESCRIPTION_REVIEW_PRICE
    elif service_type == Booking.SERVICE_FULL_CONSULTATION:
        amount = settings.FULL_CONSULTATION_PRICE
    else:
        amount = professional.consultation_fee
    return amount, amount // 2


def booking_payload(b: Booking) -> dict:
    return {
        'id': b.id,
        'patientId': b.patient_id,
        'patientName': b.patient.display_name,
        'professionalId': b.professional_id,
        'professionalKind': b.professional.kind,
        'professionalName': b.professional.user.display_name,
        'slotId': b.slot_id,
        'slotDate': b.slot_date.isoformat(),
        'slotTime': b.slot_time,
        'serviceType': b.service_type,
        'status': b.status,
        'treatmentStatus': b.treatment_status,
        'patientDetails': {
            'age': b.patient_age,
            'sex': b.patient_sex,
            'prescriptionUrl': b.prescription_url,
            'additionalNotes': b.additional_notes,
        },
        'paymentId': b.payment_id,
        'paymentAmount': b.payment_amount,
        'professionalShare': b.professional_share,
        'professionalPaid': b.professional_paid,
        'meetLink': b.meet_link,
        'counsellingReport': b.counselling_report,
        'testResults': b.test_results,
        'review': _review_payload(b),
        'createdAt': b.created_at.isoformat(),
    }


def _review_payload(b: Booking) -> Optional[dict]:
    if b.review_rating is None:
        return None
    return {
        'rating': b.review_rating,
        'feedback': b.review_feedback,
        'submittedAt': b.review_submitted_at.isoformat() if b.review_submitted_at else None,
    }


def _bookings():
    return Booking.objects.select_related('patient', 'professional__user')


def _claim(slot_id: int, *, professional_id: Optional[int] = None) -> Slot:
    qs = Slot.objects.select_related('professional__user')
    if professional_id is not None:
        qs = qs.filter(professional_id=professional_id)
    slot = qs.filter(pk=slot_id).first()
    if slot is None:
        raise SlotNotFound()
    if slot.is_booked:
        raise SlotBooked('This slot is already booked. Please select another slot.')
    if slot.is_expired:
        raise SlotExpired()
    claimed = Slot.objects.filter(pk=slot.pk, is_booked=False).update(is_booked=True, version=F('version') + 1)
    if not claimed:
        raise SlotBooked('This slot is already booked. Please select another slot.')
    slot.is_booked = True
    return slot


def _release(booking: Booking) -> None:
    if booking.slot_id is None:
        return
    Slot.objects.filter(pk=booking.slot_id, is_booked=True).update(is_booked=False, version=F('version') + 1)


def available_slots(professional_id: int) -> list[dict]:
    """Upcoming slots of one professional, marked booked if any active booking holds them."""
    if not Professional.objects.filter(pk=professional_id).exists():
        raise NotFound('Professional not found')
    held = set(
        Booking.objects.filter(professional_id=professional_id, status__in=Booking.ACTIVE_STATUSES, slot__isnull=False)
        .values_list('slot_id', flat=True)
    )
    result = []
    for slot in Slot.objects.filter(upcoming_q(), professional_id=professional_id):
        item = slot_payload(slot)
        item['isBooked'] = slot.is_booked or slot.id in held
        result.append(item)
    return result


@transaction.atomic
def create_booking(patient: User, *, slot_id: int, service_type: str, details: dict,
                   payment_id: str = '') -> Booking:
    slot = _claim(slot_id)
    professional = slot.professional
    if service_type not in SERVICES_BY_KIND[professional.kind]:
        raise ValidationError({'serviceType': [f'{service_type} is not offered by a {professional.kind}.']})

    amount, share = price_for(service_type, professional)
    booking = Booking.objects.create(
        patient=patient,
        professional=professional,
        slot=slot,
        slot_date=slot.date,
        slot_time=slot.start_time,
        service_type=service_type,
        status=Booking.STATUS_CONFIRMED,
        patient_age=details['age'],
        patient_sex=details['sex'],
        prescription_url=details['prescription_url'],
        additional_notes=details.get('additional_notes', ''),
        payment_id=payment_id or '',
        payment_amount=amount,
        professional_share=share,
    )
    record_change(professional, actor=patient, action='slot_booked', detail={'slot_id': slot.id, 'booking_id': booking.id})
    log_action(user=patient, action='booking_created', object_type='booking', object_id=booking.id,
               detail={'slot_id': slot.id, 'service_type': service_type, 'amount': amount})

    when = f'{booking.slot_date:%d %b %Y} at {booking.slot_time}'
    pro_name = professional.user.display_name
    notify(patient, 'booking_confirmed', 'Booking Confirmed',
           f'Your booking with {pro_name} on {when} has been confirmed.', booking=booking)
    notify(professional.user, 'new_booking', 'New Booking Received',
           f'You have a new booking from {patient.display_name} on {when}.', booking=booking)
    notify_admins('new_booking', 'New Booking Created',
                  f'{patient.display_name} booked an appointment with {pro_name} on {when}.', booking=booking)
    logger.info('booking_created', booking_id=booking.id, slot_id=slot.id, professional_id=professional.id)
    return booking


def bookings_for(user: User) -> list[dict]:
    professional = professional_for(user)
    if professional is not None:
        qs = _bookings().filter(professional=professional).order_by('slot_date', 'slot_time', 'id')
    else:
        qs = _bookings().filter(patient=user).order_by('-created_at', '-id')
    return [booking_payload(b) for b in qs]


def _locked_booking(booking_id: int) -> Booking:
    try:
        return _bookings().select_for_update(of=('self',)).get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFound('Booking not found')


def _require_owner(booking: Booking, user: User, action: str) -> Professional:
    professional = professional_for(user)
    if professional is None or professional.id != booking.professional_id:
        raise PermissionDenied(f'Not authorized to {action} this booking')
    return professional


@transaction.atomic
def cancel_booking(booking_id: int, user: User) -> Booking:
    booking = _locked_booking(booking_id)
    is_patient = booking.patient_id == user.id
    professional = professional_for(user)
    is_owner = professional is not None and professional.id == booking.professional_id
    if not (is_patient or is_owner):
        raise PermissionDenied('Not authorized to cancel this booking')
    if booking.status == Booking.STATUS_CANCELLED:
        raise BookingStateError('Booking is already cancelled')
    if booking.status == Booking.STATUS_COMPLETED:
        raise BookingStateError('Cannot cancel a completed booking')

    booking.status = Booking.STATUS_CANCELLED
    booking.save(update_fields=['status', 'updated_at'])
    _release(booking)
    record_change(booking.professional, actor=user, action='slot_released',
                  detail={'slot_id': booking.slot_id, 'booking_id': booking.id})
    log_action(user=user, action='booking_cancelled', object_type='booking', object_id=booking.id)

    when = f'{booking.slot_date:%d %b %Y} at {booking.slot_time}'
    if is_patient:
        notify(booking.professional.user, 'booking_cancelled', 'Booking Cancelled',
               f'{booking.patient.display_name} cancelled the booking on {when}.', booking=booking)
    else:
        notify(booking.patient, 'booking_cancelled', 'Booking Cancelled',
               f'Your booking on {when} was cancelled by {booking.professional.user.display_name}.', booking=booking)
    return booking


@transaction.atomic
def reschedule_booking(booking_id: int, user: User, *, slot_id: int) -> Booking:
    booking = _locked_booking(booking_id)
    _require_owner(booking, user, 'reschedule')
    if booking.status not in Booking.ACTIVE_STATUSES:
        raise BookingStateError(f'Cannot reschedule a {booking.status} booking')
    if booking.slot_id == slot_id:
        raise ValidationError({'slotId': ['The booking already holds this slot.']})

    new_slot = _claim(slot_id, professional_id=booking.professional_id)
    old_slot_id = booking.slot_id
    _release(booking)
    booking.slot = new_slot
    booking.slot_date = new_slot.date
    booking.slot_time = new_slot.start_time
    booking.save(update_fields=['slot', 'slot_date', 'slot_time', 'updated_at'])
    record_change(booking.professional, actor=user, action='booking_rescheduled',
                  detail={'booking_id': booking.id, 'from_slot': old_slot_id, 'to_slot': new_slot.id})
    log_action(user=user, action='booking_rescheduled', object_type='booking', object_id=booking.id,
               detail={'from_slot': old_slot_id, 'to_slot': new_slot.id})
    notify(booking.patient, 'booking_rescheduled', 'Booking Rescheduled',
           f'Your booking has been moved to {booking.slot_date:%d %b %Y} at {booking.slot_time}.', booking=booking)
    return booking


@transaction.atomic
def set_meeting_link(booking_id: int, user: User, link: str) -> Booking:
    booking = _locked_booking(booking_id)
    _require_owner(booking, user, 'update')
    booking.meet_link = link
    booking.save(update_fields=['meet_link', 'updated_at'])
    notify(booking.patient, 'meeting_link_added', 'Meeting Link Available',
           f'{booking.professional.user.display_name} added a meeting link for your session on '
           f'{booking.slot_date:%d %b %Y} at {booking.slot_time}.', booking=booking)
    return booking


@transaction.atomic
def submit_report(booking_id: int, user: User, report_url: str) -> Booking:
    booking = _locked_booking(booking_id)
    _require_owner(booking, user, 'update')
    if booking.status == Booking.STATUS_CANCELLED:
        raise BookingStateError('Cannot report on a cancelled booking')
    booking.counselling_report = report_url
    booking.status = Booking.STATUS_COMPLETED
    booking.save(update_fields=['counselling_report', 'status', 'updated_at'])
    log_action(user=user, action='booking_completed', object_type='booking', object_id=booking.id)
    notify(booking.patient, 'session_completed', 'Session Completed',
           'Your consultation report is ready.', booking=booking)
    return booking


@transaction.atomic
def add_test_result(booking_id: int, user: User, result_url: str) -> Booking:
    booking = _locked_booking(booking_id)
    _require_owner(booking, user, 'update')
    booking.test_results = [*booking.test_results, {'url': result_url, 'uploadedAt': timezone.now().isoformat()}]
    booking.save(update_fields=['test_results', 'updated_at'])
    notify(booking.patient, 'test_result_uploaded', 'Test Result Uploaded',
           f'{booking.professional.user.display_name} uploaded a test result.', booking=booking)
    return booking


@transaction.atomic
def set_treatment_status(booking_id: int, user: User, treatment_status: str) -> Booking:
    booking = _locked_booking(booking_id)
    _require_owner(booking, user, 'update')
    if booking.status == Booking.STATUS_CANCELLED:
        raise BookingStateError('Cannot treat a cancelled booking')
    booking.treatment_status = treatment_status
    fields = ['treatment_status', 'updated_at']
    if treatment_status == 'treated' and booking.status != Booking.STATUS_COMPLETED:
        booking.status = Booking.STATUS_COMPLETED
        fields.append('status')
        notify(booking.patient, 'session_completed', 'Session Completed',
               'Your consultation has been marked as completed.', booking=booking)
    booking.save(update_fields=fields)
    return booking


@transaction.atomic
def submit_review(booking_id: int, user: User, *, rating: int, feedback: str = '') -> Booking:
    booking = _locked_booking(booking_id)
    if booking.patient_id != user.id:
        raise PermissionDenied('Not authorized to review this booking')
    if booking.status != Booking.STATUS_COMPLETED:
        raise BookingStateError('Can only review completed bookings')
    if booking.review_rating is not None:
        raise BookingStateError('You have already reviewed this booking')
    booking.review_rating = rating
    booking.review_feedback = feedback
    booking.review_submitted_at = timezone.now()
    booking.save(update_fields=['review_rating', 'review_feedback', 'review_submitted_at', 'updated_at'])
    log_action(user=user, action='review_submitted', object_type='booking', object_id=booking.id, detail={'rating': rating})
    notify(booking.professional.user, 'review_submitted', 'New Review',
           f'{user.display_name} rated your session {rating}/5.', booking=booking)
    return booking


def reviews_for(professional_id: int) -> dict:
    qs = (Booking.objects.filter(professional_id=professional_id, status=Booking.STATUS_COMPLETED,
                                 review_rating__isnull=False)
          .select_related('patient').order_by('-review_submitted_at', '-id'))
    avg = qs.aggregate(avg=Avg('review_rating'))['avg']
    reviews = [{
        'bookingId': b.id,
        'patientName': b.patient.display_name,
        'slotDate': b.slot_date.isoformat(),
        **_review_payload(b),
    } for b in qs]
    return {'reviews': reviews, 'totalReviews': len(reviews), 'averageRating': round(avg, 1) if avg else 0}
