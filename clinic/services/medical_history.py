"""
Patient medical history and pharmacist self-assessment reviews.

A patient keeps one history record: uploaded documents, free-form
details and prescription links.  Submitting a self-assessment puts the
record in the admin queue; an admin assigns a pharmacist, who posts a
report.  The report link reaches the patient only after the report fee
is recorded, and the patient may review the assessment once.
"""
from typing import Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from clinic.exceptions import InvalidState
from clinic.models import MedicalHistory, Professional, User
from clinic.services.audit import log_action
from clinic.services.identity import professional_for
from clinic.services.notifications import notify

logger = structlog.get_logger(__name__)


def _iso(value):
    return value.isoformat() if value else None


def history_payload(h: MedicalHistory, *, viewer: Optional[User] = None) -> dict:
    pharmacist = h.assigned_pharmacist
    # the owner sees the report link only once it is paid for
    hide_report = viewer is not None and viewer.id == h.patient_id and not h.report_paid
    return {
        'id': h.id,
        'patientId': h.patient_id,
        'patientName': h.patient.display_name,
        'documents': h.documents,
        'details': h.details,
        'prescriptions': h.prescriptions,
        'selfAssessment': {
            'submitted': h.self_assessment_submitted_at is not None,
            'submittedAt': _iso(h.self_assessment_submitted_at),
            'data': h.self_assessment,
        },
        'status': h.assessment_status,
        'assignedPharmacist': {
            'id': pharmacist.id,
            'name': pharmacist.user.display_name,
        } if pharmacist else None,
        'assignedAt': _iso(h.assigned_at),
        'pharmacistAssessment': {
            'completed': h.assessment_completed_at is not None,
            'completedAt': _iso(h.assessment_completed_at),
            'reportUrl': '' if hide_report else h.assessment_report_url,
            'notes': h.assessment_notes,
        },
        'reportPayment': {
            'paid': h.report_paid,
            'amount': h.report_amount,
            'paymentId': h.report_payment_id,
            'paidAt': _iso(h.report_paid_at),
            'pharmacistShare': h.report_pharmacist_share,
            'pharmacistPaid': h.pharmacist_paid,
        },
        'review': {
            'rating': h.review_rating,
            'feedback': h.review_feedback,
            'submittedAt': _iso(h.review_submitted_at),
        } if h.review_rating else None,
        'updatedAt': _iso(h.updated_at),
    }


def _histories():
    return MedicalHistory.objects.select_related('patient', 'assigned_pharmacist__user')


def _get(history_id: int, *, lock: bool = False) -> MedicalHistory:
    qs = _histories()
    if lock:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.get(pk=history_id)
    except MedicalHistory.DoesNotExist:
        raise NotFound('Medical history not found')


def _own(history_id: int, user: User) -> MedicalHistory:
    history = _get(history_id, lock=True)
    if history.patient_id != user.id:
        raise PermissionDenied('Not authorized to access this assessment')
    return history


def get_for(patient: User) -> Optional[MedicalHistory]:
    return _histories().filter(patient=patient).first()


@transaction.atomic
def save_record(patient: User, *, documents: Optional[list] = None, details: Optional[dict] = None) -> MedicalHistory:
    """Create the patient's record or replace the parts that were sent."""
    history, _ = MedicalHistory.objects.select_for_update().get_or_create(patient=patient)
    if documents is not None:
        history.documents = documents
    if details is not None:
        history.details = details
    history.save()
    return history


@transaction.atomic
def add_prescription(patient: User, prescription_url: str) -> MedicalHistory:
    history, _ = MedicalHistory.objects.select_for_update().get_or_create(patient=patient)
    history.prescriptions = [*history.prescriptions, prescription_url]
    history.save()
    return history


@transaction.atomic
def submit_self_assessment(patient: User, data: dict) -> MedicalHistory:
    history, _ = MedicalHistory.objects.select_for_update().get_or_create(patient=patient)
    if history.assigned_pharmacist_id or history.assessment_completed_at:
        raise InvalidState('Self-assessment is already under review')
    history.self_assessment = data
    history.self_assessment_submitted_at = timezone.now()
    history.save()
    log_action(user=patient, action='self_assessment_submitted', object_type='medical_history', object_id=history.id)
    logger.info('self_assessment_submitted', history_id=history.id)
    return history


def my_assessments(patient: User) -> list[dict]:
    qs = _histories().filter(patient=patient, self_assessment_submitted_at__isnull=False)
    return [history_payload(h, viewer=patient) for h in qs]


def submitted_assessments() -> list[dict]:
    qs = _histories().filter(self_assessment_submitted_at__isnull=False).order_by('-self_assessment_submitted_at')
    return [history_payload(h) for h in qs]


def patient_history(patient_id: int) -> Optional[dict]:
    history = _histories().filter(patient_id=patient_id).first()
    return history_payload(history) if history else None


@transaction.atomic
def assign_pharmacist(admin: User, *, patient_id: int, pharmacist_id: int) -> MedicalHistory:
    history = _histories().select_for_update(of=('self',)).filter(patient_id=patient_id).first()
    if history is None:
        raise NotFound('Medical history not found')
    pharmacist = Professional.objects.select_related('user').filter(pk=pharmacist_id).first()
    if pharmacist is None:
        raise NotFound('Pharmacist not found')
    if pharmacist.kind != Professional.KIND_PHARMACIST:
        raise ValidationError({'pharmacistId': ['Assessments can be assigned to pharmacists only.']})
    if history.self_assessment_submitted_at is None:
        raise InvalidState('Patient has not submitted a self-assessment')
    if history.assessment_completed_at:
        raise InvalidState('Assessment is already completed')

    history.assigned_pharmacist = pharmacist
    history.assigned_by = admin
    history.assigned_at = timezone.now()
    history.save()
    log_action(user=admin, action='assessment_assigned', object_type='medical_history', object_id=history.id,
               detail={'pharmacist_id': pharmacist.id})
    notify(pharmacist.user, 'assessment_assigned', 'New Self-Assessment',
           f'A self-assessment from {history.patient.display_name} has been assigned to you.')
    return history


def assigned_to(user: User) -> list[dict]:
    professional = professional_for(user)
    if professional is None or professional.kind != Professional.KIND_PHARMACIST:
        raise PermissionDenied('Only pharmacists review self-assessments')
    qs = _histories().filter(assigned_pharmacist=professional).order_by('-assigned_at', '-id')
    return [history_payload(h) for h in qs]


@transaction.atomic
def complete_assessment(history_id: int, user: User, *, report_url: str, notes: str = '') -> MedicalHistory:
    history = _get(history_id, lock=True)
    professional = professional_for(user)
    if professional is None or history.assigned_pharmacist_id != professional.id:
        raise PermissionDenied('Not authorized to report on this assessment')
    if history.assessment_status != MedicalHistory.STATUS_ASSIGNED:
        raise InvalidState('Assessment is not awaiting a report')

    history.assessment_report_url = report_url
    history.assessment_notes = notes
    history.assessment_completed_at = timezone.now()
    history.save()
    log_action(user=user, action='assessment_completed', object_type='medical_history', object_id=history.id)
    notify(history.patient, 'assessment_completed', 'Assessment Report Ready',
           'Your pharmacist assessment is complete. Pay for the report to download it.')
    return history


@transaction.atomic
def pay_report(history_id: int, user: User, *, payment_id: str = '') -> MedicalHistory:
    history = _own(history_id, user)
    if history.assessment_completed_at is None:
        raise InvalidState('Report not yet completed')
    if history.report_paid:
        raise InvalidState('Report already paid for')

    amount = settings.ASSESSMENT_REPORT_PRICE
    history.report_amount = amount
    history.report_pharmacist_share = amount // 2
    history.report_payment_id = payment_id
    history.report_paid_at = timezone.now()
    history.save()
    log_action(user=user, action='assessment_report_paid', object_type='medical_history', object_id=history.id,
               detail={'amount': amount})
    return history


@transaction.atomic
def submit_review(history_id: int, user: User, *, rating: int, feedback: str = '') -> MedicalHistory:
    history = _own(history_id, user)
    if history.assessment_completed_at is None:
        raise InvalidState('Can only review completed assessments')
    if history.review_rating:
        raise InvalidState('You have already reviewed this assessment')

    history.review_rating = rating
    history.review_feedback = feedback
    history.review_submitted_at = timezone.now()
    history.save()
    log_action(user=user, action='assessment_reviewed', object_type='medical_history', object_id=history.id,
               detail={'rating': rating})
    return history


@transaction.atomic
def add_document(admin: User, *, patient_id: int, document_url: str) -> MedicalHistory:
    """Attach a lab or test result to a patient's record on their behalf."""
    patient = User.objects.filter(pk=patient_id, role=User.ROLE_PATIENT).first()
    if patient is None:
        raise NotFound('Patient not found')
    history, _ = MedicalHistory.objects.select_for_update().get_or_create(patient=patient)
    history.documents = [*history.documents, document_url]
    history.save()
    log_action(user=admin, action='document_added', object_type='medical_history', object_id=history.id)
    return history
