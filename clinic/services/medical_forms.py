"""
Medical form workflow: a patient submits a prescription for review, an
admin assigns it to a pharmacist or doctor, and the assignee posts a
result PDF.  Status only moves pending -> assigned -> completed.
"""
from typing import Optional

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from clinic.exceptions import InvalidState
from clinic.models import MedicalForm, Professional, User
from clinic.services.audit import log_action
from clinic.services.identity import professional_for
from clinic.services.notifications import notify

logger = structlog.get_logger(__name__)

ASSIGNABLE_KINDS = (Professional.KIND_PHARMACIST, Professional.KIND_DOCTOR)


def form_payload(f: MedicalForm) -> dict:
    return {
        'id': f.id,
        'patientId': f.patient_id,
        'patientName': f.patient_name,
        'age': f.age,
        'sex': f.sex,
        'prescriptionDetails': f.prescription_details,
        'prescriptionUrl': f.prescription_url,
        'additionalNotes': f.additional_notes,
        'status': f.status,
        'assignedTo': f.assigned_to_id,
        'assignedToKind': f.assigned_to.kind if f.assigned_to_id else None,
        'assignedAt': f.assigned_at.isoformat() if f.assigned_at else None,
        'resultPdfUrl': f.result_pdf_url,
        'resultNotes': f.result_notes,
        'completedAt': f.completed_at.isoformat() if f.completed_at else None,
        'paymentAmount': f.payment_amount,
        'paymentId': f.payment_id,
        'createdAt': f.created_at.isoformat(),
    }


def _forms():
    return MedicalForm.objects.select_related('assigned_to')


def _get(form_id: int, *, lock: bool = False) -> MedicalForm:
    qs = _forms()
    if lock:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.get(pk=form_id)
    except MedicalForm.DoesNotExist:
        raise NotFound('Medical form not found')


def submit(patient: User, data: dict) -> MedicalForm:
    form = MedicalForm.objects.create(
        patient=patient,
        patient_name=data['patient_name'],
        age=data['age'],
        sex=data['sex'],
        prescription_details=data['prescription_details'],
        prescription_url=data['prescription_url'],
        additional_notes=data.get('additional_notes', ''),
        payment_amount=settings.MEDICAL_FORM_PRICE,
        payment_id=data.get('payment_id', ''),
    )
    log_action(user=patient, action='medical_form_submitted', object_type='medical_form', object_id=form.id)
    logger.info('medical_form_submitted', form_id=form.id)
    return form


def list_for_patient(patient: User) -> list[dict]:
    return [form_payload(f) for f in _forms().filter(patient=patient).order_by('-created_at', '-id')]


def list_all(status: Optional[str] = None) -> list[dict]:
    qs = _forms().order_by('-created_at', '-id')
    if status:
        qs = qs.filter(status=status)
    return [form_payload(f) for f in qs]


@transaction.atomic
def assign(form_id: int, admin: User, professional_id: int) -> MedicalForm:
    form = _get(form_id, lock=True)
    professional = Professional.objects.select_related('user').filter(pk=professional_id).first()
    if professional is None:
        raise NotFound('Professional not found')
    if professional.kind not in ASSIGNABLE_KINDS:
        raise ValidationError({'professionalId': ['Forms can be assigned to pharmacists or doctors only.']})
    if form.status != MedicalForm.STATUS_PENDING:
        raise InvalidState('Medical form is not in pending status')

    form.assigned_to = professional
    form.assigned_by = admin
    form.assigned_at = timezone.now()
    form.status = MedicalForm.STATUS_ASSIGNED
    form.save()
    log_action(user=admin, action='medical_form_assigned', object_type='medical_form', object_id=form.id,
               detail={'professional_id': professional.id})
    notify(professional.user, 'medical_form_assigned', 'New Medical Form',
           f'A medical form for {form.patient_name} has been assigned to you.')
    return form


def assigned_to(user: User) -> list[dict]:
    professional = professional_for(user)
    if professional is None:
        raise PermissionDenied('Only professionals have assigned forms')
    return [form_payload(f) for f in _forms().filter(assigned_to=professional).order_by('-assigned_at', '-id')]


@transaction.atomic
def post_result(form_id: int, user: User, *, result_pdf_url: str, result_notes: str = '') -> MedicalForm:
    form = _get(form_id, lock=True)
    professional = professional_for(user)
    if professional is None or form.assigned_to_id != professional.id:
        raise PermissionDenied('Not authorized to update this medical form')
    if form.status != MedicalForm.STATUS_ASSIGNED:
        raise InvalidState('Medical form is not in assigned status')

    form.result_pdf_url = result_pdf_url
    form.result_notes = result_notes
    form.completed_at = timezone.now()
    form.status = MedicalForm.STATUS_COMPLETED
    form.save()
    log_action(user=user, action='medical_form_completed', object_type='medical_form', object_id=form.id)
    notify(form.patient, 'medical_form_completed', 'Medical Form Reviewed',
           'Your medical form has been reviewed and the result is available.')
    return form


def detail(form_id: int, user: User) -> dict:
    form = _get(form_id)
    professional = professional_for(user)
    allowed = (
        form.patient_id == user.id
        or getattr(user, 'role', None) == User.ROLE_ADMIN
        or (professional is not None and form.assigned_to_id == professional.id)
    )
    if not allowed:
        raise PermissionDenied('Not authorized to access this medical form')
    return form_payload(form)
