"""
Database models for the carebook backend.

The central piece is the slot collection owned by each professional.
Slots live in their own table so that every window has a stable id and
can be added, edited or removed on its own; the owning professional
carries a ``slots_version`` counter used for optimistic concurrency on
whole-collection writes.  Bookings, complaints, medical forms and the
admin-managed website content sit around that core.
"""
from __future__ import annotations

import datetime
import re
from zoneinfo import ZoneInfo

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

_TIME_12H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")
_TIME_24H = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_slot_time(value: str) -> int:
    """Return minutes since midnight for ``HH:MM`` or ``hh:mm AM/PM``.

    Raises ``ValueError`` for anything else.
    """
    value = value or ''
    m = _TIME_12H.match(value)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
        if not 1 <= hours <= 12 or minutes > 59:
            raise ValueError(f'invalid time: {value!r}')
        period = m.group(3).upper()
        if period == 'PM' and hours != 12:
            hours += 12
        if period == 'AM' and hours == 12:
            hours = 0
        return hours * 60 + minutes
    m = _TIME_24H.match(value)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f'invalid time: {value!r}')
        return hours * 60 + minutes
    raise ValueError(f'invalid time: {value!r}')


class User(AbstractUser):
    """Custom user model carrying the platform role.

    A professional user is additionally bound to exactly one
    :class:`Professional` row through ``professional_profile``.
    """
    ROLE_PATIENT = 'patient'
    ROLE_PHARMACIST = 'pharmacist'
    ROLE_DOCTOR = 'doctor'
    ROLE_NUTRITIONIST = 'nutritionist'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_PHARMACIST, 'Pharmacist'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_NUTRITIONIST, 'Nutritionist'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    phone = models.CharField(max_length=32, blank=True)
    is_suspended = models.BooleanField(default=False)
    suspended_at = models.DateTimeField(null=True, blank=True)
    suspension_reason = models.CharField(max_length=255, blank=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Professional(models.Model):
    """A pharmacist, doctor or nutritionist offering consultations."""
    KIND_PHARMACIST = 'pharmacist'
    KIND_DOCTOR = 'doctor'
    KIND_NUTRITIONIST = 'nutritionist'
    KIND_CHOICES = [
        (KIND_PHARMACIST, 'Pharmacist'),
        (KIND_DOCTOR, 'Doctor'),
        (KIND_NUTRITIONIST, 'Nutritionist'),
    ]
    STATUS_CHOICES = [
        ('online', 'Online'),
        ('offline', 'Offline'),
        ('busy', 'Busy'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='professional_profile')
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, db_index=True)
    designation = models.CharField(max_length=255, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    qualification = models.CharField(max_length=255, blank=True)
    experience = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True)
    photo = models.URLField(max_length=512, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='offline')
    consultation_fee = models.PositiveIntegerField(default=500)
    license_number = models.CharField(max_length=64, blank=True)
    is_verified = models.BooleanField(default=False)
    # Bumped on every slot-collection mutation
    slots_version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.kind}:{self.user.username}"


class Slot(models.Model):
    """One offerable consultation window.

    ``start_time``/``end_time`` keep the caller's spelling so that a
    stored collection reads back unchanged; the minute columns are
    derived on save and back the ordering and uniqueness rules.
    """
    professional = models.ForeignKey(Professional, on_delete=models.CASCADE, related_name='slots')
    date = models.DateField()
    start_time = models.CharField(max_length=16)
    end_time = models.CharField(max_length=16)
    start_minutes = models.PositiveSmallIntegerField(editable=False)
    end_minutes = models.PositiveSmallIntegerField(editable=False)
    is_booked = models.BooleanField(default=False, db_index=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date', 'start_minutes', 'id']
        indexes = [
            models.Index(fields=['professional', 'date', 'start_minutes'], name='slot_prof_date_start_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['professional', 'date', 'start_minutes', 'end_minutes'],
                name='uniq_slot_window_per_professional',
            ),
            models.CheckConstraint(
                condition=models.Q(end_minutes__gt=models.F('start_minutes')),
                name='slot_ends_after_start',
            ),
        ]

    def save(self, *args, **kwargs):
        self.start_minutes = parse_slot_time(self.start_time)
        self.end_minutes = parse_slot_time(self.end_time)
        super().save(*args, **kwargs)

    def ends_at(self) -> datetime.datetime:
        tz = ZoneInfo(settings.SLOT_TIMEZONE)
        naive = datetime.datetime.combine(self.date, datetime.time()) + datetime.timedelta(minutes=self.end_minutes)
        return naive.replace(tzinfo=tz)

    @property
    def is_expired(self) -> bool:
        return self.ends_at() <= timezone.now()

    def __str__(self) -> str:
        return f"{self.date} {self.start_time}-{self.end_time}"


class Booking(models.Model):
    """A patient's booking against one professional slot."""
    SERVICE_PRESCRIPTION_REVIEW = 'prescription_review'
    SERVICE_FULL_CONSULTATION = 'full_consultation'
    SERVICE_DOCTOR_CONSULTATION = 'doctor_consultation'
    SERVICE_NUTRITIONIST_CONSULTATION = 'nutritionist_consultation'
    SERVICE_CHOICES = [
        (SERVICE_PRESCRIPTION_REVIEW, 'Know Your Prescription'),
        (SERVICE_FULL_CONSULTATION, 'Full Consultation'),
        (SERVICE_DOCTOR_CONSULTATION, 'Doctor Consultation'),
        (SERVICE_NUTRITIONIST_CONSULTATION, 'Nutritionist Consultation'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    TREATMENT_CHOICES = [
        ('untreated', 'Untreated'),
        ('treated', 'Treated'),
    ]
    SEX_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    professional = models.ForeignKey(Professional, on_delete=models.CASCADE, related_name='bookings')
    slot = models.ForeignKey(Slot, null=True, blank=True, on_delete=models.SET_NULL, related_name='bookings')
    slot_date = models.DateField()
    slot_time = models.CharField(max_length=16)
    service_type = models.CharField(max_length=32, choices=SERVICE_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    treatment_status = models.CharField(max_length=16, choices=TREATMENT_CHOICES, default='untreated')

    patient_age = models.PositiveIntegerField()
    patient_sex = models.CharField(max_length=8, choices=SEX_CHOICES)
    prescription_url = models.URLField(max_length=512)
    additional_notes = models.TextField(blank=True)

    payment_id = models.CharField(max_length=128, blank=True)
    payment_amount = models.PositiveIntegerField()
    professional_share = models.PositiveIntegerField(default=0)
    professional_paid = models.BooleanField(default=False)

    meet_link = models.URLField(max_length=512, blank=True)
    counselling_report = models.URLField(max_length=512, blank=True)
    test_results = models.JSONField(default=list, blank=True)

    review_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    review_feedback = models.TextField(blank=True)
    review_submitted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['professional', 'status'], name='booking_prof_status_idx'),
            models.Index(fields=['patient', 'created_at'], name='booking_patient_created_idx'),
        ]

    def __str__(self) -> str:
        return f"booking {self.id} {self.slot_date} {self.slot_time} ({self.status})"


class Complaint(models.Model):
    CATEGORY_CHOICES = [
        ('technical_issue', 'Technical issue'),
        ('service_quality', 'Service quality'),
        ('billing', 'Billing'),
        ('pharmacist_behavior', 'Pharmacist behaviour'),
        ('appointment_issue', 'Appointment issue'),
        ('platform_bug', 'Platform bug'),
        ('privacy_concern', 'Privacy concern'),
        ('other', 'Other'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]
    STATUS_OPEN = 'open'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_RESOLVED = 'resolved'
    STATUS_CLOSED = 'closed'
    STATUS_CHOICES = [
        (STATUS_OPEN, 'Open'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_RESOLVED, 'Resolved'),
        (STATUS_CLOSED, 'Closed'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='complaints')
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000)
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES)
    priority = models.CharField(max_length=8, choices=PRIORITY_CHOICES, default='medium')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)
    attachments = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)

    related_booking = models.ForeignKey(Booking, null=True, blank=True, on_delete=models.SET_NULL, related_name='complaints')
    related_professional = models.ForeignKey(
        Professional, null=True, blank=True, on_delete=models.SET_NULL, related_name='complaints'
    )
    assigned_to = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='assigned_complaints'
    )

    admin_response = models.TextField(blank=True)
    responded_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    responded_at = models.DateTimeField(null=True, blank=True)

    resolution_message = models.TextField(blank=True)
    resolved_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    resolved_at = models.DateTimeField(null=True, blank=True)
    satisfaction_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', 'status'], name='complaint_user_status_idx'),
            models.Index(fields=['category', 'priority'], name='complaint_cat_priority_idx'),
            models.Index(fields=['status', 'created_at'], name='complaint_status_created_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"


class ComplaintNote(models.Model):
    """Internal admin note on a complaint; never shown to the patient."""
    complaint = models.ForeignKey(Complaint, on_delete=models.CASCADE, related_name='internal_notes')
    note = models.TextField()
    added_by = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='+')
    added_at = models.DateTimeField(auto_now_add=True)


class MedicalForm(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_ASSIGNED = 'assigned'
    STATUS_COMPLETED = 'completed'
    STATUS_PAID = 'paid'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ASSIGNED, 'Assigned'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_PAID, 'Paid'),
    ]

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='medical_forms')
    patient_name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    sex = models.CharField(max_length=8, choices=Booking.SEX_CHOICES)
    prescription_details = models.TextField()
    prescription_url = models.URLField(max_length=512)
    additional_notes = models.TextField(blank=True)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    assigned_to = models.ForeignKey(
        Professional, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_forms'
    )
    assigned_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    assigned_at = models.DateTimeField(null=True, blank=True)

    result_pdf_url = models.URLField(max_length=512, blank=True)
    result_notes = models.TextField(blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    payment_amount = models.PositiveIntegerField(default=29)
    payment_id = models.CharField(max_length=128, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"form {self.id} {self.patient_name} ({self.status})"


class MedicalHistory(models.Model):
    """A patient's medical record and their pharmacist self-assessment.

    One row per patient.  The self-assessment moves through
    submitted -> assigned -> completed; the report link is released to
    the patient once the report fee is recorded.
    """
    STATUS_DRAFT = 'draft'
    STATUS_SUBMITTED = 'submitted'
    STATUS_ASSIGNED = 'assigned'
    STATUS_COMPLETED = 'completed'

    patient = models.OneToOneField(User, on_delete=models.CASCADE, related_name='medical_history')
    documents = models.JSONField(default=list, blank=True)
    details = models.JSONField(default=dict, blank=True)
    prescriptions = models.JSONField(default=list, blank=True)

    self_assessment = models.JSONField(default=dict, blank=True)
    self_assessment_submitted_at = models.DateTimeField(null=True, blank=True)

    assigned_pharmacist = models.ForeignKey(
        Professional, null=True, blank=True, on_delete=models.SET_NULL, related_name='assessments'
    )
    assigned_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    assigned_at = models.DateTimeField(null=True, blank=True)

    assessment_report_url = models.URLField(max_length=512, blank=True)
    assessment_notes = models.TextField(blank=True)
    assessment_completed_at = models.DateTimeField(null=True, blank=True)

    report_amount = models.PositiveIntegerField(default=50)
    report_pharmacist_share = models.PositiveIntegerField(default=25)
    report_payment_id = models.CharField(max_length=128, blank=True)
    report_paid_at = models.DateTimeField(null=True, blank=True)
    pharmacist_paid = models.BooleanField(default=False)

    review_rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    review_feedback = models.TextField(blank=True)
    review_submitted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def assessment_status(self) -> str:
        if self.assessment_completed_at:
            return self.STATUS_COMPLETED
        if self.assigned_pharmacist_id:
            return self.STATUS_ASSIGNED
        if self.self_assessment_submitted_at:
            return self.STATUS_SUBMITTED
        return self.STATUS_DRAFT

    @property
    def report_paid(self) -> bool:
        return self.report_paid_at is not None

    def __str__(self) -> str:
        return f"history of {self.patient_id} ({self.assessment_status})"


class FAQ(models.Model):
    CATEGORY_CHOICES = [
        ('general', 'General'),
        ('booking', 'Booking'),
        ('payment', 'Payment'),
        ('consultation', 'Consultation'),
        ('technical', 'Technical'),
        ('other', 'Other'),
    ]
    question = models.CharField(max_length=500)
    answer = models.TextField(max_length=2000)
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES, default='general')
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order', '-created_at']
        indexes = [models.Index(fields=['category', 'order'], name='faq_category_order_idx')]

    def __str__(self) -> str:
        return self.question[:50]


class CustomerServiceChannel(models.Model):
    CONTACT_CHOICES = [
        ('phone', 'Phone'),
        ('email', 'Email'),
        ('chat', 'Chat'),
        ('form', 'Form'),
        ('whatsapp', 'WhatsApp'),
    ]
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=1000)
    icon = models.CharField(max_length=16, default='📞')
    contact_method = models.CharField(max_length=16, choices=CONTACT_CHOICES)
    contact_value = models.CharField(max_length=255)
    working_hours = models.CharField(max_length=100, default='24/7')
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self) -> str:
        return f"{self.title} ({self.contact_method})"


class LegalPage(models.Model):
    PAGE_TYPES = [
        ('privacy-policy', 'Privacy policy'),
        ('terms-and-conditions', 'Terms and conditions'),
        ('refund-policy', 'Refund policy'),
        ('disclaimer', 'Disclaimer'),
    ]
    page_type = models.CharField(max_length=32, choices=PAGE_TYPES, unique=True)
    title = models.CharField(max_length=200)
    content = models.TextField()
    version = models.CharField(max_length=10, default='1.0')
    is_active = models.BooleanField(default=True)
    updated_by = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.page_type


class Notification(models.Model):
    TYPE_CHOICES = [
        ('booking_confirmed', 'Booking confirmed'),
        ('new_booking', 'New booking'),
        ('booking_cancelled', 'Booking cancelled'),
        ('booking_rescheduled', 'Booking rescheduled'),
        ('meeting_link_added', 'Meeting link added'),
        ('test_result_uploaded', 'Test result uploaded'),
        ('session_completed', 'Session completed'),
        ('review_submitted', 'Review submitted'),
        ('new_complaint', 'New complaint'),
        ('complaint_updated', 'Complaint updated'),
        ('medical_form_assigned', 'Medical form assigned'),
        ('medical_form_completed', 'Medical form completed'),
        ('assessment_assigned', 'Assessment assigned'),
        ('assessment_completed', 'Assessment completed'),
        ('payment_approved', 'Payment approved'),
    ]
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    booking = models.ForeignKey(Booking, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['user', 'is_read', 'created_at'], name='notif_user_read_created_idx')]

    def __str__(self) -> str:
        return f"{self.type} -> {self.user_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.BigIntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]
