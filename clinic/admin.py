"""
Django admin registrations for the clinic models.

Exposes the data under ``/admin/`` for inspection and manual fixes.
Slot edits made here bypass the collection version counter, so they
are read-only.
"""

from django.contrib import admin

from .models import (
    FAQ,
    AuditEvent,
    Booking,
    Complaint,
    ComplaintNote,
    CustomerServiceChannel,
    LegalPage,
    MedicalForm,
    MedicalHistory,
    Notification,
    Professional,
    Slot,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'email', 'is_suspended', 'is_staff')
    list_filter = ('role', 'is_suspended')
    search_fields = ('username', 'first_name', 'last_name', 'email')


class SlotInline(admin.TabularInline):
    model = Slot
    extra = 0
    can_delete = False
    readonly_fields = ('date', 'start_time', 'end_time', 'is_booked', 'version')


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    list_display = ('user', 'kind', 'specialization', 'status', 'is_verified', 'slots_version')
    list_filter = ('kind', 'status', 'is_verified')
    search_fields = ('user__username', 'specialization', 'license_number')
    readonly_fields = ('slots_version',)
    inlines = [SlotInline]


@admin.register(Slot)
class SlotAdmin(admin.ModelAdmin):
    list_display = ('professional', 'date', 'start_time', 'end_time', 'is_booked', 'version')
    list_filter = ('is_booked', 'professional__kind')
    date_hierarchy = 'date'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'professional', 'slot_date', 'slot_time', 'service_type', 'status', 'professional_paid')
    list_filter = ('status', 'service_type', 'professional_paid')
    search_fields = ('patient__username', 'professional__user__username', 'payment_id')


class ComplaintNoteInline(admin.TabularInline):
    model = ComplaintNote
    extra = 0


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'category', 'priority', 'status', 'assigned_to', 'created_at')
    list_filter = ('status', 'priority', 'category')
    search_fields = ('title', 'description', 'user__username')
    inlines = [ComplaintNoteInline]


@admin.register(MedicalForm)
class MedicalFormAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_name', 'status', 'assigned_to', 'created_at')
    list_filter = ('status',)
    search_fields = ('patient_name', 'patient__username')


@admin.register(MedicalHistory)
class MedicalHistoryAdmin(admin.ModelAdmin):
    list_display = ('patient', 'assigned_pharmacist', 'self_assessment_submitted_at', 'assessment_completed_at',
                    'report_paid_at')
    list_filter = ('pharmacist_paid',)
    search_fields = ('patient__username',)


@admin.register(FAQ)
class FAQAdmin(admin.ModelAdmin):
    list_display = ('question', 'category', 'order', 'is_active')
    list_filter = ('category', 'is_active')


@admin.register(CustomerServiceChannel)
class CustomerServiceChannelAdmin(admin.ModelAdmin):
    list_display = ('title', 'contact_method', 'contact_value', 'order', 'is_active')


@admin.register(LegalPage)
class LegalPageAdmin(admin.ModelAdmin):
    list_display = ('page_type', 'title', 'version', 'is_active', 'updated_at')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'title', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
