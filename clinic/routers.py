"""
URL mappings for the carebook API.

Every professional kind gets the same set of routes under its own
prefix (``/api/pharmacists``, ``/api/doctors``, ``/api/nutritionists``);
the kind is passed to the view as a keyword argument. Trailing slashes
are omitted throughout.
"""
from django.urls import include, path

from .views import (
    admin_panel,
    bookings,
    complaints,
    content,
    health,
    medical_forms,
    medical_history,
    notifications,
    professionals,
    slots,
)

KINDS = ('pharmacist', 'doctor', 'nutritionist')


def _kind_routes(kind):
    prefix = f'api/{kind}s'
    extra = {'kind': kind}
    return [
        path(prefix, professionals.professional_list, extra),
        path(f'{prefix}/slots', slots.my_slots, extra),
        path(f'{prefix}/slots/<int:slot_id>', slots.my_slot_detail, extra),
        path(f'{prefix}/payment-stats', professionals.my_payment_stats, extra),
        path(f'{prefix}/<int:pk>', professionals.professional_detail, extra),
    ]


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Bookings
    path('api/bookings', bookings.create_booking),
    path('api/bookings/mine', bookings.my_bookings),
    path('api/bookings/available-slots/<int:professional_id>', bookings.available_slots),
    path('api/bookings/reviews/<int:professional_id>', bookings.professional_reviews),
    path('api/bookings/<int:pk>/cancel', bookings.cancel_booking),
    path('api/bookings/<int:pk>/reschedule', bookings.reschedule_booking),
    path('api/bookings/<int:pk>/meeting-link', bookings.meeting_link),
    path('api/bookings/<int:pk>/report', bookings.submit_report),
    path('api/bookings/<int:pk>/test-result', bookings.upload_test_result),
    path('api/bookings/<int:pk>/treatment-status', bookings.treatment_status),
    path('api/bookings/<int:pk>/review', bookings.submit_review),

    # Complaints
    path('api/complaints', complaints.submit_complaint),
    path('api/complaints/mine', complaints.my_complaints),
    path('api/complaints/admin/all', complaints.admin_complaints),
    path('api/complaints/admin/statistics', complaints.admin_statistics),
    path('api/complaints/admin/<int:pk>/assign', complaints.admin_assign),
    path('api/complaints/admin/<int:pk>/status', complaints.admin_status),
    path('api/complaints/admin/<int:pk>/respond', complaints.admin_respond),
    path('api/complaints/admin/<int:pk>/note', complaints.admin_note),
    path('api/complaints/<int:pk>', complaints.complaint_detail),
    path('api/complaints/<int:pk>/rating', complaints.rate_complaint),

    # Medical forms
    path('api/medical-forms', medical_forms.submit_form),
    path('api/medical-forms/mine', medical_forms.my_forms),
    path('api/medical-forms/pending', medical_forms.pending_forms),
    path('api/medical-forms/all', medical_forms.all_forms),
    path('api/medical-forms/assigned-to-me', medical_forms.assigned_forms),
    path('api/medical-forms/<int:pk>', medical_forms.form_detail),
    path('api/medical-forms/<int:pk>/assign', medical_forms.assign_form),
    path('api/medical-forms/<int:pk>/result', medical_forms.post_result),

    # Medical history and pharmacist self-assessments
    path('api/medical-history', medical_history.my_history),
    path('api/medical-history/prescription', medical_history.add_prescription),
    path('api/medical-history/self-assessment', medical_history.submit_self_assessment),
    path('api/medical-history/my-assessments', medical_history.my_assessments),
    path('api/medical-history/assigned-to-me', medical_history.assigned_assessments),
    path('api/medical-history/<int:pk>/assessment', medical_history.post_assessment),
    path('api/medical-history/<int:pk>/pay-report', medical_history.pay_report),
    path('api/medical-history/<int:pk>/review', medical_history.review_assessment),

    # Website content
    path('api/website/faqs', content.faqs),
    path('api/website/faqs/<int:pk>', content.faq_detail),
    path('api/website/customer-service', content.customer_service),
    path('api/website/customer-service/<int:pk>', content.customer_service_detail),
    path('api/website/legal/<str:page_type>', content.legal_page),
    path('api/website/admin/legal', content.admin_legal_pages),
    path('api/website/admin/legal/<str:page_type>', content.admin_legal_page),
    path('api/website/admin/legal/<str:page_type>/toggle', content.admin_legal_toggle),

    # Notifications
    path('api/notifications', notifications.notifications),
    path('api/notifications/unread-count', notifications.unread_count),
    path('api/notifications/mark-all-read', notifications.mark_all_read),
    path('api/notifications/<int:pk>', notifications.delete_notification),
    path('api/notifications/<int:pk>/read', notifications.mark_read),

    # Admin panel
    path('api/admin/users', admin_panel.list_users),
    path('api/admin/users/<int:pk>/suspend', admin_panel.suspend_user),
    path('api/admin/users/<int:pk>/unsuspend', admin_panel.unsuspend_user),
    path('api/admin/professionals', admin_panel.create_professional),
    path('api/admin/professionals/<int:pk>', admin_panel.delete_professional),
    path('api/admin/payouts/mark-paid', admin_panel.mark_payouts),
    path('api/admin/self-assessments', medical_history.admin_self_assessments),
    path('api/admin/assign-pharmacist', medical_history.admin_assign_pharmacist),
    path('api/admin/patients/<int:pk>/medical-history', medical_history.admin_patient_history),
    path('api/admin/test-results', medical_history.admin_add_document),
]

for _kind in KINDS:
    urlpatterns += _kind_routes(_kind)
