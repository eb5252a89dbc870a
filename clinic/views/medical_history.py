from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import IsAdminRole, IsPatientRole, IsProfessional
from clinic.serializers.medical_history import (
    AssessmentReportSerializer,
    AssessmentReviewSerializer,
    AssignPharmacistSerializer,
    MedicalRecordSerializer,
    PatientDocumentSerializer,
    PrescriptionSerializer,
    ReportPaymentSerializer,
    SelfAssessmentSerializer,
)
from clinic.services import medical_history as history_service


def _ok(history, viewer=None, message=None):
    body = {'ok': True, 'data': history_service.history_payload(history, viewer=viewer)}
    if message:
        body['message'] = message
    return Response(body)


@api_view(['GET', 'POST'])
@permission_classes([IsPatientRole])
def my_history(request):
    if request.method == 'GET':
        history = history_service.get_for(request.user)
        if history is None:
            return Response({'ok': True, 'data': None})
        return _ok(history, request.user)
    s = MedicalRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.save_record(
        request.user, documents=s.validated_data.get('documents'), details=s.validated_data.get('details'),
    )
    return _ok(history, request.user)


@api_view(['POST'])
@permission_classes([IsPatientRole])
def add_prescription(request):
    s = PrescriptionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.add_prescription(request.user, s.validated_data['prescriptionUrl'])
    return _ok(history, request.user, 'Prescription uploaded successfully')


@api_view(['POST'])
@permission_classes([IsPatientRole])
def submit_self_assessment(request):
    s = SelfAssessmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.submit_self_assessment(request.user, s.to_service())
    return _ok(history, request.user, 'Self-assessment submitted')


@api_view(['GET'])
@permission_classes([IsPatientRole])
def my_assessments(request):
    return Response({'ok': True, 'data': history_service.my_assessments(request.user)})


@api_view(['GET'])
@permission_classes([IsProfessional])
def assigned_assessments(request):
    return Response({'ok': True, 'data': history_service.assigned_to(request.user)})


@api_view(['PUT'])
@permission_classes([IsProfessional])
def post_assessment(request, pk):
    s = AssessmentReportSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.complete_assessment(
        pk, request.user, report_url=s.validated_data['reportUrl'], notes=s.validated_data.get('notes', ''),
    )
    return _ok(history)


@api_view(['POST'])
@permission_classes([IsPatientRole])
def pay_report(request, pk):
    s = ReportPaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.pay_report(pk, request.user, payment_id=s.validated_data.get('paymentId', ''))
    return _ok(history, request.user, 'Payment recorded. You can now download the report.')


@api_view(['POST'])
@permission_classes([IsPatientRole])
def review_assessment(request, pk):
    s = AssessmentReviewSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.submit_review(
        pk, request.user, rating=s.validated_data['rating'], feedback=s.validated_data.get('feedback', ''),
    )
    return _ok(history, request.user, 'Review submitted successfully')


# Admin

@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_self_assessments(request):
    return Response({'ok': True, 'data': history_service.submitted_assessments()})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_assign_pharmacist(request):
    s = AssignPharmacistSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.assign_pharmacist(
        request.user, patient_id=s.validated_data['patientId'], pharmacist_id=s.validated_data['pharmacistId'],
    )
    return _ok(history, message='Pharmacist assigned successfully')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_patient_history(request, pk):
    return Response({'ok': True, 'data': history_service.patient_history(pk)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_add_document(request):
    s = PatientDocumentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    history = history_service.add_document(
        request.user, patient_id=s.validated_data['patientId'], document_url=s.validated_data['reportUrl'],
    )
    return _ok(history, message='Test result uploaded successfully')
