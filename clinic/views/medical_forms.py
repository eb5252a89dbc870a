from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import MedicalForm
from clinic.permissions import IsAdminRole, IsPatientRole, IsProfessional
from clinic.serializers.medical_forms import (
    MedicalFormAssignSerializer,
    MedicalFormListQuerySerializer,
    MedicalFormResultSerializer,
    MedicalFormSubmitSerializer,
)
from clinic.services import medical_forms as form_service


@api_view(['POST'])
@permission_classes([IsPatientRole])
def submit_form(request):
    s = MedicalFormSubmitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    form = form_service.submit(request.user, s.to_service())
    return Response({'ok': True, 'data': form_service.form_payload(form)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_forms(request):
    return Response({'ok': True, 'data': form_service.list_for_patient(request.user)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def pending_forms(request):
    return Response({'ok': True, 'data': form_service.list_all(MedicalForm.STATUS_PENDING)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def all_forms(request):
    q = MedicalFormListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return Response({'ok': True, 'data': form_service.list_all(q.validated_data.get('status'))})


@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def assign_form(request, pk):
    s = MedicalFormAssignSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    form = form_service.assign(pk, request.user, s.validated_data['professionalId'])
    return Response({'ok': True, 'data': form_service.form_payload(form)})


@api_view(['GET'])
@permission_classes([IsProfessional])
def assigned_forms(request):
    return Response({'ok': True, 'data': form_service.assigned_to(request.user)})


@api_view(['PATCH'])
@permission_classes([IsProfessional])
def post_result(request, pk):
    s = MedicalFormResultSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    form = form_service.post_result(
        pk, request.user,
        result_pdf_url=s.validated_data['resultPdfUrl'],
        result_notes=s.validated_data.get('resultNotes', ''),
    )
    return Response({'ok': True, 'data': form_service.form_payload(form)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def form_detail(request, pk):
    return Response({'ok': True, 'data': form_service.detail(pk, request.user)})
