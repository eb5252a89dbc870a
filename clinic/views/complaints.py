from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.serializers.complaints import (
    ComplaintAssignSerializer,
    ComplaintListQuerySerializer,
    ComplaintNoteSerializer,
    ComplaintRatingSerializer,
    ComplaintRespondSerializer,
    ComplaintStatusSerializer,
    ComplaintSubmitSerializer,
    ComplaintUpdateSerializer,
)
from clinic.services import complaints as complaint_service


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def submit_complaint(request):
    s = ComplaintSubmitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.submit(request.user, s.to_service())
    return Response({'ok': True, 'message': 'Complaint submitted successfully',
                     'data': complaint_service.complaint_payload(c)}, status=status.HTTP_201_CREATED)


submit_complaint.cls.throttle_scope = 'complaint_submit'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_complaints(request):
    return Response({'ok': True, 'data': complaint_service.list_mine(request.user)})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def complaint_detail(request, pk):
    if request.method == 'GET':
        return Response({'ok': True, 'data': complaint_service.detail(pk, request.user)})
    s = ComplaintUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.update_own(pk, request.user, s.validated_data)
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def rate_complaint(request, pk):
    s = ComplaintRatingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.rate(pk, request.user, s.validated_data['rating'])
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c)})


# ---------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_complaints(request):
    """List complaints.
    Query params:
      - status, category, priority, assignedTo, search: filters
      - page, limit: pagination (limit at most 100)
    """
    q = ComplaintListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    result = complaint_service.admin_list(
        status=v.get('status'),
        category=v.get('category'),
        priority=v.get('priority'),
        assigned_to=v.get('assignedTo'),
        search=v.get('search'),
        page=v.get('page', 1),
        limit=v.get('limit', 20),
    )
    return Response({'ok': True, **result})


@api_view(['PUT'])
@permission_classes([IsAdminRole])
def admin_assign(request, pk):
    s = ComplaintAssignSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.assign(pk, request.user, s.validated_data['assignedTo'])
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c)})


@api_view(['PUT'])
@permission_classes([IsAdminRole])
def admin_status(request, pk):
    s = ComplaintStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.set_status(pk, request.user, s.validated_data['status'], s.validated_data.get('message', ''))
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_respond(request, pk):
    s = ComplaintRespondSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.respond(pk, request.user, s.validated_data['message'])
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def admin_note(request, pk):
    s = ComplaintNoteSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = complaint_service.add_note(pk, request.user, s.validated_data['note'])
    return Response({'ok': True, 'data': complaint_service.complaint_payload(c, include_notes=True)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_statistics(request):
    return Response({'ok': True, 'data': complaint_service.statistics()})
