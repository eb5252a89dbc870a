from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.serializers.admin import (
    PayoutSerializer,
    ProfessionalCreateSerializer,
    SuspendSerializer,
    UserListQuerySerializer,
)
from clinic.services import admin_panel
from clinic.services.professionals import professional_payload


@api_view(['GET'])
@permission_classes([IsAdminRole])
def list_users(request):
    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    page = q.validated_data.get('page', 1)
    page_size = q.validated_data.get('pageSize', 50)
    data, total = admin_panel.list_users(
        role=q.validated_data.get('role'), q=q.validated_data.get('q'), page=page, page_size=page_size,
    )
    return Response({'ok': True, 'data': data, 'pagination': {'total': total, 'page': page, 'pageSize': page_size}})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def suspend_user(request, pk):
    s = SuspendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = admin_panel.suspend(pk, request.user, s.validated_data['reason'])
    return Response({'ok': True, 'message': 'User suspended successfully', 'data': admin_panel.user_payload(user)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def unsuspend_user(request, pk):
    user = admin_panel.unsuspend(pk, request.user)
    return Response({'ok': True, 'message': 'User unsuspended successfully', 'data': admin_panel.user_payload(user)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def create_professional(request):
    s = ProfessionalCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    professional = admin_panel.create_professional(
        request.user, s.validated_data['userId'], s.validated_data['kind'], s.profile_fields(),
    )
    return Response({'ok': True, 'data': professional_payload(professional)}, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def delete_professional(request, pk):
    admin_panel.delete_professional(request.user, pk)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def mark_payouts(request):
    s = PayoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    n = admin_panel.mark_payouts_done(request.user, s.validated_data['bookingIds'])
    return Response({'ok': True, 'message': f'{n} payment(s) marked as done', 'modifiedCount': n})
