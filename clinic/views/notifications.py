from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.services import notifications as notification_service


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def notifications(request):
    """List own notifications newest first (``?unread=1`` for unread only), or delete them all."""
    if request.method == 'DELETE':
        deleted = notification_service.delete_for(request.user)
        return Response({'ok': True, 'deleted': deleted})
    unread_only = (request.query_params.get('unread') or '0') in ['1', 'true', 'True']
    return Response({'ok': True, 'data': notification_service.list_for(request.user, unread_only=unread_only)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_count(request):
    return Response({'ok': True, 'count': notification_service.unread_count(request.user)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def mark_read(request, pk):
    updated = notification_service.mark_read(request.user, [pk])
    if not updated and not request.user.notifications.filter(pk=pk).exists():
        raise NotFound('Notification not found')
    return Response({'ok': True})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def mark_all_read(request):
    return Response({'ok': True, 'updated': notification_service.mark_read(request.user)})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_notification(request, pk):
    if not notification_service.delete_for(request.user, [pk]):
        raise NotFound('Notification not found')
    return Response({'ok': True})
