"""
Website content endpoints.

Reads under ``/api/website/`` are public; writes are admin only.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.models import LegalPage
from clinic.permissions import IsAdminOrReadOnly, IsAdminRole
from clinic.serializers.content import (
    CustomerServiceSerializer,
    FAQListQuerySerializer,
    FAQSerializer,
    LegalPageSerializer,
)
from clinic.services import content as content_service

PAGE_TYPES = {p for p, _ in LegalPage.PAGE_TYPES}


def _invalid_page_type():
    return Response({'ok': False, 'error': {'code': 'invalid_page_type', 'message': 'Invalid page type'}}, status=400)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def faqs(request):
    if request.method == 'GET':
        q = FAQListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response({'ok': True, 'data': content_service.list_faqs(
            category=q.validated_data.get('category'), active=q.validated_data.get('active'),
        )})
    s = FAQSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    faq = content_service.create_faq(request.user, s.validated_data)
    return Response({'ok': True, 'data': content_service.faq_payload(faq)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def faq_detail(request, pk):
    if request.method == 'DELETE':
        content_service.delete_faq(pk, request.user)
        return Response({'ok': True})
    s = FAQSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    faq = content_service.update_faq(pk, request.user, s.validated_data)
    return Response({'ok': True, 'data': content_service.faq_payload(faq)})


@api_view(['GET', 'POST'])
@permission_classes([IsAdminOrReadOnly])
def customer_service(request):
    if request.method == 'GET':
        return Response({'ok': True, 'data': content_service.list_channels()})
    s = CustomerServiceSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    channel = content_service.create_channel(request.user, s.validated_data)
    return Response({'ok': True, 'data': content_service.channel_payload(channel)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def customer_service_detail(request, pk):
    if request.method == 'DELETE':
        content_service.delete_channel(pk, request.user)
        return Response({'ok': True})
    s = CustomerServiceSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    channel = content_service.update_channel(pk, request.user, s.validated_data)
    return Response({'ok': True, 'data': content_service.channel_payload(channel)})


@api_view(['GET'])
@permission_classes([AllowAny])
def legal_page(request, page_type):
    if page_type not in PAGE_TYPES:
        return _invalid_page_type()
    return Response({'ok': True, 'data': content_service.get_legal(page_type)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_legal_pages(request):
    return Response({'ok': True, 'data': content_service.list_legal()})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def admin_legal_page(request, page_type):
    if page_type not in PAGE_TYPES:
        return _invalid_page_type()
    if request.method == 'DELETE':
        content_service.delete_legal(page_type, request.user)
        return Response({'ok': True})
    s = LegalPageSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    page, created = content_service.upsert_legal(page_type, request.user, s.validated_data)
    return Response({'ok': True, 'data': content_service.legal_payload(page)},
                    status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['PATCH'])
@permission_classes([IsAdminRole])
def admin_legal_toggle(request, page_type):
    if page_type not in PAGE_TYPES:
        return _invalid_page_type()
    page = content_service.toggle_legal(page_type, request.user)
    return Response({'ok': True, 'data': content_service.legal_payload(page)})
