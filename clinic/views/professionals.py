from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.permissions import IsProfessional
from clinic.services.identity import resolve_professional
from clinic.services.professionals import get_professional, list_professionals, payment_stats


@api_view(['GET'])
@permission_classes([AllowAny])
def professional_list(request, kind):
    """Public list of professionals of one kind with upcoming slots and ratings."""
    return Response({'ok': True, 'data': list_professionals(kind)})


@api_view(['GET'])
@permission_classes([AllowAny])
def professional_detail(request, kind, pk):
    data = get_professional(kind, pk)
    if data is None:
        return Response({'ok': False, 'error': {'code': 'not_found', 'message': f'{kind.capitalize()} not found'}}, status=404)
    return Response({'ok': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsProfessional])
def my_payment_stats(request, kind):
    professional = resolve_professional(request.user, kind)
    return Response({'ok': True, 'data': payment_stats(professional)})
