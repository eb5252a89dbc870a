from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsPatientRole, IsProfessional
from clinic.serializers.bookings import (
    BookingCreateSerializer,
    MeetingLinkSerializer,
    ReportSerializer,
    RescheduleSerializer,
    ReviewSerializer,
    TestResultSerializer,
    TreatmentStatusSerializer,
)
from clinic.services import bookings as booking_service


@api_view(['GET'])
@permission_classes([AllowAny])
def available_slots(request, professional_id):
    return Response({'ok': True, 'data': booking_service.available_slots(professional_id)})


@api_view(['POST'])
@permission_classes([IsPatientRole])
def create_booking(request):
    s = BookingCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.create_booking(
        request.user,
        slot_id=s.validated_data['slotId'],
        service_type=s.validated_data['serviceType'],
        details=s.details(),
        payment_id=s.validated_data.get('paymentId', ''),
    )
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)}, status=status.HTTP_201_CREATED)


create_booking.cls.throttle_scope = 'booking_create'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_bookings(request):
    """Patients see what they booked; professionals see bookings against their slots."""
    return Response({'ok': True, 'data': booking_service.bookings_for(request.user)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def cancel_booking(request, pk):
    booking = booking_service.cancel_booking(pk, request.user)
    return Response({
        'ok': True,
        'message': 'Booking cancelled successfully. The slot is now available for other patients.',
        'data': booking_service.booking_payload(booking),
    })


@api_view(['PATCH'])
@permission_classes([IsProfessional])
def reschedule_booking(request, pk):
    s = RescheduleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.reschedule_booking(pk, request.user, slot_id=s.validated_data['slotId'])
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)})


@api_view(['PATCH'])
@permission_classes([IsProfessional])
def meeting_link(request, pk):
    s = MeetingLinkSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.set_meeting_link(pk, request.user, s.validated_data['meetLink'])
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)})


@api_view(['PUT'])
@permission_classes([IsProfessional])
def submit_report(request, pk):
    s = ReportSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.submit_report(pk, request.user, s.validated_data['reportUrl'])
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)})


@api_view(['PUT'])
@permission_classes([IsProfessional])
def upload_test_result(request, pk):
    s = TestResultSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.add_test_result(pk, request.user, s.validated_data['testResultUrl'])
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)})


@api_view(['PATCH'])
@permission_classes([IsProfessional])
def treatment_status(request, pk):
    s = TreatmentStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.set_treatment_status(pk, request.user, s.validated_data['treatmentStatus'])
    message = 'Treatment completed and booking closed' if booking.status == 'completed' else 'Treatment status updated'
    return Response({'ok': True, 'message': message, 'data': booking_service.booking_payload(booking)})


@api_view(['POST'])
@permission_classes([IsPatientRole])
def submit_review(request, pk):
    s = ReviewSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    booking = booking_service.submit_review(
        pk, request.user, rating=s.validated_data['rating'], feedback=s.validated_data.get('feedback', ''),
    )
    return Response({'ok': True, 'data': booking_service.booking_payload(booking)})


@api_view(['GET'])
@permission_classes([AllowAny])
def professional_reviews(request, professional_id):
    return Response({'ok': True, **booking_service.reviews_for(professional_id)})
