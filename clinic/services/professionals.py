from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Avg, Count, Q

from clinic.models import Booking, Professional, Slot
from clinic.services.slots import listing_cache_key, slot_payload, upcoming_q


def _stats_for(professional_ids) -> dict:
    rows = (
        Booking.objects.filter(professional_id__in=professional_ids, status=Booking.STATUS_COMPLETED)
        .values('professional_id')
        .annotate(
            completed=Count('id'),
            reviews=Count('id', filter=Q(review_rating__isnull=False)),
            avg_rating=Avg('review_rating'),
        )
    )
    return {r['professional_id']: r for r in rows}


def professional_payload(p: Professional, *, slots=None, stats: Optional[dict] = None) -> dict:
    stats = stats or {}
    avg = stats.get('avg_rating')
    return {
        'id': p.id,
        'kind': p.kind,
        'userId': p.user_id,
        'name': p.user.display_name,
        'email': p.user.email,
        'designation': p.designation,
        'specialization': p.specialization,
        'qualification': p.qualification,
        'experience': p.experience,
        'description': p.description,
        'photo': p.photo,
        'status': p.status,
        'consultationFee': p.consultation_fee,
        'isVerified': p.is_verified,
        'availableSlots': [slot_payload(s) for s in (slots or [])],
        'averageRating': round(avg, 1) if avg else 0,
        'totalReviews': stats.get('reviews', 0),
        'completedSessions': stats.get('completed', 0),
    }


def list_professionals(kind: str) -> list[dict]:
    """Public listing with upcoming slots and review stats, cached briefly."""
    key = listing_cache_key(kind)
    cached = cache.get(key)
    if cached is not None:
        return cached

    professionals = list(Professional.objects.filter(kind=kind).select_related('user').order_by('id'))
    ids = [p.id for p in professionals]
    by_professional = {pid: [] for pid in ids}
    for slot in Slot.objects.filter(upcoming_q(), professional_id__in=ids):
        by_professional[slot.professional_id].append(slot)
    stats = _stats_for(ids)

    data = [professional_payload(p, slots=by_professional[p.id], stats=stats.get(p.id)) for p in professionals]
    cache.set(key, data, settings.PROFESSIONAL_LIST_CACHE_SECONDS)
    return data


def get_professional(kind: str, professional_id: int) -> Optional[dict]:
    p = Professional.objects.filter(kind=kind, pk=professional_id).select_related('user').first()
    if p is None:
        return None
    slots = Slot.objects.filter(upcoming_q(), professional_id=p.id)
    return professional_payload(p, slots=slots, stats=_stats_for([p.id]).get(p.id))


def payment_stats(professional: Professional) -> dict:
    """Earnings on completed bookings, split into paid and outstanding."""
    bookings = list(
        Booking.objects.filter(professional=professional, status=Booking.STATUS_COMPLETED)
        .select_related('patient').order_by('slot_date', 'id')
    )
    paid = [b for b in bookings if b.professional_paid]
    unpaid = [b for b in bookings if not b.professional_paid]
    total_earned = sum(b.professional_share for b in bookings)
    total_paid = sum(b.professional_share for b in paid)

    def detail(b):
        return {
            'bookingId': b.id,
            'patientName': b.patient.display_name,
            'date': b.slot_date.isoformat(),
            'time': b.slot_time,
            'amount': b.professional_share,
        }

    return {
        'totalEarned': total_earned,
        'totalPaid': total_paid,
        'outstanding': total_earned - total_paid,
        'completedBookings': len(bookings),
        'paidBookings': len(paid),
        'unpaidBookings': len(unpaid),
        'unpaidBookingDetails': [detail(b) for b in unpaid],
        'paidBookingDetails': [detail(b) for b in paid],
    }
