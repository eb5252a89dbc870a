"""
Slot collection editor.

Each professional owns a collection of :class:`~clinic.models.Slot`
rows.  Element-level operations (add, update, delete) touch one row and
never clobber concurrent edits to other slots.  The full replace kept
for older clients is guarded by the collection version: the caller
must send the version it read, the professional row is locked, and a
stale version is rejected with the current state attached.

Every successful mutation bumps ``Professional.slots_version``, writes
an audit event, invalidates the public listing cache and, once the
transaction commits, broadcasts ``slots.changed`` on the channel layer.
"""
from __future__ import annotations

import datetime
from functools import partial
from typing import Optional
from zoneinfo import ZoneInfo

import structlog
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.exceptions import SlotBooked, SlotConflict, SlotNotFound, VersionConflict, VersionRequired
from clinic.models import Professional, Slot, User, parse_slot_time
from clinic.services.audit import log_action

logger = structlog.get_logger(__name__)

# Never a real consultation date; used while a full replace reshuffles windows.
PARKING_DATE = datetime.date(1000, 1, 1)


def slots_group(professional_id: int) -> str:
    return f"slots.{professional_id}"


def listing_cache_key(kind: str) -> str:
    return f"professionals:{kind}"


def invalidate_listing(kind: str) -> None:
    cache.delete(listing_cache_key(kind))


def slot_payload(slot: Slot) -> dict:
    return {
        'id': slot.id,
        'date': slot.date.isoformat(),
        'startTime': slot.start_time,
        'endTime': slot.end_time,
        'isBooked': slot.is_booked,
        'version': slot.version,
    }


def _local_now(now: Optional[datetime.datetime] = None) -> tuple[datetime.date, int]:
    now = (now or timezone.now()).astimezone(ZoneInfo(settings.SLOT_TIMEZONE))
    return now.date(), now.hour * 60 + now.minute


def upcoming_q(now: Optional[datetime.datetime] = None) -> Q:
    """Slots whose end time is still in the future."""
    today, minutes = _local_now(now)
    return Q(date__gt=today) | Q(date=today, end_minutes__gt=minutes)


def expired_q(now: Optional[datetime.datetime] = None) -> Q:
    today, minutes = _local_now(now)
    return Q(date__lt=today) | Q(date=today, end_minutes__lte=minutes)


def collection_state(professional: Professional) -> dict:
    version = Professional.objects.values_list('slots_version', flat=True).get(pk=professional.pk)
    slots = Slot.objects.filter(professional_id=professional.pk)
    return {'slots': [slot_payload(s) for s in slots], 'version': version}


def _window(date, start_time: str, end_time: str) -> tuple:
    try:
        start, end = parse_slot_time(start_time), parse_slot_time(end_time)
    except ValueError as e:
        raise ValidationError({'time': [str(e)]})
    if end <= start:
        raise ValidationError({'endTime': ['End time must be after start time.']})
    return date, start, end


def _bump_version(professional: Professional) -> int:
    Professional.objects.filter(pk=professional.pk).update(slots_version=F('slots_version') + 1)
    professional.slots_version = Professional.objects.values_list('slots_version', flat=True).get(pk=professional.pk)
    return professional.slots_version


def broadcast_slots_changed(professional_id: int, version: int) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(slots_group(professional_id), {
        "type": "slots.changed",
        "professionalId": professional_id,
        "version": version,
    })


def record_change(professional: Professional, *, actor: Optional[User], action: str, detail: dict) -> int:
    """Bump the collection version and publish the change."""
    version = _bump_version(professional)
    log_action(user=actor, action=action, object_type='professional', object_id=professional.pk,
               detail={**detail, 'version': version})
    logger.info(action, professional_id=professional.pk, version=version, **detail)
    invalidate_listing(professional.kind)
    transaction.on_commit(partial(invalidate_listing, professional.kind))
    transaction.on_commit(partial(broadcast_slots_changed, professional.pk, version))
    return version


def _save_slot(slot: Slot) -> None:
    try:
        with transaction.atomic():
            slot.save()
    except IntegrityError:
        raise SlotConflict()


def _get_locked_slot(professional: Professional, slot_id: int) -> Slot:
    try:
        return Slot.objects.select_for_update().get(pk=slot_id, professional_id=professional.pk)
    except Slot.DoesNotExist:
        raise SlotNotFound()


def list_slots(professional: Professional) -> dict:
    return collection_state(professional)


@transaction.atomic
def add_slot(professional: Professional, *, date, start_time: str, end_time: str, actor: Optional[User] = None) -> tuple[Slot, int]:
    _, start, end = _window(date, start_time, end_time)
    if Slot.objects.filter(professional_id=professional.pk, date=date, start_minutes=start, end_minutes=end).exists():
        raise SlotConflict()
    slot = Slot(professional=professional, date=date, start_time=start_time, end_time=end_time)
    _save_slot(slot)
    version = record_change(professional, actor=actor, action='slot_added',
                            detail={'slot_id': slot.id, 'date': date.isoformat(), 'start': start_time, 'end': end_time})
    return slot, version


@transaction.atomic
def update_slot(professional: Professional, slot_id: int, *, changes: dict,
                expected_version: Optional[int] = None, actor: Optional[User] = None) -> tuple[Slot, int]:
    """Edit one unbooked slot.

    ``changes`` may hold ``date``, ``start_time`` and ``end_time``.  With
    ``expected_version`` the write only applies if the slot has not been
    modified since the caller read it.
    """
    slot = _get_locked_slot(professional, slot_id)
    if expected_version is not None and expected_version != slot.version:
        raise VersionConflict('The slot was modified by another request.', current=slot_payload(slot))
    if slot.is_booked:
        raise SlotBooked()

    date = changes.get('date', slot.date)
    start_time = changes.get('start_time', slot.start_time)
    end_time = changes.get('end_time', slot.end_time)
    _, start, end = _window(date, start_time, end_time)
    clash = (Slot.objects.filter(professional_id=professional.pk, date=date, start_minutes=start, end_minutes=end)
             .exclude(pk=slot.pk).exists())
    if clash:
        raise SlotConflict()

    slot.date, slot.start_time, slot.end_time = date, start_time, end_time
    slot.version += 1
    _save_slot(slot)
    version = record_change(professional, actor=actor, action='slot_updated', detail={'slot_id': slot.id})
    return slot, version


@transaction.atomic
def delete_slot(professional: Professional, slot_id: int, *, actor: Optional[User] = None) -> int:
    # the row lock serialises this against a concurrent booking claim
    slot = _get_locked_slot(professional, slot_id)
    if slot.is_booked:
        raise SlotBooked('Booked slots cannot be deleted.')
    slot.delete()
    return record_change(professional, actor=actor, action='slot_deleted', detail={'slot_id': slot_id})


@transaction.atomic
def replace_slots(professional: Professional, entries: list[dict], *, expected_version: Optional[int],
                  actor: Optional[User] = None) -> dict:
    """Reconcile the stored collection with ``entries``.

    Entries carrying an ``id`` update that slot, entries without one are
    created and stored slots missing from ``entries`` are deleted.  Any
    attempt to drop or edit a booked slot aborts the whole call.
    """
    if expected_version is None:
        raise VersionRequired()
    locked = Professional.objects.select_for_update().get(pk=professional.pk)
    if locked.slots_version != expected_version:
        raise VersionConflict(current=collection_state(locked))

    existing = {s.id: s for s in Slot.objects.select_for_update().filter(professional_id=locked.pk)}

    windows = set()
    kept = {}
    for entry in entries:
        window = _window(entry['date'], entry['start_time'], entry['end_time'])
        if window in windows:
            raise SlotConflict(f"Duplicate slot {entry['date'].isoformat()} {entry['start_time']}-{entry['end_time']}.")
        windows.add(window)
        slot_id = entry.get('id')
        if slot_id is None:
            continue
        if slot_id not in existing or slot_id in kept:
            raise SlotNotFound(f'Slot {slot_id} not found.')
        kept[slot_id] = entry

    removed = [s for sid, s in existing.items() if sid not in kept]
    for slot in removed:
        if slot.is_booked:
            raise SlotBooked(f'Slot {slot.id} is booked and cannot be removed.')
    Slot.objects.filter(pk__in=[s.id for s in removed]).delete()

    updated = created = 0
    changed = []
    for slot_id, entry in kept.items():
        slot = existing[slot_id]
        if (slot.date, slot.start_time, slot.end_time) == (entry['date'], entry['start_time'], entry['end_time']):
            continue
        if slot.is_booked:
            raise SlotBooked(f'Slot {slot.id} is booked and cannot be changed.')
        changed.append((slot, entry))

    # Park moving rows on distinct placeholder dates first, so a window
    # vacated by one slot can be taken by another regardless of order.
    for offset, (slot, _) in enumerate(changed):
        Slot.objects.filter(pk=slot.pk).update(date=PARKING_DATE + datetime.timedelta(days=offset))
    for slot, entry in changed:
        slot.date, slot.start_time, slot.end_time = entry['date'], entry['start_time'], entry['end_time']
        slot.version += 1
        _save_slot(slot)
        updated += 1

    for entry in entries:
        if entry.get('id') is None:
            _save_slot(Slot(professional=locked, date=entry['date'],
                            start_time=entry['start_time'], end_time=entry['end_time']))
            created += 1

    record_change(locked, actor=actor, action='slots_replaced',
                  detail={'created': created, 'updated': updated, 'deleted': len(removed)})
    professional.slots_version = locked.slots_version
    return collection_state(locked)


def purge_expired_slots(*, now: Optional[datetime.datetime] = None, dry_run: bool = False) -> int:
    """Delete unbooked slots whose end time has passed.

    Booked slots are left alone so the bookings keep pointing at them.
    """
    expired = Slot.objects.filter(expired_q(now), is_booked=False)
    if dry_run:
        return expired.count()
    total = 0
    professional_ids = set(expired.values_list('professional_id', flat=True))
    for professional in Professional.objects.filter(pk__in=professional_ids):
        with transaction.atomic():
            Professional.objects.select_for_update().filter(pk=professional.pk).first()
            deleted, _ = Slot.objects.filter(expired_q(now), professional_id=professional.pk, is_booked=False).delete()
            if deleted:
                record_change(professional, actor=None, action='expired_slots_purged', detail={'deleted': deleted})
                total += deleted
    return total
