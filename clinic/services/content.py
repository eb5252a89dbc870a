"""
Admin-managed website content: FAQs, customer-service channels and
legal pages.  Public readers only ever see active entries.
"""
from typing import Optional

from django.db import transaction
from rest_framework.exceptions import NotFound

from clinic.models import FAQ, CustomerServiceChannel, LegalPage, User
from clinic.services.audit import log_action

FAQ_FIELDS = {'question': 'question', 'answer': 'answer', 'category': 'category', 'order': 'order', 'isActive': 'is_active'}
CHANNEL_FIELDS = {
    'title': 'title',
    'description': 'description',
    'icon': 'icon',
    'contactMethod': 'contact_method',
    'contactValue': 'contact_value',
    'workingHours': 'working_hours',
    'order': 'order',
    'isActive': 'is_active',
}


def faq_payload(f: FAQ) -> dict:
    return {
        'id': f.id,
        'question': f.question,
        'answer': f.answer,
        'category': f.category,
        'order': f.order,
        'isActive': f.is_active,
    }


def channel_payload(c: CustomerServiceChannel) -> dict:
    return {
        'id': c.id,
        'title': c.title,
        'description': c.description,
        'icon': c.icon,
        'contactMethod': c.contact_method,
        'contactValue': c.contact_value,
        'workingHours': c.working_hours,
        'order': c.order,
        'isActive': c.is_active,
    }


def legal_payload(p: LegalPage) -> dict:
    return {
        'pageType': p.page_type,
        'title': p.title,
        'content': p.content,
        'version': p.version,
        'isActive': p.is_active,
        'lastUpdated': p.updated_at.isoformat(),
    }


def _apply(obj, data: dict, mapping: dict) -> None:
    for key, attr in mapping.items():
        if key in data:
            setattr(obj, attr, data[key])


# FAQs

def list_faqs(*, category: Optional[str] = None, active: Optional[bool] = True) -> list[dict]:
    qs = FAQ.objects.all()
    if category:
        qs = qs.filter(category=category)
    if active is not None:
        qs = qs.filter(is_active=active)
    return [faq_payload(f) for f in qs]


def create_faq(admin: User, data: dict) -> FAQ:
    faq = FAQ(created_by=admin)
    _apply(faq, data, FAQ_FIELDS)
    faq.save()
    log_action(user=admin, action='faq_created', object_type='faq', object_id=faq.id)
    return faq


def update_faq(faq_id: int, admin: User, data: dict) -> FAQ:
    faq = FAQ.objects.filter(pk=faq_id).first()
    if faq is None:
        raise NotFound('FAQ not found')
    _apply(faq, data, FAQ_FIELDS)
    faq.save()
    log_action(user=admin, action='faq_updated', object_type='faq', object_id=faq.id)
    return faq


def delete_faq(faq_id: int, admin: User) -> None:
    deleted, _ = FAQ.objects.filter(pk=faq_id).delete()
    if not deleted:
        raise NotFound('FAQ not found')
    log_action(user=admin, action='faq_deleted', object_type='faq', object_id=faq_id)


# Customer service channels

def list_channels(*, active_only: bool = True) -> list[dict]:
    qs = CustomerServiceChannel.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    return [channel_payload(c) for c in qs]


def create_channel(admin: User, data: dict) -> CustomerServiceChannel:
    channel = CustomerServiceChannel(created_by=admin)
    _apply(channel, data, CHANNEL_FIELDS)
    channel.save()
    log_action(user=admin, action='channel_created', object_type='customer_service', object_id=channel.id)
    return channel


def update_channel(channel_id: int, admin: User, data: dict) -> CustomerServiceChannel:
    channel = CustomerServiceChannel.objects.filter(pk=channel_id).first()
    if channel is None:
        raise NotFound('Customer service option not found')
    _apply(channel, data, CHANNEL_FIELDS)
    channel.save()
    log_action(user=admin, action='channel_updated', object_type='customer_service', object_id=channel.id)
    return channel


def delete_channel(channel_id: int, admin: User) -> None:
    deleted, _ = CustomerServiceChannel.objects.filter(pk=channel_id).delete()
    if not deleted:
        raise NotFound('Customer service option not found')
    log_action(user=admin, action='channel_deleted', object_type='customer_service', object_id=channel_id)


# Legal pages

def get_legal(page_type: str) -> dict:
    page = LegalPage.objects.filter(page_type=page_type, is_active=True).first()
    if page is None:
        raise NotFound('Page not found')
    return legal_payload(page)


def list_legal() -> list[dict]:
    return [legal_payload(p) for p in LegalPage.objects.order_by('page_type')]


@transaction.atomic
def upsert_legal(page_type: str, admin: User, data: dict) -> tuple[LegalPage, bool]:
    page, created = LegalPage.objects.select_for_update().get_or_create(
        page_type=page_type,
        defaults={'title': data['title'], 'content': data['content'], 'updated_by': admin},
    )
    if not created:
        page.title = data['title']
        page.content = data['content']
        page.updated_by = admin
    if data.get('version'):
        page.version = data['version']
    if 'isActive' in data:
        page.is_active = data['isActive']
    page.save()
    log_action(user=admin, action='legal_upserted', object_type='legal_page', object_id=page.id,
               detail={'page_type': page_type, 'created': created})
    return page, created


def delete_legal(page_type: str, admin: User) -> None:
    deleted, _ = LegalPage.objects.filter(page_type=page_type).delete()
    if not deleted:
        raise NotFound('Legal page not found')
    log_action(user=admin, action='legal_deleted', object_type='legal_page', detail={'page_type': page_type})


@transaction.atomic
def toggle_legal(page_type: str, admin: User) -> LegalPage:
    page = LegalPage.objects.select_for_update().filter(page_type=page_type).first()
    if page is None:
        raise NotFound('Legal page not found')
    page.is_active = not page.is_active
    page.updated_by = admin
    page.save(update_fields=['is_active', 'updated_by', 'updated_at'])
    log_action(user=admin, action='legal_toggled', object_type='legal_page', object_id=page.id,
               detail={'is_active': page.is_active})
    return page
