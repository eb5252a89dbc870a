"""
WSGI config for carebook.

Exposes the WSGI callable as ``application``. Slot update subscriptions
need the ASGI entrypoint in ``carebook.asgi``.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'carebook.settings')

application = get_wsgi_application()
