"""
Bearer token authentication.

Tokens are signed JWTs issued by the identity provider; this service
only verifies them.  The subclass exists to give the settings a stable
import path and to refuse suspended accounts.
"""
from __future__ import annotations

from rest_framework import exceptions
from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerAuthentication(JWTAuthentication):
    """``Authorization: Bearer <jwt>`` with the ``userId`` claim."""

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if getattr(user, 'is_suspended', False):
            reason = user.suspension_reason or 'No reason provided'
            raise exceptions.AuthenticationFailed(f'Account suspended: {reason}', code='account_suspended')
        return user
