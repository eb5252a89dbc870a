from rest_framework.exceptions import PermissionDenied

from clinic.exceptions import ProfessionalNotFound
from clinic.models import Professional, User


def resolve_professional(user: User, kind: str) -> Professional:
    """Return the professional profile bound to ``user``.

    The binding is the OneToOne relation on :class:`Professional`; there
    is no fallback matching by email or name.  A profile of a different
    kind than the endpoint serves is refused.
    """
    try:
        professional = Professional.objects.select_related('user').get(user=user)
    except Professional.DoesNotExist:
        raise ProfessionalNotFound(f'{kind.capitalize()} profile not found')
    if professional.kind != kind:
        raise PermissionDenied(f'This endpoint is for {kind}s only')
    return professional


def professional_for(user: User):
    """The caller's profile of any kind, or None."""
    if getattr(user, 'role', None) not in (User.ROLE_PHARMACIST, User.ROLE_DOCTOR, User.ROLE_NUTRITIONIST):
        return None
    return Professional.objects.filter(user=user).first()
