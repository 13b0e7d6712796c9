import re
from typing import Optional

from .models import Profile, VerificationRequest


def normalize_iraqi_phone(phone: str) -> Optional[str]:
    """
    Normalize an Iraqi mobile number to its 10 national digits.

    Accepts 07XXXXXXXXX, 9647XXXXXXXXX and +9647XXXXXXXXX (separators are
    ignored). Returns None when the result is not 10 digits starting with 7.
    """
    if not phone:
        return None
    digits = re.sub(r'\D', '', phone)
    if len(digits) == 11 and digits.startswith('07'):
        digits = digits[1:]
    elif len(digits) == 12 and digits.startswith('9647'):
        digits = digits[3:]
    elif len(digits) == 14 and digits.startswith('009647'):
        digits = digits[5:]
    if len(digits) == 10 and digits.startswith('7'):
        return digits
    return None


def international_phone(phone: Optional[str]) -> Optional[str]:
    """+964 form of a normalized phone, used for WhatsApp links"""
    return f"+964{phone}" if phone else None


def get_or_create_profile(user):
    profile, _ = Profile.objects.get_or_create(
        user=user,
        defaults={'first_name': user.first_name or None, 'last_name': user.last_name or None},
    )
    return profile


def get_verification_status(user):
    """
    Verification status shown to the user: the latest request's status,
    otherwise 'approved' for profiles verified by other means, else 'none'.
    """
    latest = VerificationRequest.objects.filter(user=user).order_by('-created_at', '-id').first()
    if latest:
        return latest.status
    if Profile.objects.filter(user=user, is_verified=True).exists():
        return 'approved'
    return 'none'
