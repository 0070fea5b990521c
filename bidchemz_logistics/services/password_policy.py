"""Password strength rules applied on signup and password reset."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

MIN_LENGTH = 8
# bcrypt ignores (and newer releases reject) anything past 72 bytes
MAX_BYTES = 72
SPECIAL_CHARACTERS = r'!@#$%^&*(),.?":{}|<>'
WEAK_PASSWORDS = ("password", "12345678", "qwerty123", "admin123", "letmein")


@dataclass
class PasswordValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def validate_password_strength(password: str) -> PasswordValidationResult:
    """Check ``password`` against every rule and collect all failures."""
    errors: List[str] = []

    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long")
    if len(password.encode("utf-8")) > MAX_BYTES:
        errors.append(f"Password must be at most {MAX_BYTES} bytes long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not any(ch in SPECIAL_CHARACTERS for ch in password):
        errors.append("Password must contain at least one special character")
    if any(weak in password.lower() for weak in WEAK_PASSWORDS):
        errors.append("Password is too common or weak")

    return PasswordValidationResult(is_valid=not errors, errors=errors)
