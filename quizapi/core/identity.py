"""Content-derived user identifiers.

A user's id is the SHA-256 hex digest of their normalized email address.
Normalization strips surrounding whitespace and lower-cases the whole address,
so ``Ada@Example.com`` and ``ada@example.COM`` derive the same id.
"""

import hashlib

from quizapi.core.errors import InvalidInputError


def normalize_email(email: str | None) -> str:
    normalized = (email or '').strip().lower()
    if not normalized:
        raise InvalidInputError('Email is required.')

    if any(character.isspace() for character in normalized):
        raise InvalidInputError('Email must not contain whitespace.')

    local_part, separator, domain = normalized.rpartition('@')
    if not separator or not local_part or not domain:
        raise InvalidInputError('Email must look like name@domain.')

    return normalized


def derive_user_id(email: str | None) -> str:
    normalized = normalize_email(email)
    return hashlib.sha256(normalized.encode('utf-8')).hexdigest()
