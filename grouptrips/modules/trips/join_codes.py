"""Human-shareable join codes."""

from __future__ import annotations

import secrets

# Ambiguous characters (0/O, 1/I/L) are left out.
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6


def generate_join_code(length: int = JOIN_CODE_LENGTH, alphabet: str = JOIN_CODE_ALPHABET) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def normalize_join_code(code: str) -> str:
    return code.strip().upper()
