"""Credential issuer - New usernames and passwords for student logins."""

from __future__ import annotations

import logging
import secrets
import string

from academia.credentials.hasher import PasswordHasher
from academia.credentials.models import IssuedCredentials

logger = logging.getLogger(__name__)

PASSWORD_LENGTH = 8
PASSWORD_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_MIN = 100
SUFFIX_MAX = 999


def generate_username(first_name: str, paternal_surname: str) -> str:
    """Build ``<initial><SURNAME><nnn>``.

    The surname loses all whitespace and everything is upper-cased. The
    three digit suffix is random; collisions with existing usernames are
    not checked.
    """
    initial = first_name.strip()[:1]
    surname = "".join(paternal_surname.split())
    suffix = SUFFIX_MIN + secrets.randbelow(SUFFIX_MAX - SUFFIX_MIN + 1)
    return f"{initial}{surname}{suffix}".upper()


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Random lowercase alphanumeric password."""
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class CredentialIssuer:
    """Issues a username, a one-time plaintext password and its hash."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.hasher = hasher or PasswordHasher()

    def issue_credentials(self, first_name: str, paternal_surname: str) -> IssuedCredentials:
        """Issue a new login for a person.

        Args:
            first_name: Person's first name.
            paternal_surname: Person's paternal surname.

        Returns:
            IssuedCredentials. The plaintext password exists only on this
            object and must not be stored.
        """
        username = generate_username(first_name, paternal_surname)
        plain_password = generate_password()
        credentials = IssuedCredentials(
            username=username,
            plain_password=plain_password,
            password_hash=self.hasher.hash(plain_password),
        )
        logger.debug("Issued credentials for username %s", username)
        return credentials

    def verify(self, plain_password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash."""
        return self.hasher.verify(plain_password, password_hash)
