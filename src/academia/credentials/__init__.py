"""Credentials package - Username generation and password hashing."""

from academia.credentials.hasher import PasswordHasher
from academia.credentials.issuer import (
    CredentialIssuer,
    generate_password,
    generate_username,
)
from academia.credentials.models import IssuedCredentials

__all__ = [
    "CredentialIssuer",
    "IssuedCredentials",
    "PasswordHasher",
    "generate_password",
    "generate_username",
]
