"""Data models for the credentials module."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IssuedCredentials:
    """A freshly issued login.

    Attributes:
        username: Generated username.
        plain_password: Plaintext password, for one-time display only.
        password_hash: bcrypt hash of the password, safe to persist.
    """

    username: str
    plain_password: str = field(repr=False)
    password_hash: str = field(repr=False)
