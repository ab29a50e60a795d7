"""Custom exceptions for the Nash Cards valuation tool"""

from __future__ import annotations


class NashCardsError(Exception):
    """Base exception for Nash Cards"""
    pass


class ConfigError(NashCardsError):
    """Stored state or configuration could not be read"""
    pass


class ValidationError(NashCardsError):
    """Missing or malformed user input"""
    pass


class MissingCredentialsError(ValidationError):
    """Email or password left empty on login"""
    pass


class AuthError(NashCardsError):
    """Credentials rejected"""
    pass


class DuplicateEmailError(AuthError):
    """Email already registered"""
    pass


class InvalidPasswordError(AuthError):
    """Password does not match the stored record"""
    pass


class NotFoundError(NashCardsError):
    """Requested record does not exist"""
    pass


class UserNotFoundError(AuthError, NotFoundError):
    """No account is registered under the email"""
    pass


class CardNotFoundError(NotFoundError):
    """Catalog returned no card for the query"""
    pass


class TransportError(NashCardsError):
    """Remote catalog call failed"""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class SessionExpiredError(NashCardsError):
    """Protected screen entered without an active session"""
    pass
