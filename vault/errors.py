"""
Error taxonomy for the portal's external boundaries.

VaultError subclasses carry an HTTP status and a short, user-readable message;
the API layer turns them into JSON responses. Internal failures
(DocumentFetchError, ExplainerError) are recovered where they happen.
"""

from typing import Optional


class VaultError(Exception):
    """Base error with HTTP status for user-facing failures"""
    status_code = 500
    
    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequestError(VaultError):
    status_code = 400


class UnauthorizedError(VaultError):
    status_code = 401


class RateLimitExceededError(VaultError):
    """Caller exceeded quota; reset_in = seconds until the window frees up"""
    status_code = 429
    
    def __init__(self, reset_in: int):
        super().__init__(f"Rate limit exceeded. Try again in {reset_in}s.")
        self.reset_in = reset_in


class NotConfiguredError(VaultError):
    status_code = 500


class UpstreamError(VaultError):
    status_code = 502


class DocumentFetchError(Exception):
    """Agreement could not be fetched from its source"""


class ExplainerError(Exception):
    """AI explanation collaborator failed or returned nothing"""
