"""Storefront error taxonomy

Every error carries a stable ``code`` and a user-facing ``message``; the API
layer turns them into JSON responses with ``status_code``.
"""

from typing import Dict, List, Optional


class StorefrontError(Exception):
    """Base class for errors surfaced to storefront clients"""
    code = "storefront_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(StorefrontError):
    """Bad user input, attributed to form fields where possible"""
    code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str = "Please correct the highlighted fields",
        fields: Optional[Dict[str, str]] = None,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.fields = fields or {}
        self.errors = errors or list(self.fields.values())

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["fields"] = self.fields
        data["errors"] = self.errors
        return data


class InvalidScheduleError(ValidationError):
    """Scheduled date and time do not resolve to a future moment"""
    code = "invalid_schedule"

    def __init__(self, message: str = "Scheduled time must be in the future"):
        super().__init__(message, fields={"scheduled_time": message})


class EmptyCartError(StorefrontError):
    """Checkout attempted with no items in the cart"""
    code = "empty_cart"
    status_code = 400

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class AuthError(StorefrontError):
    """Credentials were rejected (user sign-in or gateway token exchange)"""
    code = "auth_error"
    status_code = 401


class GatewayError(StorefrontError):
    """The payment provider answered with a non-success response"""
    code = "gateway_error"
    status_code = 502


class NotFoundError(StorefrontError):
    """A lookup missed"""
    code = "not_found"
    status_code = 404


class NetworkError(StorefrontError):
    """A dependency could not be reached; the operation can be retried"""
    code = "network_error"
    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable, please try again"):
        super().__init__(message)
