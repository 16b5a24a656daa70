"""
Custom exceptions for the Order Lifecycle module.
"""

from typing import Dict, Any


class BusinessException(Exception):
    """Base exception for business logic errors."""

    def __init__(self, message: str, code: str = "BUSINESS_ERROR", details: Dict[str, Any] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class OrderNotFoundException(BusinessException):
    """Raised when an order does not exist within the caller's organization."""

    def __init__(self, order_id: Any = None):
        super().__init__("Order not found", "NOT_FOUND", {"order_id": str(order_id) if order_id else None})


class OrderLockedException(BusinessException):
    """Raised when a closed or canceled order may not be edited by the caller."""

    def __init__(self, message: str, code: str = "ORDER_LOCKED"):
        super().__init__(message, code)


class StatusPillException(BusinessException):
    """Raised when a status pill operation is not allowed."""

    def __init__(self, message: str, code: str = "STATUS_PILL_INVALID", details: Dict[str, Any] = None):
        super().__init__(message, code, details)


class ValidationException(BusinessException):
    """Raised when data validation fails."""

    def __init__(self, message: str, field_errors: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", field_errors or {})


class AuditWriteOutsideTransaction(RuntimeError):
    """Raised when an audit entry is written outside the mutation's transaction."""
