"""
Custom exceptions for the Storefront API
"""


class StorefrontException(Exception):
    """Base exception for all storefront errors"""
    status_code = 500

    def __init__(self, message: str, code: str = "STOREFRONT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationException(StorefrontException):
    """Raised for malformed or missing input"""
    status_code = 400

    def __init__(self, message: str, field: str = None, details: dict = None):
        self.field = field
        self.details = details or {}
        super().__init__(
            message=message,
            code="VALIDATION_ERROR"
        )


class NotFoundException(StorefrontException):
    """Raised when a referenced entity does not exist"""
    status_code = 404

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            message=f"{entity} not found with id of {identifier}",
            code="NOT_FOUND"
        )


class UnauthorizedException(StorefrontException):
    """Raised when the caller lacks ownership or the admin role"""
    status_code = 401

    def __init__(self, action: str):
        self.action = action
        super().__init__(
            message=f"Not authorized to {action}",
            code="UNAUTHORIZED"
        )


class OutOfStockException(StorefrontException):
    """Raised when a size is missing or has too little quantity"""
    status_code = 400

    def __init__(self, product_name: str, size: str, requested: int = None, available: int = None):
        self.product_name = product_name
        self.size = size
        self.requested = requested
        self.available = available
        super().__init__(
            message=f"Not enough stock for {product_name} (Size: {size})",
            code="OUT_OF_STOCK"
        )


class InvalidTransitionException(StorefrontException):
    """Raised when an order cannot move to the requested status"""
    status_code = 400

    def __init__(self, current: str, target: str, message: str = None):
        self.current = current
        self.target = target
        super().__init__(
            message=message or f"Order cannot move from {current} to {target}",
            code="INVALID_TRANSITION"
        )
