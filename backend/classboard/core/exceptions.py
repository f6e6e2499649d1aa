class AppError(Exception):
    """Base class for all classboard exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class NotFoundError(AppError):
    """Raised when an id-based lookup must report a miss to the caller."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id

class ParseError(AppError):
    """Raised when a time or date value cannot be parsed."""
    def __init__(self, value, expected: str = "ISO date-time"):
        super().__init__(
            f"Could not parse {value!r} as {expected}",
            status_code=400,
            details={"value": str(value), "expected": expected},
        )

class ValidationError(AppError):
    """Raised when an operation would break a queue invariant."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)
