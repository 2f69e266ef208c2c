class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class BadRequestError(AppError):
    """Raised when a request is well-formed but not allowed in the current state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ConflictError(AppError):
    """Raised when a teacher, room or student slot is already occupied."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class DuplicateResourceError(AppError):
    """Raised when a unique code or registration already exists."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)
