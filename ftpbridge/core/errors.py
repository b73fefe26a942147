class ServiceError(Exception):
    """Base class for service errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class FTPConnectionError(ServiceError):
    """Raised when the FTP server cannot be reached or rejects the login."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class RemoteOperationError(ServiceError):
    """Raised when the FTP server rejects or aborts an operation."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
