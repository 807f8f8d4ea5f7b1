# eventboard/core/exceptions.py
from fastapi import status

class AppException(Exception):
    """Base application error"""
    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail

class AuthenticationError(AppException):
    """Missing or expired credentials"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail)

class AuthorizationError(AppException):
    """Invalid token, or the caller does not own the resource"""
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(status.HTTP_403_FORBIDDEN, detail)

class ValidationError(AppException):
    """Missing or malformed input"""
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail)

class NotFoundError(AppException):
    """Resource not found"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail)

class InvalidIdentifierError(NotFoundError):
    """Identifier is not syntactically valid"""
    def __init__(self, detail: str = "Invalid ID"):
        super().__init__(detail)

class ConflictError(AppException):
    """Username or email already taken"""
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status.HTTP_406_NOT_ACCEPTABLE, detail)

class MediaUploadError(AppException):
    """Hosted media service rejected or failed an upload"""
    def __init__(self, detail: str = "Media upload failed"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)

class DatabaseError(AppException):
    """Database error"""
    def __init__(self, detail: str = "Database error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)

class MediaDeleteError(AppException):
    """Hosted media service failed to delete an asset"""
    def __init__(self, detail: str = "Media deletion failed"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)
