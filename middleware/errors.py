"""
Centralized custom exception definitions for the program roster backend.

Each exception inherits from BaseAppError, which itself extends Werkzeug's
HTTPException, allowing clean integration with Flask's error system and
JSON-formatted API responses.

Domain Groups:
--------------
1. Request Errors (400–404)
2. Import Errors (422)
3. Database Errors (503)
4. System Errors (500)

Row-level problems inside a bulk import are *not* raised; they are collected
into the import outcome instead.
"""

from werkzeug.exceptions import HTTPException


class BaseAppError(HTTPException):
    """Root application error, base for all custom exceptions."""
    code = 500
    description = "Application error"

    def __init__(self, message=None, details=None, code=None):
        super().__init__(description=message or self.description)
        self.message = message or self.description
        self.details = details or {}
        if code:
            self.code = code

    def to_dict(self):
        """Serialize error info into a JSON-safe dictionary."""
        return {
            "status": "error",
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# ==============================================================================
# 1. REQUEST ERRORS (HTTP 400–404)
# ==============================================================================

class ValidationError(BaseAppError):
    code = 400
    description = "Validation error"


class MissingContentError(ValidationError):
    description = "csvContent is required"


class EmptyDataError(ValidationError):
    description = "No data rows found in CSV"


class InvalidKindError(ValidationError):
    description = 'Type must be "delegates" or "staff"'


class NothingToAssignError(ValidationError):
    description = "No unassigned delegates to assign"


class AuthenticationError(BaseAppError):
    code = 401
    description = "Authentication required"


class ForbiddenError(BaseAppError):
    code = 403
    description = "Forbidden"


class RecordNotFoundError(BaseAppError):
    code = 404
    description = "Requested record not found"


# ==============================================================================
# 2. IMPORT ERRORS (HTTP 422)
# ==============================================================================

class ImportParsingError(BaseAppError):
    code = 422
    description = "Failed to parse import file"


# ==============================================================================
# 3. DATABASE ERRORS (HTTP 503)
# ==============================================================================

class DatabaseConnectionError(BaseAppError):
    code = 503
    description = "Database connection failed"


# ==============================================================================
# 4. SYSTEM ERRORS (HTTP 500)
# ==============================================================================

class ConfigurationError(BaseAppError):
    code = 500
    description = "Configuration missing or invalid"
