from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
import traceback
from .logger import logger


class DocGenBaseException(Exception):
    """Base exception for the document generation service"""
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500):
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(self.message)


class StorageError(DocGenBaseException):
    """Raised when the job store cannot be reached"""
    def __init__(self, message: str = "Job store operation failed"):
        super().__init__(message, "STORAGE_ERROR", 503)


class GenerationServiceError(DocGenBaseException):
    """Raised when the generation service fails or answers with a non-success status"""
    def __init__(self, message: str = "Generation service request failed"):
        super().__init__(message, "GENERATION_SERVICE_ERROR", 502)


class InvalidResponseFormatError(DocGenBaseException):
    """Raised when the generation service answers with neither JSON nor HTML"""
    def __init__(self, message: str = "Invalid response format"):
        super().__init__(message, "INVALID_RESPONSE_FORMAT", 502)


class ExportError(DocGenBaseException):
    """Raised when PDF or DOCX conversion fails"""
    def __init__(self, message: str = "Document export failed"):
        super().__init__(message, "EXPORT_ERROR", 500)


async def docgen_exception_handler(request: Request, exc: DocGenBaseException):
    """Handle custom application exceptions"""
    logger.error(
        f"Application exception: {exc.code} - {exc.message}",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "request_path": request.url.path,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "status_code": exc.status_code,
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions"""
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        extra={
            "http_status_code": exc.status_code,
            "http_detail": exc.detail,
            "request_path": request.url.path,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP_ERROR",
            "message": exc.detail,
            "status_code": exc.status_code,
        }
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
            "request_path": request.url.path,
            "exc_traceback": traceback.format_exc(),
        }
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_SERVER_ERROR",
            "message": "An internal error occurred. Please try again later.",
        }
    )
