from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger.common.exceptions import (
    LedgerError,
    MalformedRecordError,
    PostingValidationError,
    SnapshotImportError,
    StorageError,
)
from ledger.logger_config import logger


def _error_response(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "error": error,
            "status_code": status_code,
        },
    )


def register_error_handlers(app: FastAPI):
    @app.exception_handler(PostingValidationError)
    async def handle_posting_error(request: Request, exc: PostingValidationError):
        logger.warning(f"Posting rejected ({exc.kind.value}): {exc.message}")
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.kind.value)

    @app.exception_handler(MalformedRecordError)
    async def handle_malformed_record(request: Request, exc: MalformedRecordError):
        logger.error(f"Malformed ledger data (record {exc.record_id}): {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "MalformedRecord")

    @app.exception_handler(SnapshotImportError)
    async def handle_snapshot_import_error(request: Request, exc: SnapshotImportError):
        logger.warning(f"Snapshot import rejected (record {exc.record_id}): {exc}")
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), "InvalidSnapshot")

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(f"Storage failure: {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "StorageError")

    @app.exception_handler(LedgerError)
    async def handle_ledger_error(request: Request, exc: LedgerError):
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), type(exc).__name__)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), "HTTPException")

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, exc: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", str(exc))
