"""API error mapping

Use cases return Result errors; routes raise ClientError, which the app
renders as {"error": {"code", "message", "reason"}}.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error

ERROR_STATUS_CODES: dict[str, int] = {
    "INSUFFICIENT_CREDITS": status.HTTP_402_PAYMENT_REQUIRED,
    "INVALID_CONFIGURATION": 422,
    "VALIDATION_ERROR": 422,
    "ACCOUNT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "JOB_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "JOB_NOT_CANCELLABLE": status.HTTP_409_CONFLICT,
    "QUEUE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        self.error = error
        if status_code is None:
            if error.code in ERROR_STATUS_CODES:
                status_code = ERROR_STATUS_CODES[error.code]
            elif error.code.endswith("_FAILED"):
                status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            else:
                status_code = status.HTTP_400_BAD_REQUEST
        self.status_code = status_code
        super().__init__(error.message)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error.to_dict()})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    error = Error(code="VALIDATION_ERROR", message=f"Invalid request parameters: {fields}")
    return JSONResponse(status_code=422, content={"error": error.to_dict()})
