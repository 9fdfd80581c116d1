"""Standardized `{success, data}` / `{success, error, message}` response envelopes."""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

GENERIC_ERROR_MESSAGE = "Something went wrong"


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data, by_alias=True)},
    )


def error_response(
    error: str, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": message},
    )


def validation_error_response(message: str) -> JSONResponse:
    return error_response("Validation Error", message, status.HTTP_400_BAD_REQUEST)


def server_error_response(message: str, expose_message: bool = True) -> JSONResponse:
    """500 envelope. Outside development-like environments the message is generic."""
    return error_response(
        "Internal Server Error",
        message if expose_message else GENERIC_ERROR_MESSAGE,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
