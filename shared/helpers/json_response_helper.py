# shared/helpers/json_response_helper.py
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from typing import Any

from shared.core.exceptions import AppException
from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.DATA_RETRIEVED_SUCCESSFULLY):
    return JsonOutResult(
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400):
    raise HTTPException(
        status_code=http_status,
        detail=JsonOutResult(
            data=None,
            status="Failure",
            status_code=status_code,
            message=message
        ).model_dump()
    )


def failure_content(message: str, status_code: str = AppStatusCode.OPERATION_FAILED) -> dict:
    return JsonOutResult(
        data=None,
        status="Failure",
        status_code=str(status_code),
        message=message
    ).model_dump()


def exception_response(exc: AppException) -> JSONResponse:
    return JSONResponse(
        content=failure_content(exc.message, exc.status_code),
        status_code=exc.http_status
    )
