from typing import NoReturn

from fastapi import HTTPException
from pydantic import ValidationError


def raise_http_error(status_code: int, code: str, message: str) -> NoReturn:
    raise HTTPException(status_code=status_code, detail={"code": code, "message": message})


def validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid payload"
    location = ".".join(str(part) for part in errors[0].get("loc", ()))
    message = errors[0].get("msg", "invalid value")
    return f"{location}: {message}" if location else message
