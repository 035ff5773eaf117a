# app/api/v1/responses.py
# ContentResult / PageSectionsResult -> JSONResponse con el status del código de error
from __future__ import annotations

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.services.errors import status_for_code


def respond(result: BaseModel, *, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """El body siempre es el resultado completo; solo cambia el status HTTP."""
    failed = getattr(result, "error", None) is not None or getattr(result, "success", True) is False
    code = status_for_code(getattr(result, "code", None)) if failed else success_status
    return JSONResponse(status_code=code, content=jsonable_encoder(result))
