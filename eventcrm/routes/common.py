from fastapi import status
from fastapi.responses import JSONResponse

from eventcrm.services.forms import FieldError


def validation_failed(errors: list[FieldError]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"errors": [error.as_dict() for error in errors]},
    )
