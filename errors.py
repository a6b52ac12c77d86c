"""Error boundary helpers shared by every route handler."""
import logging
from contextlib import contextmanager

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Missing or invalid fields"
MALFORMED_BODY_MESSAGE = "Failed to process request"


@contextmanager
def handle_errors(message: str):
    """Report anything other than an HTTPException as a static 500.

    The exception detail is logged server side and never sent to the client.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception:
        logger.exception(message)
        raise HTTPException(status_code=500, detail=message)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer schema violations with 400 and the offending field names.

    A body that is not parseable JSON at all is a server-side failure to read
    the request, reported like any other unexpected error.
    """
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        logger.error("Malformed JSON body on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=500, content={"detail": MALFORMED_BODY_MESSAGE})
    fields = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        if loc:
            fields.append(".".join(loc))
    logger.info("Rejected %s %s: invalid fields %s", request.method, request.url.path, fields)
    return JSONResponse(status_code=400, content={"detail": VALIDATION_MESSAGE, "fields": fields})
