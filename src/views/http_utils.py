import uuid
from typing import Dict, Optional, Type, TypeVar

import azure.functions as func
from pydantic import BaseModel, ValidationError as PydanticValidationError

from src.shared.logging_utils import bind_trace_id, current_trace_id, error as log_error
from src.specs.common.error_response_spec import ErrorResponse, Notice
from src.specs.common.errors import BlogError, ValidationError

M = TypeVar("M", bound=BaseModel)


def begin_request(req: func.HttpRequest) -> str:
    """Bind a trace id for this invocation, reusing the caller's request id when present."""
    trace_id = req.headers.get("x-request-id") or uuid.uuid4().hex
    bind_trace_id(trace_id)
    return trace_id


def notice(title: str, description: str, *, destructive: bool = False) -> Notice:
    return Notice(title=title, description=description, variant="destructive" if destructive else "default")


def json_response(model: BaseModel, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> func.HttpResponse:
    return func.HttpResponse(
        body=model.model_dump_json(),
        mimetype="application/json",
        status_code=status_code,
        headers=headers,
    )


def error_response(exc: BlogError, title: str = "Error") -> func.HttpResponse:
    log_error(current_trace_id(), "http:error", code=exc.code, error=str(exc))
    err = ErrorResponse(
        message=str(exc),
        error_code=exc.code,
        details=exc.details or None,
        notice=notice(title, str(exc), destructive=True),
    )
    return json_response(err, status_code=exc.http_status)


def parse_body(req: func.HttpRequest, model: Type[M]) -> M:
    try:
        data = req.get_json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON body") from exc
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model(**data)
    except PydanticValidationError as exc:
        fields = [".".join(str(p) for p in e["loc"]) for e in exc.errors()]
        raise ValidationError("Invalid request", details={"fields": fields}) from exc
