"""Request ID management for request correlation.

The ID lives in a context variable so every log line written while a
request is handled carries it, including lines from the workflow engine.
"""

import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Accept caller-supplied IDs only if they are short and printable
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def resolve_request_id(header_value: Optional[str]) -> str:
    """Reuse an incoming X-Request-ID if well-formed, else generate one."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return generate_request_id()


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> Token:
    return request_id_var.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_var.reset(token)
