"""
Sorting backend failures into connectivity problems, business-rule
rejections and everything else.
"""
import socket
from enum import Enum

import httpx

from daily_ideas.core.errors import DomainError

NETWORK_MARKERS = (
    "failed to fetch",
    "network error",
    "networkerror",
    "connection refused",
    "connection reset",
    "connection aborted",
    "connecterror",
    "timed out",
    "timeout",
    "unavailable",
    "name or service not known",
    "temporary failure in name resolution",
    "nodename nor servname",
)

NETWORK_ERROR_TYPES = (
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
    socket.gaierror,
)

# PostgreSQL class 23: integrity constraint violations (duplicates and the like)
INTEGRITY_CODE_PREFIX = "23"


class ErrorKind(str, Enum):
    CONNECTIVITY = "connectivity"
    DOMAIN = "domain"
    REMOTE = "remote"


def error_message(error: BaseException) -> str:
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


def classify_error(error: BaseException, online: bool = True) -> ErrorKind:
    if isinstance(error, DomainError):
        return ErrorKind.DOMAIN
    if not online or isinstance(error, NETWORK_ERROR_TYPES):
        return ErrorKind.CONNECTIVITY

    code = str(getattr(error, "code", "") or "")
    if "unavailable" in code.lower():
        return ErrorKind.CONNECTIVITY
    if code.startswith(INTEGRITY_CODE_PREFIX):
        return ErrorKind.DOMAIN

    text = f"{type(error).__name__} {error_message(error)}".lower()
    if any(marker in text for marker in NETWORK_MARKERS):
        return ErrorKind.CONNECTIVITY
    return ErrorKind.REMOTE
