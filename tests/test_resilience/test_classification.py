"""Tests for sorting backend failures"""
import socket

import httpx
import pytest

from daily_ideas.core.errors import InvalidInviteCodeError, AlreadyMemberError
from daily_ideas.resilience.classification import ErrorKind, classify_error, error_message


class CodedError(Exception):
    """Mimics the API errors raised by the Supabase client"""

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code


@pytest.mark.parametrize("error", [
    httpx.ConnectError("Connection refused"),
    httpx.ReadTimeout("read timed out"),
    ConnectionResetError("reset by peer"),
    TimeoutError(),
    socket.gaierror("Name or service not known"),
    RuntimeError("Failed to fetch"),
    RuntimeError("NetworkError when attempting to fetch resource"),
    CodedError("service down", code="service_unavailable"),
])
def test_connectivity_errors(error):
    assert classify_error(error) is ErrorKind.CONNECTIVITY


@pytest.mark.parametrize("error", [
    InvalidInviteCodeError(),
    AlreadyMemberError(),
    CodedError("duplicate key value violates unique constraint", code="23505"),
])
def test_domain_errors(error):
    assert classify_error(error) is ErrorKind.DOMAIN


def test_other_errors_are_remote():
    assert classify_error(CodedError("permission denied for table ideas", code="42501")) is ErrorKind.REMOTE
    assert classify_error(KeyError("id")) is ErrorKind.REMOTE


def test_anything_is_connectivity_while_offline():
    assert classify_error(KeyError("id"), online=False) is ErrorKind.CONNECTIVITY


def test_domain_errors_win_even_offline():
    assert classify_error(InvalidInviteCodeError(), online=False) is ErrorKind.DOMAIN


def test_error_message_prefers_message_attribute():
    assert error_message(CodedError("bad row", code="23502")) == "bad row"
    assert error_message(ValueError("plain")) == "plain"
