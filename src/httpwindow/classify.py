# src/httpwindow/classify.py
"""Transport outcome classification.

Transport outcome codes use libcurl's numbering so that results stay
comparable with curl-based tooling. ``classify_outcome`` is a pure, total
function: every integer maps to a stable symbolic name, and codes outside the
known range map to ``UNKNOWN_TRANSPORT_ERROR``.
"""

from __future__ import annotations

from enum import IntEnum

UNKNOWN_TRANSPORT_ERROR = "UNKNOWN_TRANSPORT_ERROR"


class TransportErrorCode(IntEnum):
    """Outcome codes reported by a transport for one finished operation."""

    OK = 0
    UNSUPPORTED_PROTOCOL = 1
    FAILED_INIT = 2
    URL_MALFORMAT = 3
    URL_MALFORMAT_USER = 4
    COULDNT_RESOLVE_PROXY = 5
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    FTP_WEIRD_SERVER_REPLY = 8
    FTP_ACCESS_DENIED = 9
    FTP_USER_PASSWORD_INCORRECT = 10
    FTP_WEIRD_PASS_REPLY = 11
    FTP_WEIRD_USER_REPLY = 12
    FTP_WEIRD_PASV_REPLY = 13
    FTP_WEIRD_227_FORMAT = 14
    FTP_CANT_GET_HOST = 15
    FTP_CANT_RECONNECT = 16
    FTP_COULDNT_SET_BINARY = 17
    PARTIAL_FILE = 18
    FTP_COULDNT_RETR_FILE = 19
    FTP_WRITE_ERROR = 20
    FTP_QUOTE_ERROR = 21
    HTTP_RETURNED_ERROR = 22
    WRITE_ERROR = 23
    MALFORMAT_USER = 24
    FTP_COULDNT_STOR_FILE = 25
    READ_ERROR = 26
    OUT_OF_MEMORY = 27
    OPERATION_TIMEDOUT = 28
    FTP_COULDNT_SET_ASCII = 29
    FTP_PORT_FAILED = 30
    FTP_COULDNT_USE_REST = 31
    FTP_COULDNT_GET_SIZE = 32
    HTTP_RANGE_ERROR = 33
    HTTP_POST_ERROR = 34
    SSL_CONNECT_ERROR = 35
    FTP_BAD_DOWNLOAD_RESUME = 36
    FILE_COULDNT_READ_FILE = 37
    LDAP_CANNOT_BIND = 38
    LDAP_SEARCH_FAILED = 39
    LIBRARY_NOT_FOUND = 40
    FUNCTION_NOT_FOUND = 41
    ABORTED_BY_CALLBACK = 42
    BAD_FUNCTION_ARGUMENT = 43
    BAD_CALLING_ORDER = 44
    HTTP_PORT_FAILED = 45
    BAD_PASSWORD_ENTERED = 46
    TOO_MANY_REDIRECTS = 47
    UNKNOWN_TELNET_OPTION = 48
    TELNET_OPTION_SYNTAX = 49
    OBSOLETE = 50
    SSL_PEER_CERTIFICATE = 51
    GOT_NOTHING = 52
    SSL_ENGINE_NOTFOUND = 53
    SSL_ENGINE_SETFAILED = 54
    SEND_ERROR = 55
    RECV_ERROR = 56
    SHARE_IN_USE = 57
    SSL_CERTPROBLEM = 58
    SSL_CIPHER = 59
    SSL_CACERT = 60
    BAD_CONTENT_ENCODING = 61
    LDAP_INVALID_URL = 62
    FILESIZE_EXCEEDED = 63
    FTP_SSL_FAILED = 64


# Built once; IntEnum lookup by value would raise for unknown codes.
_CODE_NAMES: dict[int, str] = {member.value: member.name for member in TransportErrorCode}


def classify_outcome(code: int) -> str:
    """Map a transport outcome code to its symbolic name.

    Args:
        code: Outcome code reported by the transport

    Returns:
        Stable name such as ``"COULDNT_CONNECT"``, ``"OK"`` for success, or
        ``UNKNOWN_TRANSPORT_ERROR`` for codes outside the known range
    """
    return _CODE_NAMES.get(int(code), UNKNOWN_TRANSPORT_ERROR)


def is_success(code: int) -> bool:
    """True when the code means the transfer finished without error."""
    return int(code) == TransportErrorCode.OK
