"""Tests for completion record construction."""

from httpwindow.classify import TransportErrorCode
from httpwindow.records import OUTCOME_SUCCESS, HostFailure, TransferInfo, build_completion_record
from httpwindow.request import Request

REQUEST = Request("https://example.com/item")


def _info(status_code: int = 200) -> TransferInfo:
    return TransferInfo(
        url=REQUEST.url,
        effective_url=REQUEST.url,
        method="GET",
        status_code=status_code,
    )


class TestBuildCompletionRecord:
    def test_success_has_empty_error_fields(self) -> None:
        record = build_completion_record(
            request=REQUEST,
            request_index=4,
            body=b"hello",
            info=_info(),
            code=TransportErrorCode.OK,
        )

        assert record.success
        assert record.outcome == OUTCOME_SUCCESS
        assert record.error_code is None
        assert record.error_message == ""
        assert record.body == b"hello"
        assert record.text == "hello"
        assert record.status_code == 200
        assert record.request_index == 4

    def test_http_error_status_is_still_transport_success(self) -> None:
        """A 404 is a delivered response, not a transport failure."""
        record = build_completion_record(
            request=REQUEST, request_index=0, body=b"", info=_info(404), code=TransportErrorCode.OK
        )

        assert record.success
        assert record.status_code == 404

    def test_resolve_failure_overrides_code(self) -> None:
        record = build_completion_record(
            request=REQUEST,
            request_index=0,
            body=b"",
            info=None,
            code=TransportErrorCode.OK,
            host_failure=HostFailure.RESOLVE,
        )

        assert not record.success
        assert record.outcome == "COULDNT_RESOLVE_HOST"
        assert record.error_code == TransportErrorCode.COULDNT_RESOLVE_HOST

    def test_connect_failure_overrides_code(self) -> None:
        record = build_completion_record(
            request=REQUEST,
            request_index=0,
            body=b"",
            info=None,
            code=TransportErrorCode.RECV_ERROR,
            host_failure=HostFailure.CONNECT,
        )

        assert record.outcome == "COULDNT_CONNECT"
        assert record.error_code == 7

    def test_other_codes_classified(self) -> None:
        record = build_completion_record(
            request=REQUEST,
            request_index=0,
            body=b"",
            info=_info(0),
            code=TransportErrorCode.OPERATION_TIMEDOUT,
            detail="ReadTimeout: timed out",
        )

        assert record.outcome == "OPERATION_TIMEDOUT"
        assert record.error_code == 28
        assert record.error_message == "OPERATION_TIMEDOUT: ReadTimeout: timed out"

    def test_unknown_code_gets_generic_name(self) -> None:
        record = build_completion_record(request=REQUEST, request_index=0, body=b"", info=_info(0), code=-1)

        assert record.outcome == "UNKNOWN_TRANSPORT_ERROR"
        assert record.error_code == -1
        assert record.error_message == "UNKNOWN_TRANSPORT_ERROR"

    def test_missing_info_defaults_from_request(self) -> None:
        record = build_completion_record(
            request=REQUEST,
            request_index=0,
            body=b"",
            info=None,
            code=TransportErrorCode.COULDNT_CONNECT,
        )

        assert record.info.url == REQUEST.url
        assert record.info.effective_url == REQUEST.url
        assert record.info.status_code == 0

    def test_text_replaces_undecodable_bytes(self) -> None:
        record = build_completion_record(
            request=REQUEST, request_index=0, body=b"ok\xff", info=_info(), code=TransportErrorCode.OK
        )

        assert record.text == "ok�"
