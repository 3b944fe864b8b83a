"""Tests for transport outcome classification."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from httpwindow.classify import (
    UNKNOWN_TRANSPORT_ERROR,
    TransportErrorCode,
    classify_outcome,
    is_success,
)
from tests.property.settings import DETERMINISM_SETTINGS, QUICK_SETTINGS


class TestClassifyOutcome:
    """classify_outcome maps codes to stable names."""

    @pytest.mark.parametrize(
        ("code", "name"),
        [
            (0, "OK"),
            (6, "COULDNT_RESOLVE_HOST"),
            (7, "COULDNT_CONNECT"),
            (28, "OPERATION_TIMEDOUT"),
            (47, "TOO_MANY_REDIRECTS"),
            (64, "FTP_SSL_FAILED"),
        ],
    )
    def test_known_codes(self, code: int, name: str) -> None:
        assert classify_outcome(code) == name

    def test_every_member_maps_to_its_own_name(self) -> None:
        for member in TransportErrorCode:
            assert classify_outcome(member) == member.name

    @pytest.mark.parametrize("code", [-1, 65, 99, 10_000])
    def test_unknown_codes_map_to_generic_category(self, code: int) -> None:
        assert classify_outcome(code) == UNKNOWN_TRANSPORT_ERROR

    def test_code_table_is_contiguous(self) -> None:
        """The libcurl range 0..64 is fully covered."""
        assert sorted(m.value for m in TransportErrorCode) == list(range(65))

    @given(code=st.integers(min_value=-1000, max_value=1000))
    @DETERMINISM_SETTINGS
    def test_classification_is_deterministic(self, code: int) -> None:
        """Property: the same code always yields the same non-empty name."""
        first = classify_outcome(code)
        assert first
        assert classify_outcome(code) == first


class TestIsSuccess:
    def test_ok_is_success(self) -> None:
        assert is_success(TransportErrorCode.OK)
        assert is_success(0)

    @pytest.mark.parametrize("code", [1, 6, 22, 63, -1])
    def test_other_codes_are_failures(self, code: int) -> None:
        assert not is_success(code)

    @given(member=st.sampled_from(TransportErrorCode))
    @QUICK_SETTINGS
    def test_only_ok_member_is_success(self, member: TransportErrorCode) -> None:
        """Property: success and an "OK" classification coincide."""
        assert is_success(member) == (classify_outcome(member) == "OK")
