"""Unit tests for the temporal validity gate."""

import pytest

from app.didi.api_models import ErrorCode
from app.didi.exceptions import AfterExpiryError, BeforeIssuanceError
from app.didi.temporal import check_temporal


class TestCheckTemporal:

    def test_expired(self):
        with pytest.raises(AfterExpiryError) as exc:
            check_temporal(None, 999, 1000)
        assert exc.value.code == ErrorCode.AFTER_EXP
        assert exc.value.expected == 999
        assert exc.value.current == 1000

    def test_not_yet_issued(self):
        with pytest.raises(BeforeIssuanceError) as exc:
            check_temporal(1001, None, 1000)
        assert exc.value.code == ErrorCode.BEFORE_IAT
        assert exc.value.expected == 1001
        assert exc.value.current == 1000

    def test_boundaries_inclusive(self):
        check_temporal(1000, 1000, 1000)

    def test_no_bounds(self):
        check_temporal(None, None, 1000)

    def test_expiry_reported_first(self):
        with pytest.raises(AfterExpiryError):
            check_temporal(2000, 500, 1000)

    def test_float_times(self):
        check_temporal(999.5, 1000.5, 1000)
        with pytest.raises(AfterExpiryError):
            check_temporal(None, 999.9, 1000)
