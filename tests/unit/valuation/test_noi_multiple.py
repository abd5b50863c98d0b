# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the NOI multiple method.
"""

import pytest

from carevalue.core.primitives import InputError
from carevalue.valuation import NOIMultipleMethod, NOIMultipleOptions


class TestNOIMultiple:
    def test_profile_multiple(self, make_profile):
        result = NOIMultipleMethod().evaluate(make_profile(noi_multiple=8.0))
        assert result.value == 16_000_000
        assert result.value_low == 15_000_000
        assert result.value_high == 17_000_000
        assert result.confidence == 65

    def test_option_overrides_profile(self, make_profile):
        result = NOIMultipleMethod().evaluate(
            make_profile(noi_multiple=8.0), NOIMultipleOptions(multiple=10.0)
        )
        assert result.value == 20_000_000

    def test_applicability(self, make_profile):
        method = NOIMultipleMethod()
        assert not method.is_applicable(make_profile())
        assert method.is_applicable(make_profile(noi_multiple=8.0))
        assert method.is_applicable(make_profile(), NOIMultipleOptions(multiple=9.0))
        assert not method.is_applicable(make_profile(ttm_noi=None, noi_multiple=8.0))

    def test_missing_inputs_named(self, make_profile):
        with pytest.raises(InputError) as exc_info:
            NOIMultipleMethod().evaluate(make_profile(ttm_noi=None))
        assert exc_info.value.fields == ("ttm_noi", "noi_multiple")

    def test_wrong_options_type(self, make_profile):
        from carevalue.valuation import CapRateOptions

        with pytest.raises(TypeError, match="NOIMultipleOptions"):
            NOIMultipleMethod().evaluate(make_profile(noi_multiple=8.0), CapRateOptions())
