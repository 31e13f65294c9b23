import numpy as np
import pytest

from chromres.errors import InputError, LengthMismatchError
from chromres.utils.validation import validate_rt_range, validate_trace, validate_window_length


class TestValidateRtRange:
    def test_valid(self):
        """Test that validate_rt_range returns True for valid retention time ranges."""
        assert validate_rt_range(1.0, 25.0) is True

        # Edge case: very close retention times
        assert validate_rt_range(5.0, 5.01) is True

    def test_invalid(self):
        """Test that validate_rt_range raises InputError for invalid ranges."""
        with pytest.raises(InputError):
            validate_rt_range(5.0, 5.0)

        with pytest.raises(InputError):
            validate_rt_range(10.0, 2.0)

        # InputError is also a ValueError
        with pytest.raises(ValueError):
            validate_rt_range(10.0, 2.0)

    def test_none_values(self):
        """Test that validate_rt_range handles None values correctly."""
        assert validate_rt_range(None, None) is False
        assert validate_rt_range(1.0, None) is False
        assert validate_rt_range(None, 25.0) is False


class TestValidateWindowLength:
    def test_valid(self):
        assert validate_window_length(128) == 128
        assert validate_window_length(np.int64(64)) == 64

    @pytest.mark.parametrize("window_length", [0, -1, 1.5, "128", True, None])
    def test_invalid(self, window_length):
        """Test that non-positive or non-integer window lengths are rejected."""
        with pytest.raises(InputError):
            validate_window_length(window_length)


class TestValidateTrace:
    def test_matching_lengths_pass(self):
        validate_trace(np.zeros(5), np.arange(5.0))

    def test_length_mismatch(self):
        """Test that differing lengths raise LengthMismatchError with both lengths."""
        with pytest.raises(LengthMismatchError) as exc_info:
            validate_trace(np.zeros(5), np.arange(4.0))

        assert exc_info.value.n_intensity == 5
        assert exc_info.value.n_time == 4

    def test_multidimensional_rejected(self):
        with pytest.raises(InputError):
            validate_trace(np.zeros((2, 3)), np.zeros((2, 3)))
