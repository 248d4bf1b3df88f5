"""
CleanMissingData - Unit Tests for Core Utils
"""

import math

import pytest
import numpy as np

from core.exceptions import ConfigurationError
from core.utils import as_column_tuple, duplicates, is_nan, random_uid


class TestRandomUid:
    """Tests for random_uid function"""

    def test_prefix_and_length(self):
        """Test uid layout"""
        uid = random_uid('CleanMissingData')

        assert uid.startswith('CleanMissingData_')
        assert len(uid) == len('CleanMissingData_') + 12

    def test_unique(self):
        """Test that uids differ between calls"""
        assert random_uid('X') != random_uid('X')


class TestAsColumnTuple:
    """Tests for as_column_tuple function"""

    def test_list(self):
        """Test list normalization"""
        assert as_column_tuple(['a', 'b'], 'inputCols') == ('a', 'b')

    def test_bare_string(self):
        """Test that a bare string is one column"""
        assert as_column_tuple('age', 'inputCols') == ('age',)

    @pytest.mark.parametrize("value", [None, [], ['a', ''], ['a', 3]])
    def test_invalid(self, value):
        """Test rejection of missing, empty and non-string entries"""
        with pytest.raises(ConfigurationError):
            as_column_tuple(value, 'inputCols')


class TestDuplicates:
    """Tests for duplicates function"""

    def test_none(self):
        """Test list without duplicates"""
        assert duplicates(['a', 'b']) == []

    def test_first_seen_order(self):
        """Test duplicates reported once in first-seen order"""
        assert duplicates(['b', 'a', 'b', 'a', 'b']) == ['b', 'a']


class TestIsNan:
    """Tests for is_nan function"""

    def test_values(self):
        """Test NaN detection"""
        assert is_nan(math.nan)
        assert is_nan(np.float64('nan'))
        assert not is_nan(1.0)
        assert not is_nan('nan')
        assert not is_nan(None)
