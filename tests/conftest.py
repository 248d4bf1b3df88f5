"""
CleanMissingData - Pytest Configuration
Shared fixtures and configuration for all tests
"""

import pytest
import pandas as pd
import numpy as np
from pathlib import Path
import sys

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from config.settings import settings
from core.blob_store import InMemoryBlobStore, LocalBlobStore
from core.engine import PandasEngine

# No file sinks while testing
settings.TEST_MODE = True


# ==================== DATA FIXTURES ====================

@pytest.fixture
def age_df():
    """Ages 1, 2, 4 plus one missing value"""
    return pd.DataFrame({
        'name': ['ann', 'bob', 'cid', 'dee'],
        'age': [1.0, 2.0, np.nan, 4.0],
    })


@pytest.fixture
def mixed_df():
    """One column per supported type, each with missing values"""
    return pd.DataFrame({
        'int_col': pd.array([1, None, 3, 10], dtype='Int32'),
        'long_col': pd.array([100, 200, None, 400], dtype='Int64'),
        'float_col': np.array([1.5, np.nan, 2.5, np.nan], dtype='float32'),
        'double_col': [0.5, np.nan, 1.5, 2.5],
        'str_col': ['a', None, 'c', None],
        'bool_col': pd.array([True, None, False, None], dtype='boolean'),
        'ts_col': pd.to_datetime(['2023-01-01', None, '2023-01-03', '2023-01-04']),
    })


@pytest.fixture
def df_with_missing():
    """DataFrame with missing values"""
    return pd.DataFrame({
        'col1': [1, 2, np.nan, 4, 5, np.nan, 7, 8, 9, 10],
        'col2': [1.1, np.nan, 3.3, np.nan, 5.5, 6.6, np.nan, 8.8, 9.9, 10.1],
        'col3': ['a', 'b', None, 'd', 'e', 'f', 'g', None, 'i', 'j']
    })


@pytest.fixture
def large_numeric_df():
    """100k shuffled integers with 10% missing"""
    rng = np.random.default_rng(42)
    values = rng.permutation(100_000).astype('float64')
    values[rng.choice(values.size, size=10_000, replace=False)] = np.nan
    return pd.DataFrame({'x': values})


# ==================== ENGINE / STORE FIXTURES ====================

@pytest.fixture
def engine():
    """Three-partition pandas engine"""
    return PandasEngine(num_partitions=3)


@pytest.fixture
def memory_store():
    """Empty in-memory blob store"""
    return InMemoryBlobStore()


@pytest.fixture
def local_store(tmp_path):
    """Filesystem blob store rooted in a temp directory"""
    return LocalBlobStore(root=tmp_path)


# ==================== PYTEST CONFIGURATION ====================

def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# ==================== HELPER FUNCTIONS ====================

@pytest.fixture
def assert_dataframes_equal():
    """Helper to assert DataFrames are equal"""
    def _assert_equal(df1, df2):
        pd.testing.assert_frame_equal(df1, df2)
    return _assert_equal
