"""
CleanMissingData - Unit Tests for Settings and Logging
"""

import pytest
from loguru import logger
from pydantic import ValidationError

from config.logging_config import get_logger, log_execution_time, set_log_level, setup_logging
from config.settings import Settings, get_settings, settings


class TestSettings:
    """Tests for the Settings model"""

    def test_defaults(self):
        """Test default engine knobs"""
        fresh = Settings(_env_file=None)

        assert fresh.DEFAULT_NUM_PARTITIONS >= 1
        assert 0.0 < fresh.MEDIAN_RELATIVE_ERROR < 1.0
        assert fresh.is_production is (fresh.ENVIRONMENT == 'production')

    def test_global_instance(self):
        """Test that get_settings returns the shared instance"""
        assert get_settings() is settings

    def test_env_override(self, monkeypatch):
        """Test environment variable override"""
        monkeypatch.setenv('MEDIAN_RELATIVE_ERROR', '0.005')
        monkeypatch.setenv('LOG_LEVEL', 'debug')

        fresh = Settings(_env_file=None)

        assert fresh.MEDIAN_RELATIVE_ERROR == 0.005
        assert fresh.LOG_LEVEL == 'DEBUG'

    @pytest.mark.parametrize("field,value", [
        ('MEDIAN_RELATIVE_ERROR', 0.0),
        ('MEDIAN_RELATIVE_ERROR', 1.0),
        ('DEFAULT_NUM_PARTITIONS', 0),
        ('SKETCH_HEAD_SIZE', 0),
        ('LOG_LEVEL', 'LOUD'),
    ])
    def test_invalid_values(self, field, value):
        """Test validation of engine and logging fields"""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_paths_resolved(self, tmp_path):
        """Test that paths are expanded and absolute"""
        fresh = Settings(_env_file=None, ARTIFACTS_PATH=str(tmp_path / 'a' / '..' / 'b'))
        assert fresh.ARTIFACTS_PATH == (tmp_path / 'b').resolve()


class TestLogging:
    """Tests for loguru configuration helpers"""

    @pytest.fixture
    def captured(self):
        setup_logging(log_level='DEBUG', reset_existing=True)
        messages = []
        sink_id = logger.add(lambda m: messages.append(m.record), level='DEBUG')
        yield messages
        logger.remove(sink_id)

    def test_bound_logger(self, captured):
        """Test that bindings reach the record"""
        get_logger(__name__, component='engine', uid='u1').info('hello')

        record = captured[-1]
        assert record['message'] == 'hello'
        assert record['extra']['component'] == 'engine'
        assert record['extra']['uid'] == 'u1'

    def test_execution_time_success(self, captured):
        """Test decorator logging on success"""
        @log_execution_time
        def work():
            return 42

        assert work() == 42
        assert any('Completed' in r['message'] for r in captured)

    def test_execution_time_failure(self, captured):
        """Test decorator logging and re-raise on failure"""
        @log_execution_time
        def broken():
            raise RuntimeError('nope')

        with pytest.raises(RuntimeError):
            broken()

        assert any(r['level'].name == 'ERROR' for r in captured)

    def test_set_log_level(self):
        """Test runtime level change rebuilds the sinks"""
        set_log_level('WARNING')
        messages = []
        sink_id = logger.add(lambda m: messages.append(m.record['message']), level='WARNING')

        try:
            get_logger(__name__).warning('visible')
            get_logger(__name__).debug('hidden')
        finally:
            logger.remove(sink_id)
            set_log_level('DEBUG')

        assert messages == ['visible']
