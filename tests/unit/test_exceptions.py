"""
CleanMissingData - Unit Tests for the Exception Hierarchy
"""

import pytest

from core.exceptions import (
    AlreadyExistsError,
    ArtifactNotFoundError,
    CleaningError,
    ConfigurationError,
    CorruptArtifactError,
    ErrorCode,
    UnsupportedTypeError,
    exception_context,
    handle_exception,
)


class TestHierarchy:
    """Tests for exception classes"""

    @pytest.mark.parametrize("exc_cls,builtin,code", [
        (ConfigurationError, ValueError, ErrorCode.CONFIG),
        (UnsupportedTypeError, TypeError, ErrorCode.UNSUPPORTED_TYPE),
        (AlreadyExistsError, FileExistsError, ErrorCode.ALREADY_EXISTS),
        (ArtifactNotFoundError, FileNotFoundError, ErrorCode.NOT_FOUND),
    ])
    def test_builtin_bases_and_codes(self, exc_cls, builtin, code):
        """Test that errors double as builtin exceptions"""
        err = exc_cls('boom')

        assert isinstance(err, CleaningError)
        assert isinstance(err, builtin)
        assert err.error_code == code

    def test_str_includes_details(self):
        """Test string representation"""
        err = ConfigurationError('bad column', details={'column': 'x'})

        assert 'configuration_error: bad column' in str(err)
        assert "'column': 'x'" in str(err)

    def test_to_dict(self):
        """Test dictionary form"""
        payload = CorruptArtifactError('broken', details={'part': 'data'}).to_dict()['error']

        assert payload['code'] == 'corrupt_artifact'
        assert payload['type'] == 'CorruptArtifactError'
        assert payload['details'] == {'part': 'data'}

    def test_from_exc(self):
        """Test wrapping a foreign exception"""
        original = KeyError('x')
        err = CorruptArtifactError.from_exc(original, message='wrapped')

        assert isinstance(err, CorruptArtifactError)
        assert err.cause is original

    def test_from_exc_passthrough(self):
        """Test that cleaning errors are returned unchanged"""
        original = ConfigurationError('x')
        assert CorruptArtifactError.from_exc(original) is original


class TestExceptionContext:
    """Tests for exception_context"""

    def test_wraps_foreign_exception(self):
        """Test that foreign exceptions are converted"""
        with pytest.raises(CorruptArtifactError) as info:
            with exception_context(to=CorruptArtifactError, message='decode failed', log=False):
                raise ValueError('bad byte')

        assert info.value.message == 'decode failed'
        assert isinstance(info.value.__cause__, ValueError)

    def test_passes_cleaning_errors_through(self):
        """Test that cleaning errors are not rewrapped"""
        with pytest.raises(ConfigurationError):
            with exception_context(to=CorruptArtifactError, log=False):
                raise ConfigurationError('x')

    def test_no_error(self):
        """Test that a clean block is unaffected"""
        with exception_context(to=CorruptArtifactError):
            value = 1
        assert value == 1


class TestHandleException:
    """Tests for handle_exception"""

    def test_cleaning_error_format(self):
        """Test formatting of a cleaning error"""
        msg = handle_exception(UnsupportedTypeError('no strings'), context='fit')

        assert '[unsupported_type]' in msg
        assert 'fit' in msg

    def test_foreign_error_format(self):
        """Test formatting of a foreign error"""
        assert 'Unexpected Error' in handle_exception(RuntimeError('x'))
