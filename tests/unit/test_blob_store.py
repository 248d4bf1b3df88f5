"""
CleanMissingData - Unit Tests for Blob Stores
"""

import pytest

from core.blob_store import InMemoryBlobStore, LocalBlobStore
from core.exceptions import AlreadyExistsError, ArtifactNotFoundError, ConfigurationError


@pytest.fixture(params=['memory', 'local'])
def store(request, tmp_path):
    if request.param == 'memory':
        return InMemoryBlobStore()
    return LocalBlobStore(root=tmp_path)


class TestBlobStore:
    """Tests shared by every blob store"""

    def test_write_read(self, store):
        """Test basic write and read"""
        store.write_bytes('a/b/part', b'payload')

        assert store.read_bytes('a/b/part') == b'payload'
        assert store.exists('a/b/part')
        assert store.exists('a/b')
        assert store.exists('a')

    def test_read_missing(self, store):
        """Test ArtifactNotFoundError on missing blob"""
        with pytest.raises(ArtifactNotFoundError):
            store.read_bytes('nope')

    def test_delete_recursive(self, store):
        """Test that delete removes everything under a path"""
        store.write_bytes('a/x', b'1')
        store.write_bytes('a/y/z', b'2')
        store.write_bytes('ab', b'3')

        store.delete('a')

        assert not store.exists('a')
        assert store.exists('ab')

    def test_delete_missing_is_noop(self, store):
        """Test delete of a missing path"""
        store.delete('missing')

    def test_rename_moves_tree(self, store):
        """Test rename of a directory-like prefix"""
        store.write_bytes('src/one', b'1')
        store.write_bytes('src/sub/two', b'2')

        store.rename('src', 'dst')

        assert not store.exists('src')
        assert store.read_bytes('dst/one') == b'1'
        assert store.read_bytes('dst/sub/two') == b'2'

    def test_rename_onto_existing_fails(self, store):
        """Test AlreadyExistsError when the destination exists"""
        store.write_bytes('src/one', b'1')
        store.write_bytes('dst/other', b'2')

        with pytest.raises(AlreadyExistsError):
            store.rename('src', 'dst')

        assert store.read_bytes('dst/other') == b'2'
        assert store.exists('src')

    def test_rename_missing_source(self, store):
        """Test ArtifactNotFoundError when the source is missing"""
        with pytest.raises(ArtifactNotFoundError):
            store.rename('ghost', 'dst')

    def test_staging_path_is_hidden_sibling(self, store):
        """Test staging path naming"""
        target = store.qualify('models/m1')
        staging = store.staging_path('models/m1')

        assert staging != store.staging_path('models/m1')
        assert staging.rsplit('/', 1)[0] == target.rsplit('/', 1)[0]
        assert staging.rsplit('/', 1)[1].startswith('.m1.staging-')

    def test_empty_path_rejected(self, store):
        """Test ConfigurationError on empty path"""
        with pytest.raises(ConfigurationError):
            store.qualify('')


class TestLocalBlobStore:
    """Tests specific to the filesystem store"""

    def test_relative_paths_under_root(self, tmp_path):
        """Test that relative paths resolve under the root"""
        store = LocalBlobStore(root=tmp_path)
        store.write_bytes('x/y', b'1')

        assert (tmp_path / 'x' / 'y').read_bytes() == b'1'

    def test_absolute_paths_bypass_root(self, tmp_path):
        """Test that absolute paths are used as given"""
        store = LocalBlobStore(root=tmp_path / 'root')
        target = tmp_path / 'elsewhere' / 'blob'
        store.write_bytes(str(target), b'1')

        assert target.read_bytes() == b'1'


class TestInMemoryBlobStore:
    """Tests specific to the in-memory store"""

    def test_paths_normalized(self):
        """Test that equivalent paths address the same blob"""
        store = InMemoryBlobStore()
        store.write_bytes('/a//b/', b'1')

        assert store.read_bytes('a/b') == b'1'
        assert store.keys() == ['/a/b']
