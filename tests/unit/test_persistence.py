"""
CleanMissingData - Unit Tests for Model Persistence
"""

import io
import json

import pytest
import pandas as pd

from config.constants import ARTIFACT_PARTS
from core.exceptions import AlreadyExistsError, ArtifactNotFoundError, CorruptArtifactError
from preprocessing.clean_missing_data import CleanMissingData, CleanMissingDataModel
from preprocessing.persistence import (
    MODEL_CLASS_NAME,
    CleanMissingDataModelReader,
    CleanMissingDataModelWriter,
    load_model,
    save_model,
)
from preprocessing.replacement import BooleanValue, DoubleValue, TextValue


@pytest.fixture
def model():
    return CleanMissingDataModel(
        uid='CleanMissingData_0123456789ab',
        replacement_values={
            'age_clean': DoubleValue(value=2.5),
            'name': TextValue(value='unknown'),
            'flag': BooleanValue(value=False),
            'empty': DoubleValue(value=float('nan')),
        },
        input_cols=['age', 'name', 'flag', 'empty'],
        output_cols=['age_clean', 'name', 'flag', 'empty'],
    )


def _write_json(store, path, part, payload):
    store.write_bytes(store.join(store.qualify(path), part), json.dumps(payload).encode('utf-8'))


class TestRoundTrip:
    """Tests for save then load"""

    def test_memory_round_trip(self, model, memory_store):
        """Test that a loaded model equals the saved one"""
        model.save('models/m1', store=memory_store)
        loaded = CleanMissingDataModel.load('models/m1', store=memory_store)

        assert loaded == model
        assert loaded.input_cols == model.input_cols
        assert loaded.output_cols == model.output_cols

    def test_local_round_trip(self, model, local_store, tmp_path):
        """Test round trip through the filesystem"""
        target = save_model(model, 'models/m1', store=local_store)

        assert sorted(p.name for p in (tmp_path / 'models' / 'm1').iterdir()) == sorted(ARTIFACT_PARTS)
        assert load_model(target, store=local_store) == model

    def test_value_kinds_preserved(self, model, memory_store):
        """Test that each value keeps its kind, including NaN doubles"""
        model.save('m', store=memory_store)
        loaded = load_model('m', store=memory_store)

        assert isinstance(loaded.replacement_values['empty'], DoubleValue)
        assert isinstance(loaded.replacement_values['name'], TextValue)
        assert isinstance(loaded.replacement_values['flag'], BooleanValue)

    def test_fitted_model_round_trip(self, age_df, memory_store):
        """Test that a loaded fitted model transforms identically"""
        fitted = CleanMissingData(input_cols=['age'], output_cols=['age_clean']).fit(age_df)
        fitted.save('fitted', store=memory_store)
        loaded = load_model('fitted', store=memory_store)

        pd.testing.assert_frame_equal(loaded.transform(age_df), fitted.transform(age_df))

    def test_artifact_layout(self, model, memory_store):
        """Test the content of the metadata and data parts"""
        model.save('m', store=memory_store)

        metadata = json.loads(memory_store.read_bytes('m/metadata'))
        assert metadata['class'] == MODEL_CLASS_NAME
        assert metadata['uid'] == model.uid
        assert metadata['paramMap']['outputCols'] == list(model.output_cols)

        records = json.loads(memory_store.read_bytes('m/replacementValues'))
        assert records[0] == {'column': 'age_clean', 'replacement': {'kind': 'double', 'value': 2.5}}

        data = pd.read_parquet(io.BytesIO(memory_store.read_bytes('m/data')))
        assert data['uid'].tolist() == [model.uid]


class TestWriteModes:
    """Tests for fail-if-exists and overwrite"""

    def test_second_save_fails_and_keeps_first(self, model, memory_store):
        """Test AlreadyExistsError on second save without overwrite"""
        model.save('p', store=memory_store)
        before = {k: memory_store.read_bytes(k) for k in memory_store.keys()}

        other = CleanMissingDataModel(
            uid='CleanMissingData_ffffffffffff',
            replacement_values={'x': DoubleValue(value=1.0)},
            input_cols=['x'],
            output_cols=['x'],
        )
        with pytest.raises(AlreadyExistsError):
            other.save('p', store=memory_store)

        assert {k: memory_store.read_bytes(k) for k in memory_store.keys()} == before
        assert load_model('p', store=memory_store) == model

    def test_overwrite_replaces(self, model, memory_store):
        """Test that overwrite publishes the new artifact"""
        model.save('p', store=memory_store)
        other = CleanMissingDataModel(
            uid='CleanMissingData_ffffffffffff',
            replacement_values={'x': DoubleValue(value=1.0)},
            input_cols=['x'],
            output_cols=['x'],
        )

        other.write(store=memory_store).overwrite().save('p')

        assert load_model('p', store=memory_store) == other
        assert all(k.startswith('/p/') for k in memory_store.keys())

    def test_overwrite_on_local_store(self, model, local_store):
        """Test overwrite of an existing directory"""
        model.save('p', store=local_store)
        model.save('p', overwrite=True, store=local_store)

        assert load_model('p', store=local_store) == model

    def test_no_staging_left_on_failure(self, model, memory_store, monkeypatch):
        """Test that staging is removed when publishing fails"""
        def _fail(src, dst):
            raise OSError('disk full')

        monkeypatch.setattr(memory_store, 'rename', _fail)

        with pytest.raises(OSError):
            CleanMissingDataModelWriter(model, store=memory_store).save('p')

        assert memory_store.keys() == []


class TestLoadFailures:
    """Tests for corrupt or missing artifacts"""

    def test_missing_path(self, memory_store):
        """Test ArtifactNotFoundError for a missing artifact"""
        with pytest.raises(ArtifactNotFoundError):
            load_model('nowhere', store=memory_store)

    @pytest.mark.parametrize("part", ARTIFACT_PARTS)
    def test_missing_component(self, model, memory_store, part):
        """Test CorruptArtifactError when a component is missing"""
        model.save('p', store=memory_store)
        memory_store.delete(f'p/{part}')

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_undecodable_json(self, model, memory_store):
        """Test CorruptArtifactError for invalid JSON"""
        model.save('p', store=memory_store)
        memory_store.write_bytes('p/inputCols', b'{not json')

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_undecodable_parquet(self, model, memory_store):
        """Test CorruptArtifactError for a damaged data part"""
        model.save('p', store=memory_store)
        memory_store.write_bytes('p/data', b'garbage')

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_class_mismatch(self, model, memory_store):
        """Test CorruptArtifactError for another model class"""
        model.save('p', store=memory_store)
        metadata = json.loads(memory_store.read_bytes('p/metadata'))
        metadata['class'] = 'preprocessing.other.OtherModel'
        _write_json(memory_store, 'p', 'metadata', metadata)

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_uid_mismatch(self, model, memory_store):
        """Test CorruptArtifactError when data and metadata disagree"""
        model.save('p', store=memory_store)
        metadata = json.loads(memory_store.read_bytes('p/metadata'))
        metadata['uid'] = 'CleanMissingData_000000000000'
        _write_json(memory_store, 'p', 'metadata', metadata)

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_length_mismatch(self, model, memory_store):
        """Test CorruptArtifactError for column lists of different length"""
        model.save('p', store=memory_store)
        _write_json(memory_store, 'p', 'inputCols', ['age'])

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_replacement_keys_mismatch(self, model, memory_store):
        """Test CorruptArtifactError when replacement columns differ from outputs"""
        model.save('p', store=memory_store)
        _write_json(memory_store, 'p', 'replacementValues', [
            {'column': 'age_clean', 'replacement': {'kind': 'double', 'value': 2.5}},
        ])

        with pytest.raises(CorruptArtifactError):
            load_model('p', store=memory_store)

    def test_unknown_value_kind(self, model, memory_store):
        """Test CorruptArtifactError for an unknown replacement kind"""
        model.save('p', store=memory_store)
        records = json.loads(memory_store.read_bytes('p/replacementValues'))
        records[0]['replacement']['kind'] = 'date'
        _write_json(memory_store, 'p', 'replacementValues', records)

        with pytest.raises(CorruptArtifactError):
            CleanMissingDataModelReader(store=memory_store).load('p')
