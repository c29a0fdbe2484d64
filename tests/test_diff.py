"""Tests for the diff engine."""

from langfy.core.diff import DiffType, compare, missing


class TestMissing:
    """Test cases for missing()."""

    def test_returns_absent_entries(self):
        candidates = {'Save': 'Save', 'Cancel': 'Cancel'}
        assert missing(candidates, {'Save': 'Guardar'}) == {'Cancel': 'Cancel'}

    def test_string_collection(self):
        assert missing(['Save', 'Delete'], {'Save': 'Save'}) == {'Delete': 'Delete'}

    def test_nothing_missing(self):
        assert missing({'Save': 'Save'}, {'Save': 'Guardar'}) == {}

    def test_empty_existing(self):
        assert missing(['Save'], {}) == {'Save': 'Save'}

    def test_does_not_mutate_inputs(self):
        candidates = {'Save': 'Save'}
        existing = {}
        missing(candidates, existing)
        assert candidates == {'Save': 'Save'}
        assert existing == {}


class TestCompare:
    """Test cases for compare()."""

    def test_classification(self):
        source = {'Save': 'Save', 'Cancel': 'Cancel', 'Delete': 'Delete'}
        target = {'Save': 'Guardar', 'Cancel': 'Cancel', 'Obsolete': 'Obsoleto'}

        result = compare(source, target, 'en', 'es')

        assert [e.key for e in result.missing] == ['Delete']
        assert [e.key for e in result.extra] == ['Obsolete']
        assert [e.key for e in result.translated] == ['Save']
        assert [e.key for e in result.untranslated] == ['Cancel']
        assert result.translated[0].diff_type == DiffType.TRANSLATED
        assert result.translated[0].target_value == 'Guardar'

    def test_coverage(self):
        result = compare({'a b': 'a b', 'c d': 'c d'}, {'a b': 'x'})
        assert result.coverage == 50.0
        assert result.has_differences

    def test_empty_source_is_fully_covered(self):
        result = compare({}, {})
        assert result.coverage == 100.0
        assert not result.has_differences
