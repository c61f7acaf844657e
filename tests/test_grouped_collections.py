"""Tests for grouped collections"""

import pytest

from groupby.grouped_collections import HashGroupedCollection, SortedGroupedCollection


@pytest.fixture(params=[HashGroupedCollection, SortedGroupedCollection])
def collection(request):
    return request.param()


class TestGroupedCollectionContract:
    """Behaviour shared by every grouped collection"""

    def test_add_creates_singleton_group(self, collection):
        collection.add('k', 'v')
        assert collection.get('k') == ['v']

    def test_add_appends_in_arrival_order(self, collection):
        for value in ['one', 'two', 'three']:
            collection.add('k', value)
        assert collection.get('k') == ['one', 'two', 'three']

    def test_get_missing_key_returns_none(self, collection):
        collection.add('k', 'v')
        assert collection.get('missing') is None

    def test_empty_string_is_a_valid_key(self, collection):
        collection.add('', 'no match')
        assert collection.get('') == ['no match']

    def test_iter_visits_every_key_once(self, collection):
        calls = [('b', '1'), ('a', '2'), ('b', '3'), ('c', '4'), ('a', '5')]
        for key, value in calls:
            collection.add(key, value)

        keys = [key for key, _ in collection.iter()]
        assert sorted(keys) == ['a', 'b', 'c']
        assert len(collection) == 3

    def test_round_trip(self, collection):
        calls = [('x', 'x1'), ('y', 'y1'), ('x', 'x2'), ('z', 'z1'), ('y', 'y2'), ('x', 'x3')]
        for key, value in calls:
            collection.add(key, value)

        for key in ['x', 'y', 'z']:
            assert collection.get(key) == [value for k, value in calls if k == key]

    def test_contains(self, collection):
        collection.add('k', 'v')
        assert 'k' in collection
        assert 'other' not in collection

    def test_empty(self, collection):
        assert len(collection) == 0
        assert list(collection.iter()) == []


class TestSortedGroupedCollection:
    """Ordering guarantees of SortedGroupedCollection"""

    def test_iterates_in_key_order(self):
        collection = SortedGroupedCollection()
        for key in ['Dogs', 'Cats', 'Birds', 'Cats', 'Ants']:
            collection.add(key, key.lower())

        assert [key for key, _ in collection.iter()] == ['Ants', 'Birds', 'Cats', 'Dogs']
        assert collection.keys() == ['Ants', 'Birds', 'Cats', 'Dogs']

    def test_iter_values_match_get(self):
        collection = SortedGroupedCollection()
        collection.add('b', '1')
        collection.add('a', '2')
        collection.add('b', '3')
        assert dict(collection.iter()) == {'a': ['2'], 'b': ['1', '3']}


class TestHashGroupedCollection:
    """HashGroupedCollection specifics"""

    def test_iterates_in_first_insertion_order(self):
        collection = HashGroupedCollection()
        for key in ['z', 'a', 'm', 'a']:
            collection.add(key, key)
        assert collection.keys() == ['z', 'a', 'm']
