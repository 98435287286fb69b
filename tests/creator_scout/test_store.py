"""Tests for creator_scout.store — SqlCreatorStore against in-memory SQLite."""
import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from creator_scout.importer.normalize import normalize_record
from creator_scout.models.creator import Creator
from creator_scout.services.search import CreatorFilters
from creator_scout.store import CreatorStore, DuplicateUsernameError, SqlCreatorStore, StoreError


def _row(username, **fields):
    return normalize_record({'username': username, **fields})


# ---------------------------------------------------------------------------
# upsert_batch
# ---------------------------------------------------------------------------

class TestUpsertBatch:

    def test_inserts_new_rows(self, store, db_session):
        affected = store.upsert_batch([_row('alice', followers=10), _row('bob', followers=20)])
        assert affected == 2
        assert db_session.query(Creator).count() == 2

    def test_overwrites_on_username_conflict(self, store, db_session):
        store.upsert_batch([_row('alice', followers=10, category='Travel')])
        store.upsert_batch([_row('alice', followers=99, category='Food')])
        rows = db_session.query(Creator).all()
        assert len(rows) == 1
        assert rows[0].follower_count == 99
        assert rows[0].category == 'Food'

    def test_keeps_id_and_scraped_at_on_conflict(self, store):
        store.upsert_batch([_row('alice', followers=10)])
        first = store.query()[0]
        store.upsert_batch([_row('alice', followers=11)])
        second = store.query()[0]
        assert second['id'] == first['id']
        assert second['scraped_at'] == first['scraped_at']

    def test_sets_timestamps_on_insert(self, store):
        store.upsert_batch([_row('alice')])
        creator = store.query()[0]
        assert creator['scraped_at'] is not None
        assert creator['last_updated'] is not None

    def test_unknown_keys_ignored(self, store):
        assert store.upsert_batch([{'username': 'alice', 'not_a_column': 1}]) == 1

    def test_empty_batch(self, store):
        assert store.upsert_batch([]) == 0

    def test_case_variant_usernames_are_distinct_rows(self, store):
        store.upsert_batch([_row('Alice'), _row('alice')])
        assert store.count() == 2

    def test_database_error_wrapped(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = 'sqlite'
        session.execute.side_effect = OperationalError('INSERT', {}, Exception('disk I/O error'))
        store = SqlCreatorStore(lambda: session)
        with pytest.raises(StoreError) as exc_info:
            store.upsert_batch([_row('alice')])
        assert 'disk I/O error' in exc_info.value.reason
        session.rollback.assert_called_once()
        session.close.assert_called_once()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

class TestQuery:

    def test_ordered_by_followers_desc(self, store):
        store.upsert_batch([_row('small', followers=1), _row('big', followers=1000), _row('mid', followers=50)])
        assert [c['username'] for c in store.query()] == ['big', 'mid', 'small']

    def test_filters_follower_range(self, store):
        store.upsert_batch([_row('a', followers=500), _row('b', followers=5000), _row('c', followers=50000)])
        filters = CreatorFilters(min_followers=1000, max_followers=10000)
        assert [c['username'] for c in store.query(filters)] == ['b']

    def test_filters_tristate(self, store):
        store.upsert_batch([_row('v', verified='true'), _row('n', verified='false')])
        assert [c['username'] for c in store.query(CreatorFilters(is_verified=True))] == ['v']
        assert [c['username'] for c in store.query(CreatorFilters(is_verified=False))] == ['n']
        assert len(store.query(CreatorFilters())) == 2

    def test_filters_hashtags_any(self, store):
        store.upsert_batch([
            _row('a', bio='#travel life'),
            _row('b', bio='#food only'),
            _row('c', bio='#fitness'),
        ])
        found = store.query(CreatorFilters(hashtags=['travel', 'FOOD']))
        assert sorted(c['username'] for c in found) == ['a', 'b']

    def test_filters_keywords_across_columns(self, store):
        store.upsert_batch([
            _row('beach_bum', bio='sun'),
            _row('x', full_name='Beach Lover'),
            _row('y', category='Mountains'),
        ])
        found = store.query(CreatorFilters(keywords=['beach']))
        assert sorted(c['username'] for c in found) == ['beach_bum', 'x']

    def test_filters_category_substring(self, store):
        store.upsert_batch([_row('a', category='Travel & Leisure'), _row('b', category='Food')])
        assert [c['username'] for c in store.query(CreatorFilters(category='travel'))] == ['a']

    def test_limit_and_offset(self, store):
        store.upsert_batch([_row(f'u{i}', followers=i) for i in range(10)])
        page = store.query(CreatorFilters(limit=3, offset=2))
        assert [c['username'] for c in page] == ['u7', 'u6', 'u5']

    def test_count_ignores_paging(self, store):
        store.upsert_batch([_row(f'u{i}') for i in range(5)])
        assert store.count(CreatorFilters(limit=2)) == 5

    def test_get(self, store):
        created = store.create(_row('alice'))
        assert store.get(created['id'])['username'] == 'alice'
        assert store.get(9999) is None

    def test_latest_update(self, store):
        assert store.latest_update() is None
        store.upsert_batch([_row('alice')])
        assert store.latest_update() is not None


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

class TestDeleteByIds:

    def test_deletes_listed_rows(self, store):
        ids = [store.create(_row(name))['id'] for name in ('a', 'b', 'c')]
        assert store.delete_by_ids(ids[:2]) == 2
        assert [c['username'] for c in store.query()] == ['c']

    def test_missing_ids_not_counted(self, store):
        created = store.create(_row('a'))
        assert store.delete_by_ids([created['id'], 424242]) == 1

    def test_empty_ids(self, store):
        assert store.delete_by_ids([]) == 0


class TestCreateUpdate:

    def test_create_returns_dict(self, store):
        creator = store.create(_row('alice', followers=10))
        assert creator['id'] is not None
        assert creator['follower_count'] == 10

    def test_create_duplicate_username(self, store):
        store.create(_row('alice'))
        with pytest.raises(DuplicateUsernameError):
            store.create(_row('alice'))

    def test_update_changes_fields(self, store):
        created = store.create(_row('alice', followers=10))
        updated = store.update(created['id'], {'follower_count': 20, 'bogus': 'x'})
        assert updated['follower_count'] == 20
        assert updated['username'] == 'alice'

    def test_update_missing_returns_none(self, store):
        assert store.update(12345, {'follower_count': 1}) is None

    def test_update_to_taken_username(self, store):
        store.create(_row('alice'))
        bob = store.create(_row('bob'))
        with pytest.raises(DuplicateUsernameError):
            store.update(bob['id'], {'username': 'alice'})


def test_default_session_factory_is_patched_get_session(store):
    store.create(_row('alice'))
    assert SqlCreatorStore().count() == 1


def test_store_interface_requires_single_record_methods():
    class ReadWriteOnly(CreatorStore):
        def query(self, filters=None):
            return []

        def upsert_batch(self, records, conflict_key='username'):
            return 0

        def delete_by_ids(self, ids):
            return 0

    with pytest.raises(TypeError):
        ReadWriteOnly()


def test_fake_store_round_trips_single_records(store_factory):
    store = store_factory()
    created = store.create({'username': 'jane', 'follower_count': 5})
    assert store.get(created['id'])['username'] == 'jane'
    assert store.update(created['id'], {'follower_count': 9})['follower_count'] == 9
    assert store.update(999, {'follower_count': 1}) is None
    with pytest.raises(DuplicateUsernameError):
        store.create({'username': 'jane'})
