"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from creator_scout.database import Base
from creator_scout.store import CreatorStore, DuplicateUsernameError, SqlCreatorStore, StoreError


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import creator_scout.models.creator
    import creator_scout.models.scraping_job
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session for asserting on rows directly. Rolls back after each test."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(session_factory):
    """Route every get_session() call to the in-memory database.

    Each module binds get_session at import time, so each is patched where
    it is looked up. Every call still gets its own session, as in production.
    """
    targets = [
        'creator_scout.database.get_session',
        'creator_scout.store.get_session',
        'creator_scout.services.analytics.get_session',
        'creator_scout.services.instagram.get_session',
    ]
    patchers = [patch(t, side_effect=session_factory) for t in targets]
    for p in patchers:
        p.start()
    yield session_factory
    for p in reversed(patchers):
        p.stop()


@pytest.fixture
def store(session_factory):
    """SqlCreatorStore over the in-memory database."""
    return SqlCreatorStore(session_factory)


class FakeRedis:
    """Minimal in-memory Redis fake for circuit breaker tests."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = value

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = value

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Fake Redis pipeline that applies queued commands on execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def set(self, key, value):
        self._ops.append(('set', key, value))
        return self

    def delete(self, *keys):
        self._ops.append(('delete', keys))
        return self

    def hincrby(self, key, field, amount):
        self._ops.append(('hincrby', key, field, amount))
        return self

    def hset(self, key, field, value):
        self._ops.append(('hset', key, field, value))
        return self

    def execute(self):
        for op in self._ops:
            if op[0] == 'set':
                self._redis.set(op[1], op[2])
            elif op[0] == 'delete':
                self._redis.delete(*op[1])
            elif op[0] == 'hincrby':
                self._redis.hincrby(op[1], op[2], op[3])
            elif op[0] == 'hset':
                self._redis.hset(op[1], op[2], op[3])
        self._ops = []


@pytest.fixture
def fake_redis():
    """In-memory Redis fake with dict-backed storage."""
    return FakeRedis()


class FakeCreatorStore(CreatorStore):
    """
    Dict-backed store that records every write call.

    fail_upserts / fail_deletes hold 1-based call numbers that should raise
    StoreError instead of writing.
    """

    def __init__(self, creators=None, fail_upserts=(), fail_deletes=()):
        self.rows = {c['id']: dict(c) for c in (creators or [])}
        self.next_id = max(self.rows, default=0) + 1
        self.upsert_calls = []
        self.delete_calls = []
        self.fail_upserts = set(fail_upserts)
        self.fail_deletes = set(fail_deletes)

    def query(self, filters=None):
        return [dict(r) for r in self.rows.values()]

    def upsert_batch(self, records, conflict_key='username'):
        self.upsert_calls.append([dict(r) for r in records])
        if len(self.upsert_calls) in self.fail_upserts:
            raise StoreError('upsert', 'connection reset')
        for record in records:
            existing = next((r for r in self.rows.values() if r[conflict_key] == record[conflict_key]), None)
            if existing:
                existing.update(record)
            else:
                self.rows[self.next_id] = {**record, 'id': self.next_id}
                self.next_id += 1
        return len(records)

    def delete_by_ids(self, ids):
        ids = list(ids)
        self.delete_calls.append(ids)
        if len(self.delete_calls) in self.fail_deletes:
            raise StoreError('delete', 'permission denied')
        removed = 0
        for i in ids:
            if self.rows.pop(i, None) is not None:
                removed += 1
        return removed

    def get(self, creator_id):
        row = self.rows.get(creator_id)
        return dict(row) if row else None

    def create(self, record):
        if any(r['username'] == record['username'] for r in self.rows.values()):
            raise DuplicateUsernameError('create', f"username '{record['username']}' already exists")
        row = {**record, 'id': self.next_id}
        self.rows[self.next_id] = row
        self.next_id += 1
        return dict(row)

    def update(self, creator_id, changes):
        row = self.rows.get(creator_id)
        if row is None:
            return None
        row.update(changes)
        return dict(row)


@pytest.fixture
def fake_store():
    return FakeCreatorStore()


@pytest.fixture
def make_creator():
    """Factory fixture — a creator dict shaped like Creator.to_dict()."""
    counter = iter(range(1, 10_000))

    def _make(**overrides):
        creator_id = overrides.pop('id', None) or next(counter)
        defaults = dict(
            id=creator_id,
            username=f'creator_{creator_id}',
            full_name='Test Creator',
            profile_url='',
            pk=str(1000 + creator_id),
            follower_count=10_000,
            following_count=300,
            media_count=120,
            is_verified=False,
            is_business=False,
            is_private=False,
            category='Travel',
            bio='',
            external_url='',
            profile_pic_url='',
            profile_pic_local='',
            bio_hashtags='',
            bio_mentions='',
            engagement_rate=0.03,
            source_keyword='import',
            search_score=0.0,
            profile_type='',
            scraped_at='2026-01-10T09:00:00+00:00',
            last_updated='2026-01-10T09:00:00+00:00',
        )
        defaults.update(overrides)
        return defaults
    return _make


@pytest.fixture
def app(fake_redis):
    """Flask test app with breakers on the fake Redis."""
    with patch('creator_scout.extensions.redis_client', fake_redis):
        from creator_scout import create_app
        app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def sample_rows():
    """Raw import rows using the different field spellings seen in the wild."""
    return [
        {'username': 'wanderlust_jane', 'name': 'Jane Morrison', 'followers': '82000',
         'bio': 'Slow travel #travel #europe', 'pk': '1001'},
        {'Username': 'nomad.sophie', 'fullName': 'Sophie Laurent', 'followerCount': 120000,
         'verified': 'true', 'engagementRate': 4.1},
        {'username': 'roam.and.rest', 'full_name': 'Emma Chen', 'follower_count': 22000,
         'category': 'Wellness', 'bio': 'Rest is productive @calm #wellness'},
    ]


@pytest.fixture
def store_factory():
    """Build a FakeCreatorStore with seeded rows or injected failures."""
    return FakeCreatorStore
