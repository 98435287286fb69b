"""
Creator store — the narrow data-access seam used by the import pipeline,
duplicate scanner and routes.

Components receive a CreatorStore instance instead of opening sessions
themselves, so tests can hand them an in-memory fake. SqlCreatorStore is the
production implementation over the `creators` table.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from creator_scout.config import MAX_FOLLOWERS_UNBOUNDED
from creator_scout.database import get_session
from creator_scout.models.creator import Creator, CREATOR_FIELDS, utcnow

logger = logging.getLogger('creator_scout.store')


class StoreError(Exception):
    """Raised when the canonical store rejects or cannot serve a request."""
    def __init__(self, operation, reason):
        self.operation = operation
        self.reason = str(reason)
        super().__init__(f"{operation} failed: {self.reason}")


class DuplicateUsernameError(StoreError):
    """Raised by create() when the username is already taken."""


class CreatorStore(ABC):
    """
    Capability interface over the canonical creator collection.

    Records cross this boundary as plain dicts shaped like
    Creator.to_dict(). Every method raises StoreError on failure.
    """

    @abstractmethod
    def query(self, filters=None) -> List[Dict[str, Any]]:
        """Return creators matching a CreatorFilters (all rows when None)."""
        ...

    @abstractmethod
    def upsert_batch(self, records: List[Dict[str, Any]], conflict_key: str = 'username') -> int:
        """Insert-or-overwrite records keyed on conflict_key; return rows affected."""
        ...

    @abstractmethod
    def delete_by_ids(self, ids: Iterable[int]) -> int:
        """Delete rows by primary key; return rows removed."""
        ...

    def count(self, filters=None) -> int:
        return len(self.query(filters))

    @abstractmethod
    def get(self, creator_id) -> Optional[Dict[str, Any]]:
        """Return one creator, or None when the id is unknown."""
        ...

    @abstractmethod
    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one creator; DuplicateUsernameError when the username is taken."""
        ...

    @abstractmethod
    def update(self, creator_id, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply changes to one creator; None when the id is unknown."""
        ...


def _writable(record):
    return {k: v for k, v in record.items() if k in CREATOR_FIELDS}


class SqlCreatorStore(CreatorStore):
    """SQLAlchemy-backed store. Works against Postgres and SQLite."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session

    # ── Reads ─────────────────────────────────────────────────────────

    def query(self, filters=None):
        session = self._session_factory()
        try:
            q = self._filtered(session, filters).order_by(Creator.follower_count.desc(), Creator.id)
            if filters is not None:
                q = q.offset(filters.offset).limit(filters.limit)
            return [c.to_dict() for c in q.all()]
        except SQLAlchemyError as e:
            raise StoreError('query', e) from e
        finally:
            session.close()

    def count(self, filters=None):
        session = self._session_factory()
        try:
            return self._filtered(session, filters).count()
        except SQLAlchemyError as e:
            raise StoreError('count', e) from e
        finally:
            session.close()

    def get(self, creator_id):
        session = self._session_factory()
        try:
            creator = session.get(Creator, creator_id)
            return creator.to_dict() if creator else None
        except SQLAlchemyError as e:
            raise StoreError('get', e) from e
        finally:
            session.close()

    def latest_update(self):
        """Most recent last_updated across all rows, or None when empty."""
        session = self._session_factory()
        try:
            return session.query(func.max(Creator.last_updated)).scalar()
        except SQLAlchemyError as e:
            raise StoreError('latest_update', e) from e
        finally:
            session.close()

    # ── Writes ────────────────────────────────────────────────────────

    def upsert_batch(self, records, conflict_key='username'):
        rows = [_writable(r) for r in records]
        if not rows:
            return 0

        session = self._session_factory()
        try:
            dialect = session.get_bind().dialect.name
            insert = postgresql.insert if dialect == 'postgresql' else sqlite.insert
            now = utcnow()

            # Columns present in any row are overwritten on conflict; scraped_at
            # keeps its first-seen value.
            columns = sorted({k for row in rows for k in row if k != conflict_key})
            affected = 0
            for row in rows:
                stmt = insert(Creator).values(**row, scraped_at=now, last_updated=now)
                update_cols = {c: stmt.excluded[c] for c in columns if c in row}
                update_cols['last_updated'] = now
                stmt = stmt.on_conflict_do_update(index_elements=[conflict_key], set_=update_cols)
                affected += session.execute(stmt).rowcount or 0
            session.commit()
            return affected
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError('upsert', e) from e
        finally:
            session.close()

    def delete_by_ids(self, ids):
        ids = [int(i) for i in ids]
        if not ids:
            return 0
        session = self._session_factory()
        try:
            removed = session.query(Creator).filter(Creator.id.in_(ids)).delete(synchronize_session=False)
            session.commit()
            return removed
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError('delete', e) from e
        finally:
            session.close()

    def create(self, record):
        session = self._session_factory()
        try:
            creator = Creator(**_writable(record))
            session.add(creator)
            session.commit()
            return creator.to_dict()
        except IntegrityError as e:
            session.rollback()
            raise DuplicateUsernameError('create', f"username '{record.get('username')}' already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError('create', e) from e
        finally:
            session.close()

    def update(self, creator_id, changes):
        session = self._session_factory()
        try:
            creator = session.get(Creator, creator_id)
            if creator is None:
                return None
            for key, value in _writable(changes).items():
                setattr(creator, key, value)
            creator.last_updated = utcnow()
            session.commit()
            return creator.to_dict()
        except IntegrityError as e:
            session.rollback()
            raise DuplicateUsernameError('update', f"username '{changes.get('username')}' already exists") from e
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreError('update', e) from e
        finally:
            session.close()

    # ── Filter translation ────────────────────────────────────────────

    @staticmethod
    def _filtered(session, filters):
        q = session.query(Creator)
        if filters is None:
            return q

        if filters.min_followers > 0:
            q = q.filter(Creator.follower_count >= filters.min_followers)
        if 0 < filters.max_followers < MAX_FOLLOWERS_UNBOUNDED:
            q = q.filter(Creator.follower_count <= filters.max_followers)
        if filters.is_verified is not None:
            q = q.filter(Creator.is_verified == filters.is_verified)
        if filters.is_business is not None:
            q = q.filter(Creator.is_business == filters.is_business)
        if filters.is_private is not None:
            q = q.filter(Creator.is_private == filters.is_private)
        if filters.category:
            q = q.filter(Creator.category.ilike(f'%{filters.category}%'))
        if filters.profile_type:
            q = q.filter(Creator.profile_type.ilike(f'%{filters.profile_type}%'))
        if filters.hashtags:
            q = q.filter(or_(*[Creator.bio_hashtags.ilike(f'%{h}%') for h in filters.hashtags]))
        if filters.mentions:
            q = q.filter(or_(*[Creator.bio_mentions.ilike(f'%{m}%') for m in filters.mentions]))
        if filters.keywords:
            clauses = []
            for k in filters.keywords:
                pattern = f'%{k}%'
                clauses.extend([
                    Creator.bio.ilike(pattern),
                    Creator.username.ilike(pattern),
                    Creator.full_name.ilike(pattern),
                    Creator.category.ilike(pattern),
                ])
            q = q.filter(or_(*clauses))
        return q


def get_store() -> CreatorStore:
    """Store bound to the application database."""
    return SqlCreatorStore()
