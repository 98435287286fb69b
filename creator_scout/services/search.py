"""
Creator search — filter parsing and paged lookup against the store.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from creator_scout.config import SEARCH_DEFAULT_LIMIT, MAX_FOLLOWERS_UNBOUNDED

logger = logging.getLogger('services.search')


def _as_list(value):
    """Accept a list or a comma-separated string; drop blanks and leading #/@."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(v).strip().lstrip('#@') for v in value if str(v).strip().lstrip('#@')]


def _as_tristate(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', '1', 'yes'):
        return True
    if text in ('false', '0', 'no'):
        return False
    return None


def _as_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class CreatorFilters:
    """Search criteria. List filters OR within themselves; everything else ANDs."""
    hashtags: List[str] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    min_followers: int = 0
    max_followers: int = MAX_FOLLOWERS_UNBOUNDED
    is_verified: Optional[bool] = None
    is_business: Optional[bool] = None
    is_private: Optional[bool] = None
    category: str = ''
    profile_type: str = ''
    limit: int = SEARCH_DEFAULT_LIMIT
    offset: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CreatorFilters':
        """Build filters from a request payload; camelCase and snake_case both work."""
        data = data or {}

        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            hashtags=_as_list(pick('hashtags')),
            mentions=_as_list(pick('mentions')),
            keywords=_as_list(pick('keywords')),
            min_followers=max(0, _as_int(pick('minFollowers', 'min_followers'), 0)),
            max_followers=_as_int(pick('maxFollowers', 'max_followers'), MAX_FOLLOWERS_UNBOUNDED),
            is_verified=_as_tristate(pick('isVerified', 'is_verified')),
            is_business=_as_tristate(pick('isBusiness', 'is_business')),
            is_private=_as_tristate(pick('isPrivate', 'is_private')),
            category=str(pick('category', default='')).strip(),
            profile_type=str(pick('profileType', 'profile_type', default='')).strip(),
            limit=max(1, _as_int(pick('limit'), SEARCH_DEFAULT_LIMIT)),
            offset=max(0, _as_int(pick('offset'), 0)),
        )


@dataclass
class SearchResult:
    creators: List[Dict[str, Any]]
    total: int
    success: bool = True
    error: Optional[str] = None

    def to_dict(self):
        data = {'success': self.success, 'creators': self.creators, 'total': self.total}
        if self.error:
            data['error'] = self.error
        return data


def search_creators(store, filters: CreatorFilters) -> SearchResult:
    """Run a filtered search; StoreError propagates to the caller."""
    creators = store.query(filters)
    total = store.count(filters)
    logger.info("Found %d creators (total: %d)", len(creators), total)
    return SearchResult(creators=creators, total=total)
