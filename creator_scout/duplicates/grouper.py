"""
Duplicate detection — partition creators into likely-same-account groups.

Two identity keys are checked:
  - username, trimmed and lower-cased
  - pk, Instagram's numeric user id

Username groups are built first. A pk group only keeps members whose
username is not already claimed by a username group, and is reported only
if at least two such members remain.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from creator_scout.duplicates.resolver import rank_creators

logger = logging.getLogger('duplicates.grouper')

USERNAME = 'username'
PK = 'pk'


def normalize_username(value) -> str:
    return str(value or '').strip().lower()


def normalize_pk(value) -> str:
    return str(value or '').strip()


@dataclass
class DuplicateGroup:
    key: str
    match_type: str
    creators: List[Dict[str, Any]] = field(default_factory=list)
    similarity: str = ''

    @property
    def survivor(self):
        return self.creators[0] if self.creators else None

    def to_dict(self):
        return {
            'key': self.key,
            'match_type': self.match_type,
            'similarity': self.similarity,
            'creators': self.creators,
            'survivor_id': self.survivor['id'] if self.survivor else None,
        }


def _bucket(creators, key_fn):
    buckets: Dict[str, List[Dict[str, Any]]] = {}
    for creator in creators:
        key = key_fn(creator)
        if key:
            buckets.setdefault(key, []).append(creator)
    return buckets


def group_duplicates(creators: List[Dict[str, Any]]) -> List[DuplicateGroup]:
    """Group creators sharing a username or pk. Pure; order follows first appearance."""
    groups: List[DuplicateGroup] = []

    by_username = _bucket(creators, lambda c: normalize_username(c.get('username')))
    for key, members in by_username.items():
        if len(members) > 1:
            groups.append(DuplicateGroup(
                key=f'username-{key}',
                match_type=USERNAME,
                creators=rank_creators(members),
                similarity=f'Same username: @{key}',
            ))

    claimed = {normalize_username(c.get('username')) for g in groups for c in g.creators}

    by_pk = _bucket(creators, lambda c: normalize_pk(c.get('pk')))
    for key, members in by_pk.items():
        if len(members) < 2:
            continue
        unclaimed = [c for c in members if normalize_username(c.get('username')) not in claimed]
        if len(unclaimed) > 1:
            groups.append(DuplicateGroup(
                key=f'pk-{key}',
                match_type=PK,
                creators=rank_creators(unclaimed),
                similarity=f'Same Instagram ID: {key[:10]}...',
            ))

    return groups


def find_duplicate_groups(store) -> List[DuplicateGroup]:
    """Scan every stored creator. StoreError propagates; no partial result."""
    creators = store.query()
    groups = group_duplicates(creators)
    logger.info("Scanned %d creators, found %d duplicate groups", len(creators), len(groups))
    return groups
