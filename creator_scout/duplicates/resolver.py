"""
Merge resolution — pick the surviving record of each duplicate group.

Survivorship order, best first:
  1. follower_count, higher wins
  2. last_updated, more recent wins (missing/unparseable counts as oldest)
  3. id, lower wins, so equal records resolve the same way on every run
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from creator_scout.store import StoreError

logger = logging.getLogger('duplicates.resolver')


class MergeError(Exception):
    """A deletion failed part-way through a merge. Earlier groups stay merged."""
    def __init__(self, group_key, reason, merged=0, groups_merged=None):
        self.group_key = group_key
        self.reason = str(reason)
        self.merged = merged
        self.groups_merged = groups_merged or []
        super().__init__(
            f"Failed to merge duplicates for {group_key}: {self.reason} "
            f"({merged} duplicate profiles already removed)"
        )


@dataclass
class MergePlan:
    survivor: Dict[str, Any]
    deletions: List[Dict[str, Any]]

    @property
    def deletion_ids(self):
        return [c['id'] for c in self.deletions]


@dataclass
class MergeResult:
    merged: int = 0
    groups_merged: List[str] = field(default_factory=list)
    survivors: Dict[str, Any] = field(default_factory=dict)  # group key → survivor id

    def to_dict(self):
        return {
            'success': True,
            'merged': self.merged,
            'groups_merged': self.groups_merged,
            'survivors': self.survivors,
            'message': f"Merged {self.merged} duplicate profiles",
        }


def _timestamp(value) -> float:
    """Epoch seconds for a datetime or ISO string; naive values are UTC."""
    if not value:
        return float('-inf')
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return float('-inf')
    if not isinstance(value, datetime):
        return float('-inf')
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _id_order(creator):
    try:
        return int(creator.get('id'))
    except (TypeError, ValueError):
        return float('inf')


def survivorship_key(creator: Dict[str, Any]):
    return (
        -(creator.get('follower_count') or 0),
        -_timestamp(creator.get('last_updated')),
        _id_order(creator),
    )


def rank_creators(creators: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return creators ordered best-first for survivorship."""
    return sorted(creators, key=survivorship_key)


def resolve_group(creators: List[Dict[str, Any]]) -> MergePlan:
    ranked = rank_creators(creators)
    if not ranked:
        raise ValueError("Cannot resolve an empty duplicate group")
    return MergePlan(survivor=ranked[0], deletions=ranked[1:])


def merge_selected(store, groups, selected_keys) -> MergeResult:
    """
    Delete the non-surviving members of every selected group.

    Only groups whose key is in selected_keys take part. Groups run in list
    order with one bulk delete each. The first StoreError aborts with
    MergeError; deletions already issued are not undone.
    """
    selected = set(selected_keys or [])
    if not selected:
        raise ValueError("Select duplicate groups to merge")

    result = MergeResult()
    deleted_ids = set()

    for group in groups:
        if group.key not in selected:
            continue
        # Members removed by an earlier group in this call no longer compete
        remaining = [c for c in group.creators if c['id'] not in deleted_ids]
        if len(remaining) < 2:
            continue

        plan = resolve_group(remaining)
        ids = plan.deletion_ids

        try:
            store.delete_by_ids(ids)
        except StoreError as e:
            logger.error("Merge failed on group %s after %d deletions: %s", group.key, result.merged, e)
            raise MergeError(group.key, e.reason, merged=result.merged,
                             groups_merged=list(result.groups_merged)) from e

        deleted_ids.update(ids)
        result.merged += len(ids)
        result.groups_merged.append(group.key)
        result.survivors[group.key] = plan.survivor['id']
        logger.info("Merged group %s: kept id=%s, removed %s", group.key, plan.survivor['id'], ids)

    return result
