"""
Aggregate creator analytics and database status for the dashboard.
"""
import logging
from collections import Counter
from typing import Any, Dict, List

from creator_scout.database import get_session
from creator_scout.models.scraping_job import ScrapingJob

logger = logging.getLogger('services.analytics')

# (label, inclusive lower bound)
FOLLOWER_TIERS = [
    ('macro', 1_000_000),
    ('mid', 100_000),
    ('micro', 10_000),
    ('nano', 0),
]

TOP_N = 10


def follower_tier(count) -> str:
    count = count or 0
    for label, floor in FOLLOWER_TIERS:
        if count >= floor:
            return label
    return 'nano'


def _split_tokens(text):
    return [t.strip().lstrip('#').lower() for t in (text or '').split(',') if t.strip().lstrip('#')]


def creator_stats(creators: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts, averages and distributions over a list of creator dicts."""
    total = len(creators)
    if total == 0:
        return {
            'total_creators': 0,
            'verified_count': 0,
            'business_count': 0,
            'private_count': 0,
            'avg_followers': 0,
            'avg_engagement': 0.0,
            'category_distribution': {},
            'follower_tiers': {label: 0 for label, _ in reversed(FOLLOWER_TIERS)},
            'top_hashtags': [],
            'source_keywords': {},
        }

    categories = Counter((c.get('category') or '').strip() or 'Uncategorized' for c in creators)
    tiers = Counter(follower_tier(c.get('follower_count')) for c in creators)
    hashtags = Counter(tag for c in creators for tag in _split_tokens(c.get('bio_hashtags')))
    sources = Counter((c.get('source_keyword') or '').strip() or 'unknown' for c in creators)

    return {
        'total_creators': total,
        'verified_count': sum(1 for c in creators if c.get('is_verified')),
        'business_count': sum(1 for c in creators if c.get('is_business')),
        'private_count': sum(1 for c in creators if c.get('is_private')),
        'avg_followers': round(sum(c.get('follower_count') or 0 for c in creators) / total),
        'avg_engagement': round(sum(c.get('engagement_rate') or 0 for c in creators) / total, 4),
        'category_distribution': dict(categories.most_common(TOP_N)),
        'follower_tiers': {label: tiers.get(label, 0) for label, _ in reversed(FOLLOWER_TIERS)},
        'top_hashtags': [{'tag': tag, 'count': n} for tag, n in hashtags.most_common(TOP_N)],
        'source_keywords': dict(sources.most_common(TOP_N)),
    }


def recent_jobs(limit=5) -> List[Dict[str, Any]]:
    session = get_session()
    try:
        jobs = session.query(ScrapingJob).order_by(ScrapingJob.id.desc()).limit(limit).all()
        return [job.to_dict() for job in jobs]
    finally:
        session.close()


def database_stats(store) -> Dict[str, Any]:
    """Row count, last sync time and recent scraping jobs. Store errors propagate."""
    last = store.latest_update() if hasattr(store, 'latest_update') else None
    return {
        'total_creators': store.count(),
        'last_sync': last.isoformat() if hasattr(last, 'isoformat') else last,
        'recent_jobs': recent_jobs(),
        'is_connected': True,
    }


EMPTY_DATABASE_STATS = {
    'total_creators': 0,
    'last_sync': None,
    'recent_jobs': [],
    'is_connected': False,
}
