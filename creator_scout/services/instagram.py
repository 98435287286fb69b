"""
Instagram profile discovery via the public top-search endpoint.

InstagramSearchClient only fetches and maps; run_scrape() adds the
bookkeeping around it (scraping_jobs row, upsert into the creator store).
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from creator_scout.config import (
    INSTAGRAM_SEARCH_URL, INSTAGRAM_USER_AGENT, INSTAGRAM_TIMEOUT, SCRAPE_DEFAULT_LIMIT,
)
from creator_scout.database import get_session
from creator_scout.importer.normalize import extract_hashtags, extract_mentions
from creator_scout.models.scraping_job import ScrapingJob
from creator_scout.services.circuit_breaker import get_breaker
from creator_scout.store import StoreError

logger = logging.getLogger('services.instagram')


class ScrapeError(Exception):
    """Raised when Instagram search cannot be completed."""


@dataclass
class ScrapeResult:
    profiles: List[Dict[str, Any]] = field(default_factory=list)
    total_found: int = 0
    total_saved: int = 0
    job_id: Optional[int] = None

    def to_dict(self):
        return {
            'success': True,
            'profiles': self.profiles,
            'totalFound': self.total_found,
            'totalSaved': self.total_saved,
            'jobId': self.job_id,
        }


def map_user(user: Dict[str, Any], query: str) -> Dict[str, Any]:
    """Map one `users[].user` entry from top-search into a creator dict."""
    username = user.get('username') or ''
    bio = user.get('biography') or ''
    pk = user.get('pk')
    return {
        'username': username,
        'full_name': user.get('full_name') or '',
        'profile_url': f'https://instagram.com/{username}',
        'pk': str(pk) if pk is not None else '',
        'follower_count': user.get('follower_count') or 0,
        'following_count': user.get('following_count') or 0,
        'media_count': user.get('media_count') or 0,
        'is_verified': bool(user.get('is_verified')),
        'is_business': bool(user.get('is_business_account')),
        'is_private': bool(user.get('is_private')),
        'category': user.get('category') or '',
        'bio': bio,
        'external_url': user.get('external_url') or '',
        'profile_pic_url': user.get('profile_pic_url') or '',
        'bio_hashtags': extract_hashtags(bio),
        'bio_mentions': extract_mentions(bio),
        'engagement_rate': 0.0,
        'source_keyword': query,
    }


class InstagramSearchClient:
    """
    Thin client over Instagram's blended top-search.

    Usage:
        client = InstagramSearchClient()
        result = client.search('travel creator', session_token='abc', limit=25)
    """

    def __init__(self, search_url: str = INSTAGRAM_SEARCH_URL, timeout: int = INSTAGRAM_TIMEOUT,
                 http=None):
        self.search_url = search_url
        self.timeout = timeout
        self.http = http or requests

    def _headers(self, session_token=None):
        headers = {
            'User-Agent': INSTAGRAM_USER_AGENT,
            'Accept': 'application/json',
            'Accept-Language': 'en-US,en;q=0.9',
            'X-Requested-With': 'XMLHttpRequest',
            'Referer': 'https://www.instagram.com/',
        }
        if session_token:
            headers['Cookie'] = f'sessionid={session_token}'
        return headers

    def _fetch(self, query, session_token):
        params = {
            'context': 'blended',
            'query': query,
            'rank_token': f'0.{int(time.time() * 1000)}',
            'include_reel': 'true',
        }
        resp = self.http.get(
            self.search_url, params=params,
            headers=self._headers(session_token), timeout=self.timeout,
        )
        if not resp.ok:
            raise ScrapeError(
                f"Instagram API error: {resp.status_code}. Try adding a valid session ID."
            )
        return resp.json()

    def search(self, query: str, session_token: Optional[str] = None,
               limit: int = SCRAPE_DEFAULT_LIMIT) -> ScrapeResult:
        if not query or not query.strip():
            raise ValueError("Search query is required")

        logger.info("Starting scrape for query: %s, limit: %d", query, limit)
        try:
            data = get_breaker('instagram').call(self._fetch, query, session_token)
        except requests.RequestException as e:
            raise ScrapeError(f"Instagram request failed: {e}") from e

        profiles = []
        for item in (data.get('users') or [])[:limit]:
            user = (item or {}).get('user')
            if not user:
                continue
            profiles.append(map_user(user, query))

        logger.info("Found %d profiles for %s", len(profiles), query)
        return ScrapeResult(profiles=profiles, total_found=len(profiles))


# ── Job bookkeeping ──────────────────────────────────────────────────────────

def _start_job(query):
    session = get_session()
    try:
        job = ScrapingJob(search_query=query, status='running')
        session.add(job)
        session.commit()
        return job.id
    except Exception:
        session.rollback()
        logger.error("Failed to create scraping job for %s", query, exc_info=True)
        return None
    finally:
        session.close()


def _finish_job(job_id, status, total_found=0, total_saved=0, error_message=None):
    if job_id is None:
        return
    session = get_session()
    try:
        job = session.get(ScrapingJob, job_id)
        if job is None:
            return
        job.status = status
        job.total_found = total_found
        job.total_saved = total_saved
        job.error_message = error_message
        job.completed_at = datetime.now(timezone.utc)
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Failed to update scraping job %s", job_id, exc_info=True)
    finally:
        session.close()


def run_scrape(store, query: str, session_token: Optional[str] = None,
               limit: int = SCRAPE_DEFAULT_LIMIT, client: InstagramSearchClient = None) -> ScrapeResult:
    """
    Search Instagram and upsert every profile found.

    Job bookkeeping never blocks the scrape. Profiles are saved one at a
    time so a single bad row only loses that row.
    """
    client = client or InstagramSearchClient()
    job_id = _start_job(query)

    try:
        result = client.search(query, session_token=session_token, limit=limit)
    except Exception as e:
        _finish_job(job_id, 'failed', error_message=str(e))
        raise

    saved = 0
    for profile in result.profiles:
        if not profile['username']:
            continue
        try:
            saved += min(1, store.upsert_batch([profile], conflict_key='username'))
        except StoreError as e:
            logger.warning("Failed to save %s: %s", profile['username'], e.reason)

    result.total_saved = saved
    result.job_id = job_id
    _finish_job(job_id, 'completed', total_found=result.total_found, total_saved=saved)
    logger.info("Saved %d/%d profiles for %s", saved, result.total_found, query)
    return result
