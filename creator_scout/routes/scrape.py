"""
Scrape route — trigger an Instagram search and save what it finds.
"""
import logging
from flask import Blueprint, jsonify

from creator_scout.config import SCRAPE_DEFAULT_LIMIT
from creator_scout.routes import json_object
from creator_scout.services.circuit_breaker import CircuitOpenError
from creator_scout.services.instagram import ScrapeError, run_scrape
from creator_scout.store import get_store

logger = logging.getLogger('routes.scrape')

bp = Blueprint('scrape', __name__)


@bp.route('/api/scrape', methods=['POST'])
def scrape():
    data = json_object()
    query = (data.get('searchQuery') or data.get('search_query') or '').strip()
    session_token = data.get('sessionId') or data.get('session_id') or None
    try:
        limit = int(data.get('limit') or SCRAPE_DEFAULT_LIMIT)
    except (TypeError, ValueError):
        limit = SCRAPE_DEFAULT_LIMIT

    if not query:
        return jsonify({'success': False, 'error': 'Search query is required'}), 400

    try:
        result = run_scrape(get_store(), query, session_token=session_token, limit=limit)
    except CircuitOpenError as e:
        return jsonify({
            'success': False,
            'error': 'Instagram search is paused after repeated failures',
            'retry_after': e.retry_after,
        }), 503
    except ScrapeError as e:
        # Upstream refusals are reported in-band, not as a server error
        return jsonify({'success': False, 'error': str(e)}), 200
    except Exception as e:
        logger.error("Scraping error: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500

    return jsonify(result.to_dict())
