"""
Dashboard routes — health check, database status and creator analytics.
"""
import logging
from flask import Blueprint, jsonify

from creator_scout.services.analytics import EMPTY_DATABASE_STATS, creator_stats, database_stats
from creator_scout.services.circuit_breaker import get_all_breakers
from creator_scout.store import get_store

logger = logging.getLogger('routes.dashboard')

bp = Blueprint('dashboard', __name__)


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200


@bp.route('/api/stats')
def get_stats():
    """Database status card. Never fails the request; reports is_connected instead."""
    try:
        stats = database_stats(get_store())
        stats['services'] = [cb.get_health() for cb in get_all_breakers().values()]
        return jsonify({'success': True, 'stats': stats})
    except Exception as e:
        logger.error("Error generating stats: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': str(e), 'stats': dict(EMPTY_DATABASE_STATS)}), 200


@bp.route('/api/analytics')
def get_analytics():
    """Aggregate creator analytics over the whole table."""
    try:
        creators = get_store().query()
    except Exception as e:
        logger.error("Failed to load analytics: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to load analytics'}), 500
    return jsonify({'success': True, 'analytics': creator_stats(creators)})
