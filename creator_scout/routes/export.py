"""
Export route — download the current (optionally filtered) creator list.
"""
import logging
from flask import Blueprint, Response, jsonify, request

from creator_scout.services.export import EXPORT_FORMATS, export_creators
from creator_scout.services.search import CreatorFilters
from creator_scout.store import StoreError, get_store

logger = logging.getLogger('routes.export')

bp = Blueprint('export', __name__)


@bp.route('/api/export')
def export():
    args = request.args.to_dict()
    fmt = args.pop('format', 'csv').lower()
    if fmt not in EXPORT_FORMATS:
        return jsonify({'success': False, 'error': f'Unsupported format: {fmt}'}), 400

    filters = CreatorFilters.from_dict(args) if args else None
    try:
        creators = get_store().query(filters)
    except StoreError as e:
        logger.error("Export error: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to export data'}), 500

    if not creators:
        return jsonify({'success': False, 'error': 'No creators to export'}), 404

    payload = export_creators(creators, fmt)
    logger.info("Exported %d creators as %s", len(creators), fmt.upper())
    return Response(
        payload.content.encode('utf-8'),
        mimetype=payload.mimetype,
        headers={'Content-Disposition': f'attachment; filename={payload.filename}'},
    )
