"""
Creator routes — search, single-record CRUD and bulk delete.
"""
import logging
from flask import Blueprint, jsonify, request

from creator_scout.importer.normalize import coerce_changes, normalize_record
from creator_scout.routes import json_object
from creator_scout.services.search import CreatorFilters, search_creators
from creator_scout.store import DuplicateUsernameError, StoreError, get_store

logger = logging.getLogger('routes.creators')

bp = Blueprint('creators', __name__)


@bp.route('/api/creators/search', methods=['GET', 'POST'])
def search():
    """Filtered creator search. POST takes a JSON body, GET query args."""
    payload = json_object() if request.method == 'POST' else request.args.to_dict()
    filters = CreatorFilters.from_dict(payload or {})
    try:
        result = search_creators(get_store(), filters)
        return jsonify(result.to_dict())
    except StoreError as e:
        logger.error("Search error: %s", e, exc_info=True)
        return jsonify({'success': False, 'creators': [], 'total': 0, 'error': 'Search failed'}), 500


@bp.route('/api/creators', methods=['POST'])
def create_creator():
    """Add one creator by hand. Input goes through the import normalizer."""
    record = normalize_record(request.get_json(silent=True) or {})
    if not record['username']:
        return jsonify({'success': False, 'error': 'Username is required'}), 400
    if record['source_keyword'] == 'import':
        record['source_keyword'] = 'manual'

    try:
        creator = get_store().create(record)
        return jsonify({'success': True, 'creator': creator}), 201
    except DuplicateUsernameError as e:
        return jsonify({'success': False, 'error': e.reason}), 409
    except StoreError as e:
        logger.error("Create creator failed: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to add creator'}), 500


@bp.route('/api/creators/<int:creator_id>')
def get_creator(creator_id):
    try:
        creator = get_store().get(creator_id)
    except StoreError as e:
        logger.error("Load creator %s failed: %s", creator_id, e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to load creator'}), 500
    if creator is None:
        return jsonify({'success': False, 'error': 'Creator not found'}), 404
    return jsonify({'success': True, 'creator': creator})


@bp.route('/api/creators/<int:creator_id>', methods=['PATCH'])
def update_creator(creator_id):
    """Manual edit. Only the supplied fields change."""
    changes = request.get_json(silent=True) or {}
    if not isinstance(changes, dict):
        return jsonify({'success': False, 'error': 'Expected a JSON object'}), 400
    if 'username' in changes and not str(changes['username'] or '').strip():
        return jsonify({'success': False, 'error': 'Username cannot be empty'}), 400

    changes, failed = coerce_changes(changes)
    if failed:
        return jsonify({'success': False, 'error': f"Invalid number for: {', '.join(failed)}"}), 400

    try:
        creator = get_store().update(creator_id, changes)
    except DuplicateUsernameError as e:
        return jsonify({'success': False, 'error': e.reason}), 409
    except StoreError as e:
        logger.error("Update creator %s failed: %s", creator_id, e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to update creator'}), 500
    if creator is None:
        return jsonify({'success': False, 'error': 'Creator not found'}), 404
    return jsonify({'success': True, 'creator': creator})


@bp.route('/api/creators/<int:creator_id>', methods=['DELETE'])
def delete_creator(creator_id):
    try:
        removed = get_store().delete_by_ids([creator_id])
    except StoreError as e:
        logger.error("Delete creator %s failed: %s", creator_id, e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to delete creator'}), 500
    if not removed:
        return jsonify({'success': False, 'error': 'Creator not found'}), 404
    return jsonify({'success': True})


@bp.route('/api/creators/bulk-delete', methods=['POST'])
def bulk_delete():
    ids = json_object().get('ids') or []
    try:
        ids = [int(i) for i in ids]
    except (TypeError, ValueError):
        return jsonify({'success': False, 'error': 'ids must be integers'}), 400
    if not ids:
        return jsonify({'success': False, 'error': 'No creators selected'}), 400

    try:
        removed = get_store().delete_by_ids(ids)
    except StoreError as e:
        logger.error("Bulk delete failed: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to delete creators'}), 500
    return jsonify({'success': True, 'deleted': removed})
