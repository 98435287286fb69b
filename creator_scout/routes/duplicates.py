"""
Duplicate routes — scan for duplicate creators and merge selected groups.
"""
import logging
from flask import Blueprint, jsonify

from creator_scout.duplicates.grouper import find_duplicate_groups
from creator_scout.duplicates.resolver import MergeError, merge_selected
from creator_scout.routes import json_object
from creator_scout.store import StoreError, get_store

logger = logging.getLogger('routes.duplicates')

bp = Blueprint('duplicates', __name__)


@bp.route('/api/duplicates')
def scan():
    try:
        groups = find_duplicate_groups(get_store())
    except StoreError as e:
        logger.error("Scan error: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to scan for duplicates'}), 500

    message = 'No duplicates found!' if not groups else f'Found {len(groups)} duplicate groups'
    return jsonify({
        'success': True,
        'groups': [g.to_dict() for g in groups],
        'total_duplicates': sum(len(g.creators) - 1 for g in groups),
        'message': message,
    })


@bp.route('/api/duplicates/merge', methods=['POST'])
def merge():
    """Merge the groups named in {"keys": [...]}. Groups are re-scanned first."""
    keys = json_object().get('keys') or []
    if not keys:
        return jsonify({'success': False, 'error': 'Select duplicate groups to merge'}), 400

    store = get_store()
    try:
        groups = find_duplicate_groups(store)
        result = merge_selected(store, groups, keys)
    except MergeError as e:
        return jsonify({
            'success': False,
            'error': 'Failed to merge duplicates',
            'detail': str(e),
            'merged': e.merged,
            'groups_merged': e.groups_merged,
        }), 500
    except StoreError as e:
        logger.error("Merge scan error: %s", e, exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to scan for duplicates'}), 500

    return jsonify(result.to_dict())
