"""
Import route — JSON or CSV creator data, pasted or uploaded.
"""
import logging
from flask import Blueprint, jsonify, request

from creator_scout.importer.parsers import ImportFormatError, detect_format
from creator_scout.importer.pipeline import import_records, import_text
from creator_scout.store import get_store

logger = logging.getLogger('routes.imports')

bp = Blueprint('imports', __name__)


def _read_payload():
    """Return (data, fmt) from a multipart upload or a JSON body.

    data is import text, an already-parsed list of rows, or None when the
    body is not shaped like either.
    """
    upload = request.files.get('file')
    if upload is not None:
        fmt = request.form.get('format') or detect_format(upload.filename)
        return upload.read().decode('utf-8-sig'), fmt

    body = request.get_json(silent=True)
    if body is None:
        return '', 'json'
    if not isinstance(body, dict):
        return None, 'json'
    data = body.get('data')
    if data is None:
        data = ''
    if not isinstance(data, (str, list)):
        return None, 'json'
    return data, body.get('format') or 'json'


@bp.route('/api/import', methods=['POST'])
def import_creators():
    data, fmt = _read_payload()
    if data is None:
        return jsonify({'success': False, 'error': 'Expected {"format": ..., "data": ...}'}), 400
    if isinstance(data, str) and not data.strip():
        return jsonify({'success': False, 'error': 'No data to import'}), 400

    try:
        if isinstance(data, list):
            result = import_records(get_store(), data)
        else:
            result = import_text(get_store(), data, fmt)
    except ImportFormatError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    if result.imported == 0 and result.errors == 0:
        return jsonify({**result.to_dict(), 'success': False, 'error': 'No valid records to import'}), 400

    logger.info("Import via API: %s", result.summary())
    return jsonify(result.to_dict()), 200 if result.success else 207
