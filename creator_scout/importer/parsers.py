"""
Import text parsers — JSON arrays and single-line-per-record CSV.
"""
import csv
import json
import logging
from typing import Any, Dict, List

logger = logging.getLogger('importer.parsers')

SUPPORTED_FORMATS = ('json', 'csv')


class ImportFormatError(Exception):
    """Raised when import text cannot be parsed in the requested format."""
    def __init__(self, fmt, reason):
        self.format = fmt
        self.reason = str(reason)
        super().__init__(f"Invalid {fmt.upper()} format: {self.reason}")


def parse_json_records(text: str) -> List[Dict[str, Any]]:
    """Parse a JSON array (or a single object) into a list of row dicts."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportFormatError('json', e) from e

    rows = data if isinstance(data, list) else [data]
    records = [row for row in rows if isinstance(row, dict)]
    if len(records) != len(rows):
        logger.warning("Skipped %d non-object JSON entries", len(rows) - len(records))
    return records


def parse_csv_records(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text whose first line is the header.

    Quoted fields may contain commas and doubled quotes. Each record is
    expected on one line; rows whose column count differs from the header
    are dropped.
    """
    lines = (text or '').strip().splitlines()
    if len(lines) < 2:
        return []

    try:
        rows = list(csv.reader(lines))
    except csv.Error as e:
        raise ImportFormatError('csv', e) from e

    headers = [h.strip().replace('"', '') for h in rows[0]]
    records = []
    skipped = 0
    for values in rows[1:]:
        if len(values) != len(headers):
            skipped += 1
            continue
        records.append({h: v.strip() for h, v in zip(headers, values)})

    if skipped:
        logger.warning("Skipped %d CSV rows with mismatched column count", skipped)
    return records


def detect_format(filename: str) -> str:
    """Map a file name to an import format, or '' when unsupported."""
    name = (filename or '').lower()
    for fmt in SUPPORTED_FORMATS:
        if name.endswith('.' + fmt):
            return fmt
    return ''


def parse_import_text(text: str, fmt: str) -> List[Dict[str, Any]]:
    fmt = (fmt or '').lower()
    if fmt == 'json':
        return parse_json_records(text)
    if fmt == 'csv':
        return parse_csv_records(text)
    raise ImportFormatError(fmt or 'unknown', f"unsupported format (expected one of {', '.join(SUPPORTED_FORMATS)})")
