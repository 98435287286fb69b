"""
Creator export — CSV, Excel-friendly TSV and JSON renderings.
"""
import csv
import io
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List

EXPORT_FORMATS = {
    # format: (mimetype, extension)
    'csv': ('text/csv', 'csv'),
    'excel': ('application/vnd.ms-excel', 'xls'),
    'json': ('application/json', 'json'),
}

# (header, creator field)
EXPORT_COLUMNS = [
    ('Username', 'username'),
    ('Full Name', 'full_name'),
    ('Followers', 'follower_count'),
    ('Following', 'following_count'),
    ('Posts', 'media_count'),
    ('Engagement Rate', 'engagement_rate'),
    ('Category', 'category'),
    ('Bio', 'bio'),
    ('Profile URL', 'profile_url'),
    ('External URL', 'external_url'),
    ('Is Verified', 'is_verified'),
    ('Is Business', 'is_business'),
    ('Is Private', 'is_private'),
    ('Bio Hashtags', 'bio_hashtags'),
    ('Bio Mentions', 'bio_mentions'),
    ('Scraped At', 'scraped_at'),
]

_BOOL_FIELDS = {'is_verified', 'is_business', 'is_private'}


@dataclass
class ExportPayload:
    content: str
    mimetype: str
    extension: str
    filename: str


def _cell(creator, name):
    value = creator.get(name)
    if name in _BOOL_FIELDS:
        return 'Yes' if value else 'No'
    if name == 'engagement_rate':
        return f'{(value or 0) * 100:.2f}%'
    if name == 'bio':
        return ' '.join((value or '').replace(',', ' ').split())
    return '' if value is None else str(value)


def _rows(creators):
    return [[_cell(c, name) for _, name in EXPORT_COLUMNS] for c in creators]


def to_csv(creators: List[Dict[str, Any]]) -> str:
    """Every cell quoted, embedded quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    buf.write(','.join(h for h, _ in EXPORT_COLUMNS) + '\n')
    writer.writerows(_rows(creators))
    return buf.getvalue().rstrip('\n')


def to_tsv(creators: List[Dict[str, Any]]) -> str:
    lines = ['\t'.join(h for h, _ in EXPORT_COLUMNS)]
    for row in _rows(creators):
        lines.append('\t'.join(
            cell.replace('\t', ' ').replace('\r', ' ').replace('\n', ' ') for cell in row
        ))
    return '\n'.join(lines)


def to_json(creators: List[Dict[str, Any]]) -> str:
    return json.dumps(creators, indent=2, default=str, ensure_ascii=False)


_RENDERERS = {'csv': to_csv, 'excel': to_tsv, 'json': to_json}


def export_creators(creators: List[Dict[str, Any]], fmt: str = 'csv', today: date = None) -> ExportPayload:
    fmt = (fmt or 'csv').lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'")
    mimetype, extension = EXPORT_FORMATS[fmt]
    stamp = (today or date.today()).isoformat()
    return ExportPayload(
        content=_RENDERERS[fmt](creators),
        mimetype=mimetype,
        extension=extension,
        filename=f'creators-export-{stamp}.{extension}',
    )
