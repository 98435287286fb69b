"""
Record normalization — map loosely-shaped import rows onto the Creator schema.

Import files come from spreadsheets, other scrapers and hand-edited JSON, so
the same field shows up as `followers`, `follower_count` or `followerCount`.
FIELD_ALIASES lists, per canonical field, the keys we accept in priority
order. The first alias holding a truthy value wins, so a 0 or False under
the canonical name falls through to the next alias; if none does, the field
gets its kind's default.

Normalization never raises. A value that cannot be coerced becomes the
default (0 for numbers) and, when asked for, is reported back through
normalize_record_with_report() so stricter callers can flag it.
"""
import math
import re
from typing import Any, Dict, List, Tuple

STR = 'str'
INT = 'int'
FLOAT = 'float'
BOOL = 'bool'

_DEFAULTS = {STR: '', INT: 0, FLOAT: 0.0, BOOL: False}

DEFAULT_SOURCE_KEYWORD = 'import'

# (canonical field, kind, aliases in priority order)
FIELD_ALIASES = [
    ('username',        STR,   ['username', 'Username']),
    ('full_name',       STR,   ['full_name', 'fullName', 'name', 'Name']),
    ('profile_url',     STR,   ['profile_url', 'profileUrl', 'url']),
    ('pk',              STR,   ['pk', 'instagram_id', 'instagramId']),
    ('follower_count',  INT,   ['follower_count', 'followers', 'followerCount']),
    ('following_count', INT,   ['following_count', 'following', 'followingCount']),
    ('media_count',     INT,   ['media_count', 'posts', 'mediaCount']),
    ('is_verified',     BOOL,  ['is_verified', 'verified', 'isVerified']),
    ('is_business',     BOOL,  ['is_business', 'business', 'isBusiness']),
    ('is_private',      BOOL,  ['is_private', 'private', 'isPrivate']),
    ('category',        STR,   ['category', 'Category']),
    ('bio',             STR,   ['bio', 'biography', 'Bio']),
    ('external_url',    STR,   ['external_url', 'website', 'externalUrl']),
    ('profile_pic_url', STR,   ['profile_pic_url', 'avatar', 'profilePicUrl']),
    ('bio_hashtags',    STR,   ['bio_hashtags', 'hashtags', 'bioHashtags']),
    ('bio_mentions',    STR,   ['bio_mentions', 'mentions', 'bioMentions']),
    ('engagement_rate', FLOAT, ['engagement_rate', 'engagementRate']),
    ('source_keyword',  STR,   ['source_keyword', 'source', 'sourceKeyword']),
    ('search_score',    FLOAT, ['search_score', 'searchScore']),
    ('profile_type',    STR,   ['profile_type', 'type', 'profileType']),
]

_TRUE_STRINGS = {'true', 't', 'yes', 'y', '1'}
_HASHTAG_RE = re.compile(r'#\w+')
_MENTION_RE = re.compile(r'@\w+')


# ── Coercion helpers ─────────────────────────────────────────────────────────

def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def to_int(value) -> Tuple[int, bool]:
    """Return (int_value, ok). Floats and float-strings truncate toward zero."""
    if isinstance(value, bool):
        return int(value), True
    if isinstance(value, int):
        return value, True
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return 0, False
    if math.isnan(number) or math.isinf(number):
        return 0, False
    return int(number), True


def to_float(value) -> Tuple[float, bool]:
    if isinstance(value, bool):
        return float(value), True
    try:
        number = float(str(value).strip().rstrip('%'))
    except (TypeError, ValueError):
        return 0.0, False
    if math.isnan(number) or math.isinf(number):
        return 0.0, False
    return number, True


def to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def extract_hashtags(bio: str) -> str:
    return ', '.join(_HASHTAG_RE.findall(bio or ''))


def extract_mentions(bio: str) -> str:
    return ', '.join(_MENTION_RE.findall(bio or ''))


def normalize_engagement(rate: float) -> float:
    """Store engagement as a fraction in [0, 1]; anything above 1 is read as a percentage."""
    if rate > 1:
        rate = rate / 100.0
    return min(1.0, max(0.0, rate))


# ── Public API ───────────────────────────────────────────────────────────────

def _resolve(raw, aliases):
    for key in aliases:
        value = raw.get(key)
        if value and not _is_blank(value):
            return value, True
    return None, False


def _coerce(kind, value):
    """Coerce one present value to its field kind. Returns (value, ok)."""
    if kind == STR:
        return ('' if value is None else str(value).strip()), True
    if kind == INT:
        number, ok = to_int(value)
        return max(0, number), ok
    if kind == FLOAT:
        return to_float(value)
    return to_bool(value), True


FIELD_KINDS = {name: kind for name, kind, _ in FIELD_ALIASES}


def coerce_changes(changes: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Coerce a partial update keyed by canonical field names.

    Unknown keys pass through untouched (the store ignores them). Returns
    (coerced, failed_fields); failed_fields names numeric fields whose value
    could not be parsed.
    """
    coerced: Dict[str, Any] = {}
    failed: List[str] = []
    for key, value in changes.items():
        kind = FIELD_KINDS.get(key)
        if kind is None:
            coerced[key] = value
            continue
        if kind in (INT, FLOAT) and _is_blank(value):
            value = 0
        coerced[key], ok = _coerce(kind, value)
        if not ok:
            failed.append(key)
    if 'engagement_rate' in coerced:
        coerced['engagement_rate'] = normalize_engagement(coerced['engagement_rate'])
    return coerced, failed


def normalize_record_with_report(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Normalize one import row and list the fields whose value failed coercion.

    Returns (record, failed_fields). record always carries every canonical
    field; failed_fields names numeric fields that held a value we could not
    parse (and so were defaulted to 0).
    """
    if not isinstance(raw, dict):
        raw = {}

    record: Dict[str, Any] = {}
    failed: List[str] = []

    for name, kind, aliases in FIELD_ALIASES:
        value, found = _resolve(raw, aliases)
        if not found:
            record[name] = _DEFAULTS[kind]
            continue

        record[name], ok = _coerce(kind, value)
        if not ok:
            failed.append(name)

    record['engagement_rate'] = normalize_engagement(record['engagement_rate'])
    if not record['source_keyword']:
        record['source_keyword'] = DEFAULT_SOURCE_KEYWORD
    if not record['bio_hashtags']:
        record['bio_hashtags'] = extract_hashtags(record['bio'])
    if not record['bio_mentions']:
        record['bio_mentions'] = extract_mentions(record['bio'])

    return record, failed


def normalize_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize one import row into a canonical creator dict. Never raises."""
    record, _ = normalize_record_with_report(raw)
    return record


def normalize_records(rows) -> List[Dict[str, Any]]:
    return [normalize_record(row) for row in rows]
