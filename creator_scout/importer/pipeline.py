"""
Batch upsert pipeline — persist normalized creators in fixed-size chunks.

Chunks are written strictly in input order, one store call per chunk. A
failed chunk is recorded and skipped; later chunks still run and nothing is
retried. Rows without a username are dropped before the write since the
upsert is keyed on it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from creator_scout.config import IMPORT_BATCH_SIZE, IMPORT_ERROR_PREVIEW
from creator_scout.importer.normalize import normalize_records
from creator_scout.importer.parsers import parse_import_text
from creator_scout.store import StoreError

logger = logging.getLogger('importer.pipeline')


@dataclass
class ImportResult:
    """Aggregate outcome of one import."""
    success: bool = True
    imported: int = 0
    updated: int = 0  # insert vs update is not distinguishable after an upsert; stays 0
    errors: int = 0
    error_messages: List[str] = field(default_factory=list)
    skipped: int = 0  # rows dropped for lacking a username

    def summary(self, preview: int = IMPORT_ERROR_PREVIEW) -> str:
        parts = [f"Imported {self.imported} creators"]
        if self.errors:
            parts.append(f"{self.errors} records failed to import")
        if self.skipped:
            parts.append(f"{self.skipped} rows skipped without a username")
        text = '; '.join(parts)
        if self.error_messages:
            shown = self.error_messages[:preview]
            text += ' — ' + '; '.join(shown)
            hidden = len(self.error_messages) - len(shown)
            if hidden > 0:
                text += f' (+{hidden} more)'
        return text

    def to_dict(self):
        return {
            'success': self.success,
            'imported': self.imported,
            'updated': self.updated,
            'errors': self.errors,
            'skipped': self.skipped,
            'error_messages': self.error_messages,
            'summary': self.summary(),
        }


class BatchUpsertPipeline:
    """
    Usage:
        pipeline = BatchUpsertPipeline(store, batch_size=50, on_progress=print)
        result = pipeline.run(normalized_records)
    """

    def __init__(self, store, batch_size: int = IMPORT_BATCH_SIZE,
                 on_progress: Optional[Callable[[int], None]] = None):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size
        self.on_progress = on_progress

    def run(self, records: List[Dict[str, Any]]) -> ImportResult:
        result = ImportResult()
        total = len(records)

        for start in range(0, total, self.batch_size):
            batch_no = start // self.batch_size + 1
            chunk = records[start:start + self.batch_size]
            keyed = [r for r in chunk if str(r.get('username') or '').strip()]
            dropped = len(chunk) - len(keyed)

            if keyed:
                try:
                    affected = self.store.upsert_batch(keyed, conflict_key='username')
                    result.imported += affected
                    result.skipped += dropped
                except StoreError as e:
                    # the whole chunk counts as failed, unkeyed rows included
                    result.errors += len(chunk)
                    result.error_messages.append(f"Batch {batch_no}: {e.reason}")
                    logger.warning("Import batch %d failed: %s", batch_no, e.reason)
            else:
                result.skipped += dropped

            self._report_progress(min(start + self.batch_size, total), total)

        result.success = result.errors == 0
        logger.info(
            "Import finished: %d imported, %d errors, %d skipped (%d records)",
            result.imported, result.errors, result.skipped, total,
        )
        return result

    def _report_progress(self, processed, total):
        if self.on_progress is None or total == 0:
            return
        self.on_progress(min(100, round(processed / total * 100)))


def import_records(store, rows, batch_size: int = IMPORT_BATCH_SIZE, on_progress=None) -> ImportResult:
    """Normalize raw rows and upsert them."""
    records = normalize_records(rows)
    return BatchUpsertPipeline(store, batch_size=batch_size, on_progress=on_progress).run(records)


def import_text(store, text: str, fmt: str, batch_size: int = IMPORT_BATCH_SIZE,
                on_progress=None) -> ImportResult:
    """Parse JSON/CSV text, normalize and upsert. ImportFormatError propagates."""
    rows = parse_import_text(text, fmt)
    return import_records(store, rows, batch_size=batch_size, on_progress=on_progress)
