"""
Paginated reads and batched writes against the relational store.

Everything here runs sequentially: a batch is fully written (or given up on)
before the next one starts, so a later table never sees a missing parent
that is still in flight.
"""
import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction

from placements.models import Application, Interview, Referral, Sale

logger = logging.getLogger(__name__)

# Failures kept for the summary; the count is always exact
MAX_RECORDED_FAILURES = 50


def fetch_all_rows(queryset, page_size, fields=None):
    """
    Read every row of `queryset` in primary-key order, `page_size` at a time.

    The total is counted up front and paging stops once that many rows have
    been read, so an exactly-full last page does not cost an extra round
    trip. An empty page also stops the loop in case rows were deleted under
    us. With `fields`, rows come back as dictionaries.
    """
    total = queryset.count()
    ordered = queryset.order_by('pk')
    if fields:
        ordered = ordered.values(*fields)

    rows = []
    offset = 0
    while offset < total:
        page = list(ordered[offset:offset + page_size])
        if not page:
            logger.warning(f"Empty page at offset {offset} of {total} rows; stopping early")
            break
        rows.extend(page)
        offset += len(page)

    logger.debug(f"Fetched {len(rows)} {queryset.model.__name__} rows in pages of {page_size}")
    return rows


@dataclass
class WriteFailure:
    table: str
    label: str
    error: str


@dataclass
class BatchLoader:
    """
    Insert unsaved model instances in fixed-size batches.

    Each batch goes through `bulk_create` inside a savepoint. If the batch
    fails, every row in it is retried once on its own; rows that still fail
    are recorded and skipped.
    """

    batch_size: int
    inserted: dict = field(default_factory=dict)
    failed: dict = field(default_factory=dict)
    failures: list = field(default_factory=list)

    def insert(self, objects, label=None):
        """Insert `objects` and return the primary keys that were written"""
        objects = list(objects)
        if not objects:
            return set()

        table = objects[0]._meta.db_table
        label = label or (lambda obj: str(obj.pk))
        written = set()

        for start in range(0, len(objects), self.batch_size):
            batch = objects[start:start + self.batch_size]
            try:
                with transaction.atomic():
                    type(batch[0]).objects.bulk_create(batch)
                written.update(obj.pk for obj in batch)
            except DatabaseError as e:
                logger.warning(
                    f"Batch insert into {table} failed at rows {start}-{start + len(batch) - 1}, "
                    f"retrying individually: {e}"
                )
                written.update(self._insert_individually(table, batch, label))

            logger.info(f"{table}: {min(start + self.batch_size, len(objects))}/{len(objects)}")

        self.inserted[table] = self.inserted.get(table, 0) + len(written)
        return written

    def _insert_individually(self, table, batch, label):
        written = set()
        for obj in batch:
            try:
                with transaction.atomic():
                    obj.save(force_insert=True)
                written.add(obj.pk)
            except DatabaseError as e:
                self._record_failure(table, label(obj), e)
        return written

    def _record_failure(self, table, label, error):
        self.failed[table] = self.failed.get(table, 0) + 1
        logger.error(f"Insert into {table} failed for {label}: {error}")
        if len(self.failures) < MAX_RECORDED_FAILURES:
            self.failures.append(WriteFailure(table=table, label=label, error=str(error)))

    @property
    def failure_count(self):
        return sum(self.failed.values())


def delete_in_chunks(queryset, chunk_size):
    """Delete the rows of `queryset` by primary key, `chunk_size` ids per statement"""
    model = queryset.model
    ids = list(queryset.order_by('pk').values_list('pk', flat=True))
    deleted = 0
    for start in range(0, len(ids), chunk_size):
        chunk = ids[start:start + chunk_size]
        deleted += model.objects.filter(pk__in=chunk).delete()[1].get(model._meta.label, 0)
    if ids:
        logger.info(f"Deleted {deleted} {model.__name__} rows")
    return deleted


def purge_operational_records(organization, chunk_size):
    """
    Remove an organization's sales, referrals, interviews and applications.

    Deletion runs leaf to root. Job seekers and reference data are kept so
    their identity survives a full re-import.
    """
    counts = {}
    for model in (Sale, Referral, Interview, Application):
        counts[model.__name__] = delete_in_chunks(
            model.objects.filter(organization=organization), chunk_size
        )
    return counts
