"""
Sheet import orchestration.

    read sheet -> (purge) -> seed lookups -> build graphs -> insert
    applications -> interviews -> referrals -> sales -> verify

Each step finishes before the next starts. Row-level problems go into the
ImportStats counters and are reported once at the end.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from django.utils import timezone

from placements.models import JobSeeker, Organization
from sheets.client import SheetExportClient

from . import codes
from .builder import RecordBuilder, full_name
from .exceptions import OrganizationNotFoundError
from .funnel import (
    comparison_frame,
    compute_funnel,
    compute_sheet_funnel,
    compute_work_month_plan,
    diff_against_reference,
    load_funnel_inputs,
    sale_date_gaps,
)
from .loader import BatchLoader, delete_in_chunks, purge_operational_records
from .masters import MasterDataResolver
from .normalizers import normalize_phone, parse_amount
from .reader import read_sheet
from .resolver import PLACEHOLDER_PHONE_PREFIX, ApplicationIndex, JobSeekerResolver

logger = logging.getLogger(__name__)


def get_organization(code=None):
    """The organization to import into: by code, else the first active one"""
    if code:
        organization = Organization.objects.filter(code=code).first()
        if organization is None:
            raise OrganizationNotFoundError(f"No organization with code '{code}'")
        return organization

    organization = Organization.objects.filter(is_active=True).order_by('id').first()
    if organization is None:
        raise OrganizationNotFoundError("No organization found; create one before importing")
    return organization


def load_sheet(csv_path=None, url=None, validate_headers=True, client=None):
    """Read the sheet from a local export or, with `url`, download it first"""
    if url:
        client = client or SheetExportClient()
        logger.info(f"Downloading sheet export from {url}")
        return read_sheet(client.download(url), validate_headers=validate_headers)
    return read_sheet(csv_path, validate_headers=validate_headers)


@dataclass
class SheetPreview:
    rows: int
    blank_rows: int
    counts: Counter
    report: object
    deltas: list

    @property
    def frame(self):
        return comparison_frame(self.deltas)


def preview_sheet(sheet, reference=None):
    """Dry run: what the import would create, with nothing written"""
    counts = Counter()
    for row in sheet.rows:
        phone = normalize_phone(row.get('phone'))
        if not phone and not full_name(row):
            counts['skipped_no_identity'] += 1
            continue
        counts['applications'] += 1
        if not phone:
            counts['missing_phone'] += 1
        if codes.screening_result(row.get('screening_outcome')):
            counts['interviews'] += 1
        if codes.is_connected(row.get('connection_status')):
            counts['referrals'] += 1
            for key in ('expected_revenue', 'confirmed_revenue', 'paid_amount'):
                amount = parse_amount(row.get(key))
                if amount is not None and amount > 0:
                    counts['sales'] += 1

    report = compute_sheet_funnel(sheet.rows)
    return SheetPreview(
        rows=len(sheet.rows),
        blank_rows=sheet.blank_rows,
        counts=counts,
        report=report,
        deltas=diff_against_reference(report, reference),
    )


@dataclass
class ImportStats:
    rows: int = 0
    counts: Counter = field(default_factory=Counter)
    purged: dict = field(default_factory=dict)
    inserted: dict = field(default_factory=dict)
    failed: dict = field(default_factory=dict)
    failures: list = field(default_factory=list)
    started_at: object = None
    finished_at: object = None

    @property
    def duration(self):
        if self.started_at and self.finished_at:
            return self.finished_at - self.started_at
        return None


def purge_for_reimport(organization, config):
    purged = purge_operational_records(organization, config.delete_chunk_size)
    # Placeholder phones never match again, so their job seekers would pile up
    orphans = JobSeeker.objects.filter(
        organization=organization,
        phone__startswith=PLACEHOLDER_PHONE_PREFIX,
        applications__isnull=True,
    )
    purged['JobSeeker'] = delete_in_chunks(orphans, config.delete_chunk_size)
    return purged


def _keep_children(children, parent_ids, parent_attr, stats, counter):
    kept = []
    for child in children:
        if getattr(child, parent_attr) in parent_ids:
            kept.append(child)
        else:
            stats.counts[counter] += 1
    return kept


def run_import(sheet, organization, config, incremental=False, today=None):
    """
    Write the sheet into `organization`.

    A full import deletes the organization's applications and everything
    below them first, then recreates them; job seekers and reference data
    are reused. An incremental import keeps existing rows and skips rows
    whose (phone, applied date) is already stored.
    """
    stats = ImportStats(rows=len(sheet.rows), started_at=timezone.now())
    mode = 'incremental' if incremental else 'full re-import'
    logger.info(f"Importing {stats.rows} rows into {organization} ({mode})")

    if not incremental:
        stats.purged = purge_for_reimport(organization, config)
        logger.info(f"Purged existing records: {stats.purged}")

    masters = MasterDataResolver(organization, config.page_size, stats.counts).seed()
    job_seekers = JobSeekerResolver(organization, config.page_size, stats.counts).seed()
    existing = ApplicationIndex(organization, config.page_size).seed() if incremental else None

    builder = RecordBuilder(
        organization, masters, job_seekers,
        stats=stats.counts, existing=existing, today=today or date.today(),
    )
    graphs = []
    for index, row in enumerate(sheet.rows, start=1):
        graph = builder.build(row)
        if graph is not None:
            graphs.append(graph)
        if index % 2000 == 0:
            logger.info(f"Parsed {index}/{stats.rows} rows...")
    logger.info(f"Built {len(graphs)} record graphs from {stats.rows} rows")

    loader = BatchLoader(batch_size=config.batch_size)

    application_ids = loader.insert(
        [g.application for g in graphs],
        label=lambda obj: f"application for job seeker {obj.job_seeker_id}",
    )

    interviews = _keep_children(
        [g.interview for g in graphs if g.interview is not None],
        application_ids, 'application_id', stats, 'interviews_orphaned',
    )
    loader.insert(interviews)

    referrals = _keep_children(
        [g.referral for g in graphs if g.referral is not None],
        application_ids, 'application_id', stats, 'referrals_orphaned',
    )
    referral_ids = loader.insert(referrals)

    sales = _keep_children(
        [sale for g in graphs for sale in g.sales],
        referral_ids, 'referral_id', stats, 'sales_orphaned',
    )
    loader.insert(sales)

    stats.inserted = dict(loader.inserted)
    stats.failed = dict(loader.failed)
    stats.failures = list(loader.failures)
    stats.finished_at = timezone.now()
    logger.info(f"Import finished in {stats.duration}: inserted {stats.inserted}, failed {stats.failed}")
    return stats


@dataclass
class Verification:
    report: object
    deltas: list
    plan: object
    sale_gaps: Counter

    @property
    def frame(self):
        return comparison_frame(self.deltas)

    @property
    def mismatches(self):
        return [d for d in self.deltas if d.delta]


def verify_funnel(organization, page_size=1000, reference=None):
    """Recompute every metric from stored rows and diff against the reference totals"""
    interviews, referrals, sales = load_funnel_inputs(organization, page_size)
    report = compute_funnel(interviews, referrals, sales)
    return Verification(
        report=report,
        deltas=diff_against_reference(report, reference),
        plan=compute_work_month_plan(referrals, sales),
        sale_gaps=sale_date_gaps(sales),
    )
