"""
Duplicate detection and consolidation for companies and applications.

Grouping (which records look like the same thing) is kept apart from the
master policy (which one of a group survives) so each can be checked on
its own.
"""
import logging
import re
import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime

from django.db import DatabaseError, transaction
from django.db.models import Count

from placements.models import Application, Company, Interview, Job, JobSeeker, Referral, Sale

from .loader import delete_in_chunks, fetch_all_rows
from .resolver import application_key

logger = logging.getLogger(__name__)

LEGAL_ENTITY_RE = re.compile(r"株式会社|（株）|\(株\)|有限会社|（有）|\(有\)|合同会社|合資会社")
SPACES_RE = re.compile(r"\s+")

# Prefix candidates shorter than this match too much to be useful
MIN_PREFIX_LENGTH = 2

MERGED_NOTE = "[統合済み] マスター: {name} ({id})"


def normalize_company_name(name):
    """
    Comparable form of a company name.

    Legal entity markers are removed in both their full-width and ASCII
    forms before NFKC folding, then spaces are dropped and Latin letters
    lower-cased.
    """
    text = (name or '').strip().replace('　', ' ')
    text = LEGAL_ENTITY_RE.sub('', text)
    text = unicodedata.normalize('NFKC', text)
    text = LEGAL_ENTITY_RE.sub('', text)
    return SPACES_RE.sub('', text).lower()


@dataclass
class DuplicateCandidate:
    id: object
    name: str
    activity: int = 0
    created_at: datetime = None
    is_active: bool = True
    payload: dict = field(default_factory=dict)


@dataclass
class DuplicateGroup:
    kind: str
    key: object
    members: list


def group_exact(candidates, key):
    """Groups of two or more candidates sharing the same non-empty `key`"""
    by_key = defaultdict(list)
    for candidate in candidates:
        value = key(candidate)
        if value:
            by_key[value].append(candidate)
    return [
        DuplicateGroup('exact', value, members)
        for value, members in by_key.items()
        if len(members) > 1
    ]


def group_prefix(candidates, key, exclude=()):
    """
    Report-only groups: a short key together with every longer key that
    starts with it. Keys in `exclude` (already exact duplicates) and keys
    shorter than two characters never anchor a group.
    """
    by_key = defaultdict(list)
    for candidate in candidates:
        value = key(candidate)
        if value:
            by_key[value].append(candidate)

    ordered = sorted(by_key, key=len)
    groups = []
    for i, shorter in enumerate(ordered):
        if len(shorter) < MIN_PREFIX_LENGTH or shorter in exclude:
            continue
        longer_keys = [k for k in ordered[i + 1:] if k != shorter and k.startswith(shorter)]
        if not longer_keys:
            continue
        members = list(by_key[shorter])
        for longer in longer_keys:
            members.extend(by_key[longer])
        if len(members) > 1:
            groups.append(DuplicateGroup('prefix', shorter, members))
    return groups


def _created_sort_key(candidate):
    created_at = candidate.created_at
    if created_at is None:
        return (1, 0)
    return (0, created_at.timestamp())


def pick_master(members):
    """Most activity wins; ties go to the earliest created. Returns (master, duplicates)"""
    ordered = sorted(members, key=lambda c: (-c.activity, _created_sort_key(c)))
    return ordered[0], ordered[1:]


# Companies

def load_company_candidates(organization, page_size=1000):
    rows = fetch_all_rows(
        Company.objects.filter(organization=organization).annotate(job_count=Count('jobs')),
        page_size,
        ('id', 'name', 'is_active', 'created_at', 'job_count'),
    )
    return [
        DuplicateCandidate(
            id=row['id'],
            name=row['name'],
            activity=row['job_count'],
            created_at=row['created_at'],
            is_active=row['is_active'],
        )
        for row in rows
    ]


def company_key(candidate):
    return normalize_company_name(candidate.name)


def find_company_duplicates(candidates):
    exact = group_exact(candidates, company_key)
    prefix = group_prefix(candidates, company_key, exclude={group.key for group in exact})
    return exact, prefix


@dataclass
class CompanyMergeResult:
    companies_merged: int = 0
    jobs_moved: int = 0
    errors: list = field(default_factory=list)


def merge_companies(groups):
    """Move each duplicate's jobs to the group master and deactivate the duplicate"""
    result = CompanyMergeResult()
    for group in groups:
        if group.kind != 'exact':
            continue
        master, duplicates = pick_master(group.members)
        for duplicate in duplicates:
            try:
                with transaction.atomic():
                    moved = Job.objects.filter(company_id=duplicate.id).update(company_id=master.id)
                    Company.objects.filter(id=duplicate.id).update(
                        is_active=False,
                        notes=MERGED_NOTE.format(name=master.name, id=master.id),
                    )
            except DatabaseError as e:
                result.errors.append(f"{duplicate.name}: {e}")
                logger.error(f"Could not merge company {duplicate.name} into {master.name}: {e}")
                continue
            result.companies_merged += 1
            result.jobs_moved += moved
            logger.info(f"Merged company {duplicate.name} into {master.name} ({moved} jobs moved)")
    return result


# Applications

def load_application_candidates(organization, page_size=1000):
    queryset = Application.objects.filter(organization=organization).annotate(
        interview_count=Count('interviews', distinct=True),
        referral_count=Count('referrals', distinct=True),
        sale_count=Count('referrals__sales', distinct=True),
    )
    rows = fetch_all_rows(
        queryset,
        page_size,
        (
            'id', 'job_seeker_id', 'job_seeker__phone', 'applied_at', 'source_id', 'created_at',
            'interview_count', 'referral_count', 'sale_count',
        ),
    )
    return [
        DuplicateCandidate(
            id=row['id'],
            name=row['job_seeker__phone'],
            activity=row['interview_count'] + row['referral_count'] + row['sale_count'],
            created_at=row['created_at'],
            payload=row,
        )
        for row in rows
    ]


def application_duplicate_key(candidate):
    """(phone, applied day, source); placeholder phones never group"""
    key = application_key(candidate.payload.get('job_seeker__phone'), candidate.payload.get('applied_at'))
    if key is None:
        return None
    return key + (candidate.payload.get('source_id'),)


def find_application_duplicates(candidates):
    return group_exact(candidates, application_duplicate_key)


@dataclass
class ApplicationDedupPlan:
    keep: list = field(default_factory=list)
    delete: list = field(default_factory=list)

    @property
    def impact(self):
        """Related rows that go with the deleted applications"""
        return {
            'applications': len(self.delete),
            'interviews': sum(c.payload.get('interview_count', 0) for c in self.delete),
            'referrals': sum(c.payload.get('referral_count', 0) for c in self.delete),
            'sales': sum(c.payload.get('sale_count', 0) for c in self.delete),
        }


def plan_application_dedup(groups):
    plan = ApplicationDedupPlan()
    for group in groups:
        master, duplicates = pick_master(group.members)
        plan.keep.append(master)
        plan.delete.extend(duplicates)
    return plan


def delete_duplicate_applications(plan, chunk_size=500):
    """
    Delete the planned applications leaf to root, then the job seekers
    they leave without any application.
    """
    application_ids = [c.id for c in plan.delete]
    job_seeker_ids = {c.payload.get('job_seeker_id') for c in plan.delete}
    counts = {}
    if not application_ids:
        return counts

    counts['sales'] = 0
    counts['referrals'] = 0
    counts['interviews'] = 0
    counts['applications'] = 0
    for start in range(0, len(application_ids), chunk_size):
        chunk = application_ids[start:start + chunk_size]
        counts['sales'] += delete_in_chunks(Sale.objects.filter(referral__application_id__in=chunk), chunk_size)
        counts['referrals'] += delete_in_chunks(Referral.objects.filter(application_id__in=chunk), chunk_size)
        counts['interviews'] += delete_in_chunks(Interview.objects.filter(application_id__in=chunk), chunk_size)
        counts['applications'] += delete_in_chunks(Application.objects.filter(id__in=chunk), chunk_size)

    orphans = JobSeeker.objects.filter(id__in=job_seeker_ids, applications__isnull=True)
    counts['job_seekers'] = delete_in_chunks(orphans, chunk_size)
    logger.info(f"Application dedup deleted: {counts}")
    return counts
