"""
Identity of job seekers and applications across runs.

A job seeker is identified by normalized phone only. An application is
identified by (phone, applied date). Neither is ever fuzzy matched.
"""
import logging
import uuid
from collections import Counter, defaultdict
from datetime import datetime

from django.db import DatabaseError, transaction
from django.utils import timezone

from placements.models import Application, Interview, JobSeeker

from .codes import UNKNOWN_NAME
from .loader import fetch_all_rows

logger = logging.getLogger(__name__)

PLACEHOLDER_PHONE_PREFIX = 'unknown-'


def placeholder_phone():
    """Unique stand-in for a missing phone; normalized phones never start with a letter"""
    return f"{PLACEHOLDER_PHONE_PREFIX}{uuid.uuid4().hex[:12]}"


def is_placeholder_phone(phone):
    return bool(phone) and phone.startswith(PLACEHOLDER_PHONE_PREFIX)


def _local_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def application_key(phone, applied_at):
    """(phone, applied day) or None when either part is unusable"""
    if not phone or is_placeholder_phone(phone) or applied_at is None:
        return None
    return (phone, _local_date(applied_at))


class JobSeekerResolver:
    def __init__(self, organization, page_size=1000, stats=None):
        self.organization = organization
        self.page_size = page_size
        self.stats = stats if stats is not None else Counter()
        self.by_phone = {}

    def seed(self):
        rows = fetch_all_rows(
            JobSeeker.objects.filter(organization=self.organization),
            self.page_size,
            ('id', 'phone'),
        )
        for row in rows:
            if row['phone'] and not is_placeholder_phone(row['phone']):
                self.by_phone.setdefault(row['phone'], row['id'])
        logger.info(f"Seeded {len(self.by_phone)} job seekers by phone")
        return self

    def resolve(self, phone, **profile):
        """
        Return the id of the job seeker with `phone`, creating one if needed.

        `profile` is only used when a new job seeker is created. A blank
        phone always creates a new job seeker under a placeholder phone.
        Returns None when the job seeker cannot be written.
        """
        if phone and phone in self.by_phone:
            self.stats['job_seekers_reused'] += 1
            return self.by_phone[phone]

        profile['name'] = profile.get('name') or UNKNOWN_NAME
        try:
            with transaction.atomic():
                job_seeker = JobSeeker.objects.create(
                    organization=self.organization,
                    phone=phone or placeholder_phone(),
                    **profile,
                )
        except DatabaseError as e:
            self.stats['job_seekers_failed'] += 1
            logger.error(f"Could not create job seeker {profile['name']!r} ({phone or 'no phone'}): {e}")
            return None
        self.stats['job_seekers_created'] += 1
        if phone:
            self.by_phone[phone] = job_seeker.id
        else:
            self.stats['job_seekers_placeholder_phone'] += 1
        return job_seeker.id


class ApplicationIndex:
    """Keys of applications already stored, for the incremental import"""

    def __init__(self, organization, page_size=1000):
        self.organization = organization
        self.page_size = page_size
        self.keys = set()

    def seed(self):
        rows = fetch_all_rows(
            Application.objects.filter(organization=self.organization),
            self.page_size,
            ('id', 'job_seeker__phone', 'applied_at'),
        )
        for row in rows:
            key = application_key(row['job_seeker__phone'], row['applied_at'])
            if key:
                self.keys.add(key)
        logger.info(f"Seeded {len(self.keys)} existing application keys")
        return self

    def __contains__(self, key):
        return key is not None and key in self.keys

    def add(self, key):
        if key is not None:
            self.keys.add(key)


def load_conducted_interviews(organization, page_size=1000):
    return fetch_all_rows(
        Interview.objects.filter(organization=organization, conducted_at__isnull=False),
        page_size,
        ('id', 'scheduled_at', 'conducted_at', 'result', 'application__job_seeker__phone'),
    )


def find_bilingual_interview_duplicates(interviews):
    """
    Find interviews recorded twice under the two words for "completed".

    Conducted interviews are grouped by (phone, scheduled day). In a group
    of more than one that holds a canonical "completed" record, every
    legacy "完了" record is a duplicate. Returns the duplicate rows.
    """
    groups = defaultdict(list)
    for interview in interviews:
        if interview.get('conducted_at') is None:
            continue
        phone = interview.get('application__job_seeker__phone') or ''
        groups[(phone, _local_date(interview['scheduled_at']))].append(interview)

    duplicates = []
    for members in groups.values():
        if len(members) < 2:
            continue
        results = {member.get('result') for member in members}
        if Interview.RESULT_COMPLETED not in results:
            continue
        duplicates.extend(
            member for member in members
            if member.get('result') == Interview.LEGACY_RESULT_COMPLETED
        )
    return duplicates


def nullify_interviews(interview_ids, chunk_size=500):
    """Clear conducted_at and result; rows stay so linked contact logs keep their target"""
    interview_ids = list(interview_ids)
    updated = 0
    for start in range(0, len(interview_ids), chunk_size):
        chunk = interview_ids[start:start + chunk_size]
        updated += Interview.objects.filter(id__in=chunk).update(conducted_at=None, result=None)
    logger.info(f"Nullified {updated} duplicate interviews")
    return updated
