"""
Reference data lookups: sources, companies, jobs and coordinators.

Name maps are seeded once from the database, then grow as new names are
seen. Sources, companies and jobs are created on first sight; coordinators
are only ever matched, never created.
"""
import logging
from collections import Counter
from dataclasses import dataclass

from django.db import DatabaseError, transaction

from placements.models import Company, Coordinator, Job, Source

from .codes import PLACEHOLDER_NAME
from .loader import fetch_all_rows
from .normalizers import clean_text

logger = logging.getLogger(__name__)

MATCH_EXACT = 'exact'
MATCH_PREFIX = 'prefix'
MATCH_AMBIGUOUS = 'ambiguous'
MATCH_NONE = 'none'


@dataclass(frozen=True)
class CoordinatorMatch:
    coordinator_id: object
    reason: str

    @property
    def matched(self):
        return self.coordinator_id is not None


def _compact(name):
    return clean_text(name).replace(' ', '')


def match_coordinator(family_name, candidates):
    """
    Resolve a family name against (id, full name) pairs.

    An exact full-name match wins; otherwise a single full name starting
    with the family name. Several candidates at either step is ambiguous
    and returns no id.
    """
    wanted = _compact(family_name)
    if not wanted:
        return CoordinatorMatch(None, MATCH_NONE)

    candidates = [(coordinator_id, _compact(name)) for coordinator_id, name in candidates]

    exact = [coordinator_id for coordinator_id, name in candidates if name == wanted]
    if len(exact) == 1:
        return CoordinatorMatch(exact[0], MATCH_EXACT)
    if len(exact) > 1:
        return CoordinatorMatch(None, MATCH_AMBIGUOUS)

    prefixed = [coordinator_id for coordinator_id, name in candidates if name.startswith(wanted)]
    if len(prefixed) == 1:
        return CoordinatorMatch(prefixed[0], MATCH_PREFIX)
    if len(prefixed) > 1:
        return CoordinatorMatch(None, MATCH_AMBIGUOUS)
    return CoordinatorMatch(None, MATCH_NONE)


class MasterDataResolver:
    def __init__(self, organization, page_size=1000, stats=None):
        self.organization = organization
        self.page_size = page_size
        self.stats = stats if stats is not None else Counter()
        self.sources = {}
        self.companies = {}
        self.jobs = {}
        self.coordinators = []
        self._coordinator_cache = {}
        self._placeholder_job_id = None

    def seed(self):
        org = self.organization
        for row in fetch_all_rows(Source.objects.filter(organization=org), self.page_size, ('id', 'name')):
            self.sources.setdefault(row['name'], row['id'])
        for row in fetch_all_rows(Company.objects.filter(organization=org), self.page_size, ('id', 'name')):
            self.companies.setdefault(row['name'], row['id'])
        job_rows = fetch_all_rows(
            Job.objects.filter(organization=org), self.page_size, ('id', 'company_id', 'title')
        )
        for row in job_rows:
            self.jobs.setdefault((row['company_id'], row['title']), row['id'])
        self.coordinators = [
            (row['id'], row['name'])
            for row in fetch_all_rows(
                Coordinator.objects.filter(organization=org, is_active=True),
                self.page_size,
                ('id', 'name'),
            )
        ]
        logger.info(
            f"Seeded reference data: {len(self.sources)} sources, {len(self.companies)} companies, "
            f"{len(self.jobs)} jobs, {len(self.coordinators)} coordinators"
        )
        return self

    def _create(self, model, counter, **values):
        try:
            with transaction.atomic():
                obj = model.objects.create(organization=self.organization, **values)
        except DatabaseError as e:
            self.stats[f'{counter}_failed'] += 1
            logger.error(f"Could not create {model.__name__} {values}: {e}")
            return None
        self.stats[f'{counter}_created'] += 1
        logger.debug(f"Created {model.__name__} {values}")
        return obj.id

    def source_id(self, name):
        name = clean_text(name)
        if not name:
            return None
        if name not in self.sources:
            self.sources[name] = self._create(Source, 'sources', name=name)
        return self.sources[name]

    def company_id(self, name):
        name = clean_text(name)
        if not name:
            return None
        if name not in self.companies:
            self.companies[name] = self._create(Company, 'companies', name=name)
        return self.companies[name]

    def job_id(self, company_id, title, job_type=None):
        """Job identity is (company, title)"""
        title = clean_text(title)
        if company_id is None or not title:
            return None
        key = (company_id, title)
        if key not in self.jobs:
            self.jobs[key] = self._create(
                Job, 'jobs', company_id=company_id, title=title, job_type=job_type or None
            )
        return self.jobs[key]

    def placeholder_job_id(self):
        """The "undecided" job used for referrals with no destination company"""
        if self._placeholder_job_id is None:
            company_id = self.company_id(PLACEHOLDER_NAME)
            self._placeholder_job_id = self.job_id(company_id, PLACEHOLDER_NAME)
        return self._placeholder_job_id

    def coordinator_id(self, family_name):
        family_name = clean_text(family_name)
        if not family_name:
            return None
        if family_name not in self._coordinator_cache:
            self._coordinator_cache[family_name] = match_coordinator(family_name, self.coordinators)
        match = self._coordinator_cache[family_name]
        if match.reason == MATCH_AMBIGUOUS:
            self.stats['coordinator_ambiguous'] += 1
        elif match.reason == MATCH_NONE:
            self.stats['coordinator_unmatched'] += 1
        return match.coordinator_id
