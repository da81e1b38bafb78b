from datetime import date, datetime, timezone as dt_timezone

import pytest

from etl.duplicates import (
    MERGED_NOTE,
    DuplicateCandidate,
    delete_duplicate_applications,
    find_application_duplicates,
    find_company_duplicates,
    group_exact,
    group_prefix,
    load_application_candidates,
    load_company_candidates,
    merge_companies,
    normalize_company_name,
    pick_master,
    plan_application_dedup,
)
from etl.normalizers import to_local_datetime
from placements.models import Application, Company, Interview, Job, JobSeeker, Referral, Sale


@pytest.mark.parametrize("name,expected", [
    ('株式会社テスト', 'テスト'),
    ('テスト 株式会社', 'テスト'),
    ('（株）テスト', 'テスト'),
    ('(株)テスト', 'テスト'),
    ('有限会社 サンプル　工業', 'サンプル工業'),
    ('ＡＢＣ Staffing', 'abcstaffing'),
    ('', ''),
    (None, ''),
])
def test_normalize_company_name(name, expected):
    assert normalize_company_name(name) == expected


def _candidate(id, name, activity=0, created_day=1):
    return DuplicateCandidate(
        id=id,
        name=name,
        activity=activity,
        created_at=datetime(2025, 1, created_day, tzinfo=dt_timezone.utc),
    )


def _name_key(candidate):
    return normalize_company_name(candidate.name)


class TestGrouping:
    def test_exact_groups_need_two_members(self):
        candidates = [
            _candidate(1, '株式会社テスト'),
            _candidate(2, 'テスト'),
            _candidate(3, 'サンプル'),
            _candidate(4, ''),
        ]
        [group] = group_exact(candidates, _name_key)

        assert group.kind == 'exact'
        assert group.key == 'テスト'
        assert [c.id for c in group.members] == [1, 2]

    def test_prefix_groups(self):
        candidates = [
            _candidate(1, 'テスト'),
            _candidate(2, 'テスト工業'),
            _candidate(3, 'テスト物流'),
            _candidate(4, 'サンプル'),
        ]
        [group] = group_prefix(candidates, _name_key)

        assert group.kind == 'prefix'
        assert group.key == 'テスト'
        assert {c.id for c in group.members} == {1, 2, 3}

    def test_single_character_keys_never_anchor(self):
        candidates = [_candidate(1, 'A'), _candidate(2, 'ABC')]
        assert group_prefix(candidates, _name_key) == []

    def test_exact_keys_are_excluded_from_prefix_anchors(self):
        candidates = [_candidate(1, 'テスト'), _candidate(2, '株式会社テスト'), _candidate(3, 'テスト工業')]
        exact, prefix = find_company_duplicates(candidates)

        assert [g.key for g in exact] == ['テスト']
        assert prefix == []


class TestPickMaster:
    def test_most_activity_wins(self):
        master, duplicates = pick_master([_candidate(1, 'a', 1), _candidate(2, 'a', 5), _candidate(3, 'a', 0)])
        assert master.id == 2
        assert [d.id for d in duplicates] == [1, 3]

    def test_tie_goes_to_earliest_created(self):
        master, _ = pick_master([_candidate(1, 'a', 2, created_day=9), _candidate(2, 'a', 2, created_day=3)])
        assert master.id == 2

    def test_missing_creation_time_loses_ties(self):
        undated = DuplicateCandidate(id=1, name='a', activity=2)
        master, _ = pick_master([undated, _candidate(2, 'a', 2)])
        assert master.id == 2


@pytest.mark.django_db
def test_merge_companies_moves_jobs_and_deactivates(organization):
    master = Company.objects.create(organization=organization, name='株式会社テスト')
    duplicate = Company.objects.create(organization=organization, name='（株）テスト')
    Job.objects.create(organization=organization, company=master, title='製造')
    Job.objects.create(organization=organization, company=master, title='倉庫')
    Job.objects.create(organization=organization, company=duplicate, title='検品')

    exact, _ = find_company_duplicates(load_company_candidates(organization))
    result = merge_companies(exact)

    assert result.companies_merged == 1
    assert result.jobs_moved == 1
    assert result.errors == []
    duplicate.refresh_from_db()
    assert duplicate.is_active is False
    assert duplicate.notes == MERGED_NOTE.format(name=master.name, id=master.id)
    assert master.jobs.count() == 3


@pytest.mark.django_db
class TestApplicationDedup:
    @pytest.fixture
    def job_seeker(self, organization):
        return JobSeeker.objects.create(organization=organization, phone='09012345678', name='山田')

    def _application(self, organization, job_seeker, day=15):
        return Application.objects.create(
            organization=organization, job_seeker=job_seeker, applied_at=to_local_datetime(date(2025, 1, day)),
        )

    def test_same_phone_day_and_source_is_a_duplicate(self, organization, job_seeker):
        first = self._application(organization, job_seeker)
        second = self._application(organization, job_seeker)
        self._application(organization, job_seeker, day=16)
        Interview.objects.create(
            organization=organization, application=second,
            scheduled_at=second.applied_at, conducted_at=second.applied_at, result='completed',
        )

        groups = find_application_duplicates(load_application_candidates(organization))
        plan = plan_application_dedup(groups)

        assert [c.id for c in plan.keep] == [second.id]
        assert [c.id for c in plan.delete] == [first.id]
        assert plan.impact == {'applications': 1, 'interviews': 0, 'referrals': 0, 'sales': 0}

    def test_placeholder_phones_never_group(self, organization):
        for _ in range(2):
            job_seeker = JobSeeker.objects.create(organization=organization, phone='unknown-0123456789ab', name='x')
            self._application(organization, job_seeker)

        assert find_application_duplicates(load_application_candidates(organization)) == []

    def test_delete_removes_children_and_orphaned_job_seekers(self, organization, job_seeker):
        keep = self._application(organization, job_seeker)
        other_seeker = JobSeeker.objects.create(organization=organization, phone='08000000000', name='別')
        drop = self._application(organization, other_seeker)
        company = Company.objects.create(organization=organization, name='A社')
        job = Job.objects.create(organization=organization, company=company, title='製造')
        referral = Referral.objects.create(
            organization=organization, application=drop, job=job, referred_at=drop.applied_at,
        )
        Sale.objects.create(organization=organization, referral=referral, amount=1000, expected_date=date(2025, 1, 15))

        candidates = {c.id: c for c in load_application_candidates(organization)}
        plan = plan_application_dedup([])
        plan.keep.append(candidates[keep.id])
        plan.delete.append(candidates[drop.id])

        counts = delete_duplicate_applications(plan, chunk_size=1)

        assert counts == {'sales': 1, 'referrals': 1, 'interviews': 0, 'applications': 1, 'job_seekers': 1}
        assert list(Application.objects.values_list('id', flat=True)) == [keep.id]
        assert JobSeeker.objects.filter(id=job_seeker.id).exists()
        assert not JobSeeker.objects.filter(id=other_seeker.id).exists()
