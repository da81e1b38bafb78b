from datetime import date
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from etl.normalizers import to_local_datetime
from placements.models import Application, Company, Interview, Job, JobSeeker

from conftest import SAMPLE_ROWS


def run(*args, **options):
    out = StringIO()
    call_command(*args, stdout=out, **options)
    return out.getvalue()


@pytest.mark.django_db
class TestImportSheetCommand:
    def test_dry_run_writes_nothing(self, organization, write_sheet):
        output = run('import_sheet', str(write_sheet(SAMPLE_ROWS)))

        assert 'Dry run' in output
        assert 'Nothing was written' in output
        assert Application.objects.count() == 0
        assert JobSeeker.objects.count() == 0

    def test_apply(self, organization, coordinator, write_sheet):
        output = run('import_sheet', str(write_sheet(SAMPLE_ROWS)), apply=True, batch_size=2)

        assert 'Import summary' in output
        assert 'Validation: computed vs reference' in output
        assert 'Import completed' in output
        assert Application.objects.count() == 4

    def test_path_or_url_required(self, organization):
        with pytest.raises(CommandError, match='CSV path or --url'):
            run('import_sheet')

    def test_incremental_needs_apply(self, organization, write_sheet):
        with pytest.raises(CommandError, match='--apply'):
            run('import_sheet', str(write_sheet(SAMPLE_ROWS)), incremental=True)

    def test_missing_file(self, organization, tmp_path):
        with pytest.raises(CommandError):
            run('import_sheet', str(tmp_path / 'missing.csv'))

    def test_unknown_organization(self, organization, write_sheet):
        with pytest.raises(CommandError, match='nope'):
            run('import_sheet', str(write_sheet(SAMPLE_ROWS)), organization='nope')

    def test_no_organization(self, db, write_sheet):
        with pytest.raises(CommandError):
            run('import_sheet', str(write_sheet(SAMPLE_ROWS)))


@pytest.mark.django_db
def test_verify_funnel_command(organization, write_sheet):
    run('import_sheet', str(write_sheet(SAMPLE_ROWS)), apply=True)

    output = run('verify_funnel')

    assert 'Computed vs reference' in output
    assert 'Work-month plan' in output
    assert 'referrals without a work month: 1' in output


@pytest.mark.django_db
class TestDedupCommands:
    def test_companies_report_then_merge(self, organization):
        master = Company.objects.create(organization=organization, name='株式会社テスト')
        duplicate = Company.objects.create(organization=organization, name='テスト')
        Job.objects.create(organization=organization, company=master, title='製造')

        report = run('dedup_companies')
        assert '[MASTER]    株式会社テスト' in report
        assert '--merge' in report
        duplicate.refresh_from_db()
        assert duplicate.is_active

        output = run('dedup_companies', merge=True)
        assert 'Merge completed' in output
        duplicate.refresh_from_db()
        assert not duplicate.is_active

    def test_interviews_apply(self, organization):
        job_seeker = JobSeeker.objects.create(organization=organization, phone='090', name='x')
        application = Application.objects.create(
            organization=organization, job_seeker=job_seeker, applied_at=to_local_datetime(date(2025, 1, 15)),
        )
        for result in ('completed', '完了'):
            Interview.objects.create(
                organization=organization, application=application,
                scheduled_at=application.applied_at, conducted_at=application.applied_at, result=result,
            )

        assert 'Nothing was changed' in run('dedup_interviews')
        assert Interview.objects.filter(conducted_at__isnull=False).count() == 2

        output = run('dedup_interviews', apply=True)
        assert 'Cleared 1 duplicate interviews' in output
        assert Interview.objects.filter(conducted_at__isnull=False).count() == 1

    def test_applications_report_only_by_default(self, organization):
        job_seeker = JobSeeker.objects.create(organization=organization, phone='09012345678', name='x')
        for _ in range(2):
            Application.objects.create(
                organization=organization, job_seeker=job_seeker, applied_at=to_local_datetime(date(2025, 1, 15)),
            )

        output = run('dedup_applications')
        assert '2 copies' in output
        assert Application.objects.count() == 2

        run('dedup_applications', merge=True)
        assert Application.objects.count() == 1

    def test_nothing_to_do(self, organization):
        assert 'No duplicate applications found' in run('dedup_applications')
        assert 'No duplicate interviews found' in run('dedup_interviews')
        assert 'No duplicate candidates found' in run('dedup_companies')
