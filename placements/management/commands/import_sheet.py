import logging

from django.core.management.base import CommandError
from django.utils import timezone

from etl.exceptions import ImportSetupError
from etl.pipeline import load_sheet, preview_sheet, run_import, verify_funnel
from placements.management.base import SheetCommand
from sheets.client import SheetDownloadError

logger = logging.getLogger(__name__)


class Command(SheetCommand):
    help = 'Import the application sheet export (dry run unless --apply is given)'

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument('csv_path', nargs='?', help='Path to the CSV export')
        parser.add_argument(
            '--url',
            help='Download the CSV export from this URL instead of reading a file',
        )
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Write to the database (default is a dry run)',
        )
        parser.add_argument(
            '--incremental',
            action='store_true',
            help='With --apply: keep existing records and only add new applications',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            help='Rows per insert batch (default: IMPORT_BATCH_SIZE)',
        )
        parser.add_argument(
            '--skip-header-check',
            action='store_true',
            help='Do not validate the header row against the column layout',
        )

    def handle(self, *args, **options):
        if not options['csv_path'] and not options['url']:
            raise CommandError("Give a CSV path or --url")
        if options['incremental'] and not options['apply']:
            raise CommandError("--incremental only makes sense with --apply")

        start_time = timezone.now()
        config, organization = self.setup(options, BATCH_SIZE=options['batch_size'])
        mode = 'apply' if options['apply'] else 'dry run'
        self.stdout.write(self.style.SUCCESS(f"Starting sheet import ({mode}) for {organization}..."))

        try:
            sheet = load_sheet(
                csv_path=options['csv_path'],
                url=options['url'],
                validate_headers=not options['skip_header_check'],
            )
        except (ImportSetupError, SheetDownloadError) as e:
            raise CommandError(str(e))
        self.stdout.write(f"Read {len(sheet)} data rows ({sheet.blank_rows} blank rows skipped)")

        if not options['apply']:
            self.dry_run(sheet)
            return

        try:
            stats = run_import(sheet, organization, config, incremental=options['incremental'])
        except Exception as e:
            self.stdout.write(self.style.ERROR(f"❌ Import failed: {e}"))
            logger.error(f"Import failed: {e}")
            raise

        self.write_summary(stats)

        verification = verify_funnel(organization, config.page_size)
        self.heading('Validation: computed vs reference')
        self.write_frame(verification.frame)
        if verification.mismatches:
            self.stdout.write(self.style.WARNING(
                f"⚠️  {len(verification.mismatches)} figures differ from the reference totals"
            ))
        else:
            self.stdout.write(self.style.SUCCESS("✅ All reference figures match"))

        duration = timezone.now() - start_time
        self.stdout.write(self.style.SUCCESS(f"🎉 Import completed in {duration}"))

    def dry_run(self, sheet):
        preview = preview_sheet(sheet)
        self.heading('Dry run: records that would be created')
        self.write_counts(preview.counts)
        self.heading('Sheet tallies vs reference')
        self.write_frame(preview.frame)
        if preview.report.undated:
            self.stdout.write(f"  rows without a schedule month: {preview.report.undated['rows']}")
        self.stdout.write('')
        self.stdout.write("Nothing was written. Run again with --apply to import.")

    def write_summary(self, stats):
        self.heading('Import summary')
        if stats.purged:
            self.stdout.write("Deleted before re-import:")
            self.write_counts(stats.purged)
        self.stdout.write("Inserted:")
        self.write_counts(stats.inserted)
        self.stdout.write("Row counters:")
        self.write_counts(stats.counts)
        if stats.failed:
            self.stdout.write(self.style.ERROR("Insert failures:"))
            self.write_counts(stats.failed)
            for failure in stats.failures:
                self.stdout.write(f"  - {failure.table} {failure.label}: {failure.error}")
