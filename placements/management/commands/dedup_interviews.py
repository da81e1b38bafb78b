from collections import Counter

from etl.funnel import comparison_frame, compute_funnel, diff_against_reference
from etl.normalizers import month_key
from etl.resolver import find_bilingual_interview_duplicates, load_conducted_interviews, nullify_interviews
from placements.management.base import SheetCommand


class Command(SheetCommand):
    help = 'Find interviews recorded as both "completed" and "完了" and clear the legacy copies'

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Clear conducted_at and result on the duplicates (default: report only)',
        )

    def handle(self, *args, **options):
        config, organization = self.setup(options)
        interviews = load_conducted_interviews(organization, config.page_size)
        duplicates = find_bilingual_interview_duplicates(interviews)
        self.stdout.write(f"Conducted interviews: {len(interviews)}, duplicates: {len(duplicates)}")

        if not duplicates:
            self.stdout.write(self.style.SUCCESS("✅ No duplicate interviews found"))
            return

        self.heading('Duplicates by month')
        self.write_counts(Counter(month_key(row['scheduled_at']) for row in duplicates))

        duplicate_ids = {row['id'] for row in duplicates}
        remaining = [row for row in interviews if row['id'] not in duplicate_ids]
        report = compute_funnel(remaining, [], [])
        deltas = [d for d in diff_against_reference(report) if d.metric == 'interviews_done']
        self.heading('Interviews after dedup vs reference')
        self.write_frame(comparison_frame(deltas))

        if not options['apply']:
            self.stdout.write('')
            self.stdout.write("Nothing was changed. Run again with --apply to clear the duplicates.")
            return

        updated = nullify_interviews(duplicate_ids, config.delete_chunk_size)
        self.stdout.write(self.style.SUCCESS(f"✅ Cleared {updated} duplicate interviews"))
