from etl.duplicates import (
    delete_duplicate_applications,
    find_application_duplicates,
    load_application_candidates,
    plan_application_dedup,
)
from placements.management.base import SheetCommand

# Groups listed in full before the report switches to a count
MAX_LISTED_GROUPS = 20


class Command(SheetCommand):
    help = 'Detect applications imported more than once and optionally delete the extra copies'

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            '--merge',
            action='store_true',
            help='Delete the duplicates and their interviews, referrals and sales (default: report only)',
        )

    def handle(self, *args, **options):
        config, organization = self.setup(options)
        candidates = load_application_candidates(organization, config.page_size)
        groups = find_application_duplicates(candidates)
        self.stdout.write(f"Applications: {len(candidates)}, duplicate groups: {len(groups)}")

        if not groups:
            self.stdout.write(self.style.SUCCESS("✅ No duplicate applications found"))
            return

        plan = plan_application_dedup(groups)
        self.heading('Duplicate groups (phone, applied date, source)')
        for group, master in list(zip(groups, plan.keep))[:MAX_LISTED_GROUPS]:
            phone, applied_on, _ = group.key
            self.stdout.write(f"  {phone} {applied_on}: {len(group.members)} copies, keeping {master.id}")
        if len(groups) > MAX_LISTED_GROUPS:
            self.stdout.write(f"  ... and {len(groups) - MAX_LISTED_GROUPS} more groups")

        self.heading('Rows that would be deleted')
        self.write_counts(plan.impact)

        if not options['merge']:
            self.stdout.write('')
            self.stdout.write("Nothing was deleted. Run again with --merge to delete the duplicates.")
            return

        counts = delete_duplicate_applications(plan, config.delete_chunk_size)
        self.heading('Deleted')
        self.write_counts(counts)
        self.stdout.write(self.style.SUCCESS("✅ Application dedup completed"))
