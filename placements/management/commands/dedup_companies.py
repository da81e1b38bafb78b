from etl.duplicates import find_company_duplicates, load_company_candidates, merge_companies, pick_master
from placements.management.base import SheetCommand


class Command(SheetCommand):
    help = 'Detect companies registered under several spellings and optionally merge exact duplicates'

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            '--merge',
            action='store_true',
            help='Merge exact duplicate groups into their master (prefix candidates are never merged)',
        )

    def handle(self, *args, **options):
        config, organization = self.setup(options)
        candidates = load_company_candidates(organization, config.page_size)
        exact, prefix = find_company_duplicates(candidates)
        self.stdout.write(f"Companies: {len(candidates)}")

        if not exact and not prefix:
            self.stdout.write(self.style.SUCCESS("✅ No duplicate candidates found"))
            return

        if exact:
            self.heading(f'Exact duplicates after normalization ({len(exact)} groups)')
            for number, group in enumerate(exact, start=1):
                master, duplicates = pick_master(group.members)
                self.stdout.write(f"Group {number} ({group.key}):")
                self.stdout.write(f"  [MASTER]    {master.name} (jobs: {master.activity}, id: {master.id})")
                for duplicate in duplicates:
                    self.stdout.write(f"  [DUPLICATE] {duplicate.name} (jobs: {duplicate.activity}, id: {duplicate.id})")

        if prefix:
            self.heading(f'Prefix candidates, check by hand ({len(prefix)} groups)')
            for number, group in enumerate(prefix, start=1):
                self.stdout.write(f"Candidate {number} (prefix: {group.key}):")
                for member in group.members:
                    inactive = ', inactive' if not member.is_active else ''
                    self.stdout.write(f"  - {member.name} (jobs: {member.activity}{inactive})")

        duplicate_count = sum(len(group.members) - 1 for group in exact)
        self.heading('Summary')
        self.stdout.write(f"  exact groups:      {len(exact)} ({duplicate_count} duplicate companies)")
        self.stdout.write(f"  prefix candidates: {len(prefix)}")

        if not options['merge']:
            if exact:
                self.stdout.write('')
                self.stdout.write("Run again with --merge to merge the exact groups.")
            return

        result = merge_companies(exact)
        self.heading('Merge result')
        self.stdout.write(f"  companies merged: {result.companies_merged}")
        self.stdout.write(f"  jobs moved:       {result.jobs_moved}")
        if result.errors:
            self.stdout.write(self.style.ERROR(f"❌ {len(result.errors)} errors:"))
            for error in result.errors:
                self.stdout.write(f"  - {error}")
        else:
            self.stdout.write(self.style.SUCCESS("✅ Merge completed"))
