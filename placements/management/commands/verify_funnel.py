from etl.pipeline import verify_funnel
from placements.management.base import SheetCommand


class Command(SheetCommand):
    help = 'Recompute monthly funnel metrics from stored records and compare them with the reference totals'

    def handle(self, *args, **options):
        config, organization = self.setup(options)
        self.stdout.write(self.style.SUCCESS(f"Verifying funnel for {organization}..."))

        verification = verify_funnel(organization, config.page_size)

        self.heading('Computed vs reference')
        self.write_frame(verification.frame)
        for delta in verification.mismatches:
            self.stdout.write(self.style.WARNING(
                f"  {delta.month} {delta.metric}: expected {delta.expected}, got {delta.actual} ({delta.delta:+d})"
            ))

        self.heading('Monthly funnel')
        self.write_frame(verification.report.to_frame())
        if verification.report.undated:
            self.stdout.write("Rows left out for lack of a month:")
            self.write_counts(verification.report.undated)

        self.heading('Work-month plan')
        self.write_frame(verification.plan.to_frame())
        self.stdout.write(f"  referrals without a work month: {verification.plan.unresolved_referrals}")

        self.heading('Sales missing their status date')
        if verification.sale_gaps:
            self.write_counts(verification.sale_gaps)
        else:
            self.stdout.write(self.style.SUCCESS("✅ Every sale has the date its status needs"))
