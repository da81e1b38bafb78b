import logging

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from etl.config import get_import_config
from etl.exceptions import ImportSetupError
from etl.pipeline import get_organization

RULE = '=' * 60


class SheetCommand(BaseCommand):
    """Options and setup shared by the import, verification and dedup commands"""

    def add_arguments(self, parser):
        parser.add_argument(
            '--organization',
            help='Organization code (default: IMPORT_ORGANIZATION_CODE, else the first active organization)',
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Log debug output from the import modules',
        )

    def setup(self, options, **overrides):
        """Return (config, organization); setup problems become CommandError"""
        if options.get('verbose'):
            for name in ('etl', 'placements', 'sheets'):
                logging.getLogger(name).setLevel(logging.DEBUG)
        try:
            config = get_import_config(**overrides)
            organization = get_organization(options.get('organization') or config.organization_code)
        except (ImproperlyConfigured, ImportSetupError) as e:
            raise CommandError(str(e))
        return config, organization

    def heading(self, text):
        self.stdout.write('')
        self.stdout.write(RULE)
        self.stdout.write(text)
        self.stdout.write(RULE)

    def write_counts(self, counts):
        for key, value in sorted(counts.items()):
            self.stdout.write(f"  {key:<32} {value}")

    def write_frame(self, frame):
        if frame.empty:
            self.stdout.write("  (no rows)")
        else:
            self.stdout.write(frame.to_string())
