from django.core.management.base import BaseCommand, CommandError

from crossword.seed_utils import DEFAULT_SEED_FILE, ensure_seed_puzzles


class Command(BaseCommand):
    help = "Seed the puzzle store from a JSON file if it is empty."

    def add_arguments(self, parser):
        parser.add_argument(
            "--file",
            default=str(DEFAULT_SEED_FILE),
            help="JSON list of puzzle records (defaults to the bundled sample puzzles).",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Import even if puzzles already exist; matching ids are replaced.",
        )

    def handle(self, *args, **options):
        # Idempotent unless --force is given.
        try:
            count = ensure_seed_puzzles(options["file"], force=options["force"])
        except (OSError, ValueError) as e:
            raise CommandError(f"Could not import {options['file']}: {e}") from e

        if count == 0:
            self.stdout.write(self.style.WARNING("Puzzles already present. No action taken."))
            return
        self.stdout.write(self.style.SUCCESS(f"Seeded {count} puzzles."))
