"""
Repair Animal Number Answers

Rewrites ANIMAL_NUMBER answers whose text no longer matches the animal number
they are filed under.
"""

from django.core.management.base import BaseCommand

from livestock.services.repair import mismatched_animal_numbers, repair_animal_numbers


class Command(BaseCommand):
    help = 'Rewrite animal number answers that differ from their animal number'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be repaired without making changes',
        )
        parser.add_argument(
            '--user-id',
            type=str,
            help='Repair answers of a specific user ID',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        user_id = options.get('user_id')

        self.stdout.write(self.style.WARNING('=' * 70))
        self.stdout.write(self.style.WARNING('Repair Animal Number Answers'))
        self.stdout.write(self.style.WARNING('=' * 70))

        if dry_run:
            self.stdout.write(self.style.NOTICE('\nDRY RUN MODE - No changes will be made\n'))
            for answer in mismatched_animal_numbers(user_id)[:50]:
                self.stdout.write(
                    f'  • {answer.animal_number}: "{answer.value}" (answer {answer.id})'
                )

        count = repair_animal_numbers(owner_id=user_id, dry_run=dry_run)

        if not count:
            self.stdout.write(self.style.SUCCESS('✓ All animal number answers are consistent!'))
            return

        verb = 'would be repaired' if dry_run else 'repaired'
        self.stdout.write(self.style.SUCCESS(f'\n✓ {count} answer(s) {verb}'))
