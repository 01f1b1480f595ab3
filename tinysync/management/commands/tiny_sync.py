import json

from django.core.management.base import BaseCommand, CommandError

from tinysync.config import TinySyncConfig
from tinysync.exceptions import TinySyncError
from tinysync.sync import ENTITIES, SyncRequest, TinySync


class Command(BaseCommand):
    help = 'Reconcile one page of Tiny ERP contacts, products or orders into local tables'

    def add_arguments(self, parser):
        parser.add_argument('entity', nargs='?', choices=ENTITIES)
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Compute and print the changes without writing them',
        )
        parser.add_argument('--since', help='Only records changed since this date (logged only)')
        parser.add_argument(
            '--test-only',
            action='store_true',
            help='Check the configured token against the account info endpoint',
        )

    def handle(self, *args, **options):
        if not options['entity'] and not options['test_only']:
            raise CommandError('entity is required unless --test-only is given')

        request = SyncRequest(
            entity=options['entity'],
            dry_run=options['dry_run'],
            since=options['since'],
            test_only=options['test_only'],
        )
        if request.dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made'))

        try:
            body = TinySync(TinySyncConfig.from_settings()).run(request)
        except TinySyncError as exc:
            raise CommandError(str(exc)) from exc

        if request.test_only:
            self.stdout.write(self.style.SUCCESS(f"{body['message']} ({body['accountInfo']['name']})"))
            return

        stats = body['stats']
        self.stdout.write(
            f"processed={stats['itemsProcessed']} created={stats['itemsCreated']} "
            f"updated={stats['itemsUpdated']} skipped={stats['itemsSkipped']} "
            f"calls={stats['apiCallsUsed']}/{stats['maxCalls']}"
        )
        for entry in body['summary']:
            self.stdout.write(json.dumps(entry, ensure_ascii=False))
        self.stdout.write(self.style.SUCCESS('Sync complete'))
