from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from backend.chat.utils import sync_unread_chat_notifications

User = get_user_model()


class Command(BaseCommand):
    help = 'Create a notification for every chat that has unread messages and no notification yet'

    def add_arguments(self, parser):
        parser.add_argument('--user', type=int, help='Only sync chats of this user id')

    def handle(self, *args, **options):
        users = None
        if options.get('user'):
            try:
                users = [User.objects.get(pk=options['user'])]
            except User.DoesNotExist:
                raise CommandError(f"User {options['user']} does not exist")

        created = sync_unread_chat_notifications(users=users)
        self.stdout.write(self.style.SUCCESS(f"Created {created} chat notifications"))
