from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from backend.profiles.utils import get_or_create_profile, normalize_iraqi_phone

User = get_user_model()


class Command(BaseCommand):
    help = 'Create (or update) the platform admin account and its profile. Safe to run repeatedly.'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='admin')
        parser.add_argument('--email', default='admin@waslaha.app')
        parser.add_argument('--password', required=True)
        parser.add_argument('--phone', default='')
        parser.add_argument('--first-name', default='Admin')
        parser.add_argument('--last-name', default='User')

    def handle(self, *args, **options):
        phone = None
        if options['phone']:
            phone = normalize_iraqi_phone(options['phone'])
            if phone is None:
                raise CommandError(f"Invalid Iraqi phone number: {options['phone']}")

        user, created = User.objects.get_or_create(
            username=options['username'],
            defaults={
                'email': options['email'],
                'first_name': options['first_name'],
                'last_name': options['last_name'],
                'is_staff': True,
            }
        )
        if created:
            user.set_password(options['password'])
            user.save()
            self.stdout.write(self.style.SUCCESS(f"Created admin user: {user.username}"))
        else:
            self.stdout.write(self.style.WARNING(f"Admin user already exists: {user.username} (password unchanged)"))

        profile = get_or_create_profile(user)
        profile.first_name = profile.first_name or options['first_name']
        profile.last_name = profile.last_name or options['last_name']
        profile.is_admin = True
        profile.is_verified = True
        profile.role = 'both'
        if phone:
            profile.phone = phone
        profile.save()

        self.stdout.write(self.style.SUCCESS(f"Profile for {user.username} marked as admin"))
