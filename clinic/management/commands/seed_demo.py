"""
Management command to populate the database with demo data.
"""
import datetime

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from clinic.models import FAQ, CustomerServiceChannel, LegalPage, Professional, Slot, User

DEMO_PASSWORD = '123456'

PROFESSIONALS = [
    ('pharm1', 'pharmacist', 'Asha', 'Rao', 'Clinical Pharmacist', 'Medication review'),
    ('doc1', 'doctor', 'Vikram', 'Shah', 'General Physician', 'Internal medicine'),
    ('nutri1', 'nutritionist', 'Meera', 'Iyer', 'Dietitian', 'Diabetes nutrition'),
]

DAILY_WINDOWS = [('10:00 AM', '10:30 AM'), ('11:00 AM', '11:30 AM'), ('04:00 PM', '04:30 PM')]


class Command(BaseCommand):
    help = 'Populate the database with demo users, professionals, slots and website content'

    def add_arguments(self, parser):
        parser.add_argument('--days', type=int, default=3, help='Number of days of slots to create.')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')
        self.create_users()
        professionals = self.create_professionals()
        self.create_slots(professionals, options['days'])
        self.create_content()
        self.stdout.write(self.style.SUCCESS('Demo data ready.'))

    def _user(self, username, role, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={'role': role, 'password': make_password(DEMO_PASSWORD), 'is_active': True, **extra},
        )
        if not created and user.role != role:
            user.role = role
            user.save(update_fields=['role'])
        return user

    def create_users(self):
        self._user('admin1', User.ROLE_ADMIN, email='admin@example.com', is_staff=True)
        self._user('patient1', User.ROLE_PATIENT, first_name='Ravi', last_name='Kumar', email='ravi@example.com')
        self.stdout.write(f'  users: admin1, patient1 (password {DEMO_PASSWORD})')

    def create_professionals(self):
        professionals = []
        for username, kind, first, last, designation, specialization in PROFESSIONALS:
            user = self._user(username, kind, first_name=first, last_name=last)
            professional, _ = Professional.objects.get_or_create(
                user=user,
                defaults={
                    'kind': kind,
                    'designation': designation,
                    'specialization': specialization,
                    'experience': 5,
                    'is_verified': True,
                    'status': 'online',
                },
            )
            professionals.append(professional)
        self.stdout.write(f'  professionals: {len(professionals)}')
        return professionals

    def create_slots(self, professionals, days):
        today = timezone.localdate()
        created = 0
        for professional in professionals:
            added = 0
            for offset in range(1, days + 1):
                day = today + datetime.timedelta(days=offset)
                for start, end in DAILY_WINDOWS:
                    _, new = Slot.objects.get_or_create(
                        professional=professional, date=day, start_time=start, end_time=end,
                    )
                    added += int(new)
            if added:
                Professional.objects.filter(pk=professional.pk).update(slots_version=F('slots_version') + 1)
            created += added
        self.stdout.write(f'  slots: {created}')

    def create_content(self):
        faqs = [
            ('How do I book a consultation?', 'Pick a professional, choose an open slot and complete payment.', 'booking'),
            ('Can I reschedule?', 'Yes, any confirmed booking can be moved to another open slot of the same professional.', 'booking'),
            ('When do I get my meeting link?', 'Your professional adds it before the session; you will get a notification.', 'consultation'),
        ]
        for order, (question, answer, category) in enumerate(faqs):
            FAQ.objects.get_or_create(question=question, defaults={'answer': answer, 'category': category, 'order': order})
        CustomerServiceChannel.objects.get_or_create(
            title='Email support',
            defaults={'description': 'Write to us any time.', 'icon': '✉️', 'contact_method': 'email',
                      'contact_value': 'support@example.com'},
        )
        for page_type, title in LegalPage.PAGE_TYPES:
            LegalPage.objects.get_or_create(page_type=page_type, defaults={'title': title, 'content': f'{title}.'})
        self.stdout.write('  website content: faqs, customer service, legal pages')
