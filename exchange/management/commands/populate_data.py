"""
Management command to populate the database with demo hospitals.

Creates an administrator, a handful of hospitals with stock and a few
open requests between them.  Running it twice is harmless: existing
accounts are left as they are.
"""
import os

from django.core.management.base import BaseCommand
from django.db import transaction

from exchange.models import Hospital, OrganOffer, ResourceRequest, User
from exchange.services import hospitals as hospital_service
from exchange.services import inventory

HOSPITALS = [
    {
        'username': 'cityhospital', 'name': 'City General Hospital', 'email': 'contact@citygeneral.example',
        'address': '12 Main Street', 'phone': '555-0101', 'oxygen': 40,
        'blood': {'A+': 12, 'O+': 10, 'O-': 4, 'B+': 6},
        'organs': [('Kidney', 'O+', 34), ('Cornea', 'A+', 51)],
    },
    {
        'username': 'stmary', 'name': "St. Mary's Medical Center", 'email': 'desk@stmarys.example',
        'address': '480 Harbor Road', 'phone': '555-0144', 'oxygen': 15,
        'blood': {'O+': 5, 'AB+': 3, 'A-': 2},
        'organs': [('Liver', 'B+', 29)],
    },
    {
        'username': 'northside', 'name': 'Northside Clinic', 'email': 'ops@northside.example',
        'address': '7 Hill Avenue', 'phone': '555-0188', 'oxygen': 5,
        'blood': {'B-': 7, 'O-': 9},
        'organs': [],
    },
]

DEMO_PASSWORD = 'Exchange#2024'


class Command(BaseCommand):
    help = 'Populate database with demo hospitals, an admin account and sample requests'

    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')
        with transaction.atomic():
            self.create_admin()
            hospitals = self.create_hospitals()
            self.create_requests(hospitals)
        self.stdout.write(self.style.SUCCESS('Demo data ready.'))

    def create_admin(self):
        password = os.getenv('ADMIN_PASSWORD') or DEMO_PASSWORD
        admin, created = User.objects.get_or_create(
            username='admin', defaults={'role': User.ROLE_ADMIN, 'is_staff': True},
        )
        if created:
            admin.set_password(password)
            admin.save(update_fields=['password'])
            self.stdout.write(self.style.SUCCESS('ok: admin'))

    def create_hospitals(self):
        hospitals = []
        for entry in HOSPITALS:
            hospital = Hospital.objects.filter(email=entry['email']).first()
            if hospital is None:
                hospital = hospital_service.create_hospital(
                    username=entry['username'], password=DEMO_PASSWORD, name=entry['name'], email=entry['email'],
                    address=entry['address'], phone=entry['phone'],
                )
                inventory.replace_inventory(
                    hospital,
                    oxygen_cylinders=entry['oxygen'],
                    blood=entry['blood'],
                    organs=[
                        {'organ_name': organ, 'blood_group': bg, 'age': age}
                        for organ, bg, age in entry['organs']
                    ],
                )
                self.stdout.write(self.style.SUCCESS(f"ok: {entry['name']}"))
            hospitals.append(hospital)
        return hospitals

    def create_requests(self, hospitals):
        if ResourceRequest.objects.exists():
            return
        city, stmary, northside = hospitals
        samples = [
            (stmary, {'request_type': 'Blood', 'blood_group': 'O+', 'quantity': 3,
                      'description': 'Trauma case, need O+ urgently.'}),
            (northside, {'request_type': 'Oxygen', 'quantity': 10,
                         'description': 'Respiratory ward running low on cylinders.'}),
            (city, {'request_type': 'Organ', 'organ_name': 'Liver', 'blood_group': 'B+',
                    'description': 'Patient on transplant list, compatible liver needed.'}),
        ]
        for hospital, draft in samples:
            ResourceRequest.objects.create(
                requesting_hospital=hospital,
                request_type=draft['request_type'],
                blood_group=draft.get('blood_group'),
                quantity=draft.get('quantity'),
                organ_name=draft.get('organ_name'),
                description=draft['description'],
            )
        self.stdout.write(self.style.SUCCESS(f'ok: {len(samples)} open requests'))
        self.stdout.write(f'organ offers on file: {OrganOffer.objects.count()}')
