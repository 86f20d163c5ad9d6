# clinic/management/commands/seed_clinic.py
import os
import secrets

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Medicine, User

MEDICINES = [
    # name, type, dosage, unit, stock, description
    ("Amlodipine", "tablet", "5mg", "tablet", 100, "Calcium channel blocker for hypertension."),
    ("Amoxicillin", "capsule", "500mg", "capsule", 50, "Penicillin antibiotic."),
    ("Paracetamol", "tablet", "500mg", "tablet", 200, "Analgesic and antipyretic."),
    ("Omeprazole", "capsule", "20mg", "capsule", 75, "Proton pump inhibitor."),
    ("Salbutamol Syrup", "syrup", "2mg/5ml", "bottle", 30, "Bronchodilator."),
]


class Command(BaseCommand):
    help = "Seed an admin account and the sample medicine catalogue (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--admin-email", default=os.getenv("SEED_ADMIN_EMAIL", "admin@hospital.local"))
        parser.add_argument("--admin-password", default=os.getenv("SEED_ADMIN_PASSWORD"))
        parser.add_argument("--skip-medicines", action="store_true")

    @transaction.atomic
    def handle(self, *args, **opts):
        email = opts["admin_email"].strip().lower()
        admin, created = User.objects.get_or_create(
            email=email,
            defaults={"username": email, "first_name": "Administrator", "role": User.ROLE_ADMIN,
                      "is_staff": True, "is_superuser": True},
        )
        if created or opts["admin_password"]:
            password = opts["admin_password"]
            if not password:
                password = secrets.token_urlsafe(12)
                self.stdout.write(self.style.WARNING(f"generated admin password: {password}"))
            admin.set_password(password)
            admin.save(update_fields=["password"])
        if admin.role != User.ROLE_ADMIN:
            admin.role = User.ROLE_ADMIN
            admin.save(update_fields=["role"])
        self.stdout.write(self.style.SUCCESS(f"admin: {email} ({'created' if created else 'exists'})"))

        if opts["skip_medicines"]:
            return
        for name, mtype, dosage, unit, stock, description in MEDICINES:
            _, made = Medicine.objects.get_or_create(
                name=name,
                defaults={"medicine_type": mtype, "dosage": dosage, "unit": unit,
                          "stock": stock, "description": description},
            )
            self.stdout.write(self.style.SUCCESS(f"medicine: {name} {dosage} ({'created' if made else 'exists'})"))
        self.stdout.write(self.style.SUCCESS(f"Seed complete ({settings.DATABASES['default']['ENGINE']})."))
