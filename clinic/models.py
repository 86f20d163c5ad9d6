"""
Database models for the hospital management API.

Every actor (patient, doctor, administrator) is a single :class:`User`
distinguished by ``role``; role specific data lives in one-to-one
profile tables.  Bookings are stored as :class:`Registration` rows and
prescriptions as :class:`PrescriptionLine` rows attached to a
:class:`MedicalRecord`.
"""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q
from django.utils import timezone


class User(AbstractUser):
    """Custom user model with a role.

    ``email`` is the login identifier; ``username`` mirrors it so the
    stock authentication backend keeps working.  ``first_name`` holds
    the full display name.
    """
    ROLE_PATIENT = 'patient'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_PATIENT, 'Patient'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
    ]
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    @property
    def full_name(self) -> str:
        return self.first_name or self.username

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


def _default_fee() -> Decimal:
    return Decimal(str(settings.DEFAULT_CONSULTATION_FEE))


class DoctorProfile(models.Model):
    """Professional data for a user with the doctor role."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    license_number = models.CharField(max_length=64, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    practice_schedule = models.CharField(max_length=255, blank=True)
    consultation_fee = models.DecimalField(max_digits=12, decimal_places=2, default=_default_fee)

    def __str__(self) -> str:
        return f"Dr. {self.user.full_name} ({self.specialization or 'general'})"


class PatientProfile(models.Model):
    """Demographic data for a user with the patient role."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='patient_profile')
    national_id = models.CharField(max_length=32, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, blank=True)
    address = models.CharField(max_length=500, blank=True)
    blood_type = models.CharField(max_length=5, blank=True)
    medical_history = models.TextField(blank=True)

    def __str__(self) -> str:
        return self.user.full_name


class DoctorApplication(models.Model):
    """A request from a registered user to be promoted to doctor."""
    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_APPROVED, 'approved'),
        (STATUS_REJECTED, 'rejected'),
    )
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_applications')
    full_name = models.CharField(max_length=255)
    national_id = models.CharField(max_length=32)
    license_number = models.CharField(max_length=64)
    specialization = models.CharField(max_length=255)
    cv_url = models.URLField(max_length=512, blank=True)
    diploma_url = models.URLField(max_length=512, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    admin_notes = models.TextField(blank=True)
    application_date = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"application {self.id} by {self.user_id} ({self.status})"


class Registration(models.Model):
    """A booked visit of a patient with a doctor (a "booking")."""
    STATUS_PENDING = 'pending'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_PENDING, 'pending'),
        (STATUS_CONFIRMED, 'confirmed'),
        (STATUS_COMPLETED, 'completed'),
        (STATUS_CANCELLED, 'cancelled'),
    )
    # Only these statuses occupy the doctor's time slot.
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)
    ALLOWED_TRANSITIONS = {
        STATUS_PENDING: (STATUS_CONFIRMED, STATUS_CANCELLED),
        STATUS_CONFIRMED: (STATUS_COMPLETED, STATUS_CANCELLED),
        STATUS_COMPLETED: (),
        STATUS_CANCELLED: (),
    }

    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_registrations')
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='doctor_registrations')
    visit_date = models.DateField()
    visit_time = models.TimeField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    complaint = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'visit_date', 'visit_time'], name='registration_doctor_slot_idx'),
            models.Index(fields=['patient', 'visit_date'], name='registration_patient_date_idx'),
        ]

    def can_transition_to(self, status: str) -> bool:
        return status in self.ALLOWED_TRANSITIONS.get(self.status, ())

    def __str__(self) -> str:
        return f"registration d={self.doctor_id} p={self.patient_id} {self.visit_date} {self.visit_time:%H:%M}"


class Medicine(models.Model):
    """An inventory item.  ``stock`` never goes below zero."""
    name = models.CharField(max_length=255, unique=True)
    medicine_type = models.CharField(max_length=100)
    dosage = models.CharField(max_length=100)
    unit = models.CharField(max_length=50)
    stock = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.CheckConstraint(condition=Q(stock__gte=0), name='medicine_stock_non_negative'),
        ]

    def __str__(self) -> str:
        return f"{self.name} {self.dosage} ({self.stock} {self.unit})"


class MedicalRecord(models.Model):
    """Diagnosis and treatment written by a doctor for one registration."""
    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name='medical_records')
    diagnosis = models.TextField()
    treatment = models.TextField()
    additional_notes = models.TextField(blank=True)
    input_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    medicines = models.ManyToManyField(Medicine, through='PrescriptionLine', related_name='medical_records')

    def __str__(self) -> str:
        return f"record {self.id} for registration {self.registration_id}"


class PrescriptionLine(models.Model):
    record = models.ForeignKey(MedicalRecord, on_delete=models.CASCADE, related_name='prescription_lines')
    medicine = models.ForeignKey(Medicine, on_delete=models.PROTECT, related_name='prescription_lines')
    quantity = models.PositiveIntegerField()
    usage_instructions = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gte=1), name='prescription_quantity_positive'),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.medicine_id} on record {self.record_id}"


class Report(models.Model):
    """Daily patient count and income snapshot for one doctor."""
    doctor = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reports')
    patient_count = models.PositiveIntegerField(default=0)
    income = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    report_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'report_date'], name='one_report_per_doctor_per_day'),
        ]

    def __str__(self) -> str:
        return f"report d={self.doctor_id} {self.report_date:%F} n={self.patient_count}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
