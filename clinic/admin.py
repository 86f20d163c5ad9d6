"""
Django admin registrations for the clinic models.

Superusers can inspect and manage data via the ``/admin/`` URL.  Stock
is editable here as well; edits made through the API are audited,
edits made here are not.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    DoctorApplication,
    DoctorProfile,
    MedicalRecord,
    Medicine,
    PatientProfile,
    PrescriptionLine,
    Registration,
    Report,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'first_name', 'role', 'is_active', 'is_staff')
    list_filter = ('role', 'is_active')
    search_fields = ('email', 'username', 'first_name')


@admin.register(DoctorProfile)
class DoctorProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'specialization', 'license_number', 'consultation_fee')
    search_fields = ('user__email', 'user__first_name', 'specialization')


@admin.register(PatientProfile)
class PatientProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'gender', 'birth_date', 'blood_type')
    search_fields = ('user__email', 'user__first_name', 'national_id')


@admin.register(DoctorApplication)
class DoctorApplicationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'full_name', 'specialization', 'status', 'application_date')
    list_filter = ('status',)
    search_fields = ('full_name', 'user__email', 'license_number')


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'patient', 'visit_date', 'visit_time', 'status')
    list_filter = ('status', 'visit_date')
    search_fields = ('doctor__first_name', 'patient__first_name')


class PrescriptionLineInline(admin.TabularInline):
    model = PrescriptionLine
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'registration', 'input_date')
    inlines = [PrescriptionLineInline]


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ('name', 'medicine_type', 'dosage', 'unit', 'stock')
    search_fields = ('name',)


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'report_date', 'patient_count', 'income')
    list_filter = ('report_date',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'user', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    readonly_fields = ('created_at',)
