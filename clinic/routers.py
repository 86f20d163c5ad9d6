"""
URL mappings for the hospital management API.

Every endpoint lives under ``/api/v1``.  Paths carry no trailing slash.
"""
from django.urls import include, path

from .views import (
    admin_users,
    applications,
    auth,
    bookings,
    doctors,
    health,
    medicines,
    profiles,
    records,
    reports,
    uploads,
)

api_v1 = [
    # Authentication
    path('auth/patient/register', auth.patient_register, name='patient-register'),
    path('auth/patient/login', auth.patient_login, name='patient-login'),
    path('auth/doctor/register', auth.doctor_register, name='doctor-register'),
    path('auth/doctor/login', auth.doctor_login, name='doctor-login'),
    path('auth/admin/login', auth.admin_login, name='admin-login'),
    path('auth/token/refresh', auth.token_refresh, name='token-refresh'),

    # Any authenticated user
    path('upload/document', uploads.upload_document, name='upload-document'),
    path('doctor-applications', applications.submit_application, name='doctor-application-submit'),

    # Patient
    path('patient/logout', auth.patient_logout, name='patient-logout'),
    path('patient/me', profiles.patient_me, name='patient-me'),
    path('patient/profile', profiles.patient_profile, name='patient-profile'),
    path('patient/doctors', doctors.doctor_list, name='patient-doctors'),
    path('patient/doctors/<int:doctor_id>/availability', doctors.doctor_availability,
         name='patient-doctor-availability'),
    path('patient/registration', bookings.create_registration, name='patient-registration'),
    path('patient/registrations', bookings.patient_registrations, name='patient-registrations'),
    path('patient/medical-records', records.patient_records, name='patient-medical-records'),

    # Doctor
    path('doctor/logout', auth.doctor_logout, name='doctor-logout'),
    path('doctor/me', profiles.doctor_me, name='doctor-me'),
    path('doctor/profile', profiles.doctor_profile, name='doctor-profile'),
    path('doctor/registrations', bookings.doctor_registrations, name='doctor-registrations'),
    path('doctor/registrations/<int:registration_id>/status', bookings.registration_status,
         name='doctor-registration-status'),
    path('doctor/records', records.doctor_records, name='doctor-records'),
    path('doctor/records/<int:record_id>', records.doctor_record_detail, name='doctor-record-detail'),
    path('doctor/medicines', medicines.doctor_medicines, name='doctor-medicines'),
    path('doctor/report', reports.daily_report, name='doctor-report'),
    path('doctor/reports', reports.report_list, name='doctor-reports'),

    # Admin
    path('admin/users', admin_users.user_list, name='admin-users'),
    path('admin/users/<int:user_id>/role', admin_users.user_role, name='admin-user-role'),
    path('admin/users/<int:user_id>', admin_users.user_delete, name='admin-user-delete'),
    path('admin/doctor-applications', applications.application_list, name='admin-doctor-applications'),
    path('admin/doctor-applications/<int:application_id>/approve', applications.application_approve,
         name='admin-doctor-application-approve'),
    path('admin/doctor-applications/<int:application_id>/reject', applications.application_reject,
         name='admin-doctor-application-reject'),
    path('admin/medicines', medicines.admin_medicines, name='admin-medicines'),
    path('admin/medicines/<int:medicine_id>', medicines.admin_medicine_detail, name='admin-medicine-detail'),
    path('admin/medicines/<int:medicine_id>/stock', medicines.admin_medicine_stock, name='admin-medicine-stock'),
]

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    path('api/v1/', include(api_v1)),
]
