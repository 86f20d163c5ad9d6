"""Clinic application for the hospital management API.

This package contains models, serializers, services, views and route
registrations for patients, doctors, bookings, medical records,
medicine stock and daily reports.
"""
