"""
WSGI config for the hospital management project.

It exposes the WSGI callable as a module-level variable named ``application``.
Static files are served by WhiteNoise through the middleware stack.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

# Set the default settings module for the 'django' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hms.settings')

application = get_wsgi_application()
