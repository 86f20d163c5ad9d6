"""
Custom authentication backend for token-based auth.

This module defines a subclass of Django REST framework's
``TokenAuthentication`` that overrides the ``keyword`` used in the
``Authorization`` header.  Keeping it apart from any view definitions
avoids circular imports when the REST framework imports authentication
classes during initialization.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Opaque token authentication using the ``Bearer`` keyword.

    Clients send ``Authorization: Bearer <key>``.  JWT access tokens use
    the ``JWT`` keyword instead so both schemes can be enabled at once.
    """

    keyword = 'Bearer'
