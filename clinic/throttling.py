"""
Rate limits for the anonymous authentication endpoints.

Function based views cannot carry a ``throttle_scope`` attribute, so
each scope gets its own class keyed by client address.
"""
from rest_framework.throttling import AnonRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class RegisterRateThrottle(AnonRateThrottle):
    scope = 'register'
