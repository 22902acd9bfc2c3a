"""Development settings for AdSpace.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts, using the
console email backend and falling back to mock payment providers when no
credentials are configured. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Providers without credentials are replaced by the mock adapter
PAYMENTS_ALLOW_MOCK = env_bool('PAYMENTS_ALLOW_MOCK', True)  # noqa: F405
