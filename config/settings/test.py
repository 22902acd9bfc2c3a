"""Test settings for AdSpace.

In-memory SQLite, eager Celery, locmem email and mock payment providers.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PAYMENTS_ALLOW_MOCK = True
PAYMENTS_CURRENCY = 'XOF'
PAYMENTS_MAX_ATTEMPTS = 5
PAYMENTS_PROVIDER_RETRIES = 0
PAYMENT_PROVIDERS = {
    'orange_money': {'api_key': '', 'merchant_key': '', 'api_url': ''},
    'mtn_money': {'api_key': '', 'subscription_key': '', 'api_url': '', 'environment': 'sandbox'},
    'wave': {'api_key': '', 'api_url': ''},
}
PAYMENT_WEBHOOK_SECRETS = {'orange_money': '', 'mtn_money': '', 'wave': '', 'mock': ''}

SMS_GATEWAY_URL = ''
CONTRACT_BASE_URL = 'https://contracts.test/contracts'
