import os

from .base import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Run against Postgres when one is available, row locks are no-ops on sqlite
if os.getenv("DB_HOST"):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv("POSTGRES_DB", "accreditation_test"),
            'USER': os.getenv("POSTGRES_USER", "accreditation"),
            'PASSWORD': os.getenv("POSTGRES_PASSWORD", "accreditation"),
            'HOST': os.getenv("DB_HOST"),
            'PORT': '5432',
        }
    }

    worker = os.getenv("PYTEST_XDIST_WORKER")
    if worker:
        DATABASES["default"]["NAME"] = f"{DATABASES['default']['NAME']}_{worker}"

STATIC_ROOT = os.path.join(BASE_DIR, '../static')

AUTO_BACKGROUND_TASKS = True

DEBUG = False
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARN',
    },
}

FORMS_URLFIELD_ASSUME_HTTPS = True

ADMINS = [
    ('test', 'test@test.it')
]
