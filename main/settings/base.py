"""
Django settings for main project.
"""

import os
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = 'changeme'

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

ALLOWED_HOSTS = ['127.0.0.1', 'localhost', '0.0.0.0']

# Application definition
INSTALLED_APPS = [
    'accreditation.apps.AccreditationConfig',
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'phonenumber_field',
    'admin_auto_filters',
    'background_task',
    'safedelete',
    'import_export',
]

MIDDLEWARE = [
    # Security middleware
    'django.middleware.security.SecurityMiddleware',
    # Session middleware needed by auth
    'django.contrib.sessions.middleware.SessionMiddleware',
    # Messages depends on sessions
    'django.contrib.messages.middleware.MessageMiddleware',
    # Authentication (must be before anything that depends on request.user)
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    # Common middleware handles APPEND_SLASH - must be near the end
    'django.middleware.common.CommonMiddleware',
    # CSRF protection
    'django.middleware.csrf.CsrfViewMiddleware',
    # Clickjacking protection
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'main.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'main.wsgi.application'

# Database

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

# Password validation

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Internationalization

LANGUAGE_CODE = 'en'

LANGUAGES = [
    ('en', 'English'),
    ('fr', 'Français'),
]

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = False

DEFAULT_AUTO_FIELD = 'django.db.models.AutoField'

# Static files (CSS, JavaScript, Images)

STATIC_URL = '/static/'

STATIC_ROOT = os.path.join(BASE_DIR, '../static-prod')

MEDIA_URL = '/media/'

MEDIA_ROOT = os.path.join(BASE_DIR, '../media')

SECURE_REFERRER_POLICY = 'origin'

# email

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

DEFAULT_FROM_EMAIL = 'accreditation@localhost'

ADMINS = []

X_FRAME_OPTIONS = 'SAMEORIGIN'

# safe delete
SAFE_DELETE_FIELD_NAME = 'deleted'

# background tasks: run inline instead of queueing them
AUTO_BACKGROUND_TASKS = False

DATETIME_INPUT_FORMATS = ['%Y-%m-%d %H:%M']

DATE_INPUT_FORMATS = ['%Y-%m-%d']

LOGIN_URL = '/admin/login/'

PHONENUMBER_DEFAULT_REGION = None

# ACCREDITATION

# Hours before an untouched registration draft is discarded
DRAFT_TTL_HOURS = 24

# Attempts at drawing an unused registration code
REGISTRATION_CODE_ATTEMPTS = 5

# Participant types without a constraint in the invitation restriction have no cap
QUOTA_MISSING_CONSTRAINT_UNLIMITED = True

# Named steps of the approval workflow
WORKFLOW_ROUTING = {
    'approve_branches': [
        {
            'participant_type': 'Press / Media',
            'from_step': 'Review Request',
            'to_step': 'ET Broadcast Approval',
        },
    ],
    'reject_checkpoint': 'MOFA Approval',
    'initial_step': 'Request Received',
}

# Logging configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {name} {module} {funcName} {lineno} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {name} {funcName}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'accreditation': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'django.security.DisallowedHost': {
            'handlers': [],
            'propagate': False,
        },
    },
}
