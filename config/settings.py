"""
Django settings for the timesheet service.

Values are read from the environment; a local `.env` file is loaded first.
"""
import os
from datetime import timedelta
from pathlib import Path

import dj_database_url
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_list(key, default=''):
    return [item.strip() for item in os.environ.get(key, default).split(',') if item.strip()]


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-key')
DEBUG = os.environ.get('DJANGO_DEBUG', 'true').lower() == 'true'
ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', '*')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # third party
    'rest_framework',
    'rest_framework_simplejwt',
    'django_filters',
    'drf_yasg',

    # local apps
    'auth_app',
    'departments',
    'employees',
    'pms',
    'timesheets',
    'notifications',
]

AUTH_USER_MODEL = 'auth_app.User'

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

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

WSGI_APPLICATION = 'config.wsgi.application'

# Database: prefer DATABASE_URL if provided; otherwise fall back to SQLite.
DATABASES = {
    'default': dj_database_url.config(
        env='DATABASE_URL',
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=int(os.environ.get('CONN_MAX_AGE', '600')),
    )
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
# Calendar-day deadline comparisons happen in this timezone.
TIME_ZONE = os.environ.get('TIME_ZONE', 'Asia/Kolkata')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_PAGINATION_CLASS': 'rest_framework.pagination.PageNumberPagination',
    'PAGE_SIZE': int(os.environ.get('API_PAGE_SIZE', '50')),
    'EXCEPTION_HANDLER': 'config.exceptions.api_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.environ.get('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
}

SWAGGER_SETTINGS = {
    'SECURITY_DEFINITIONS': {
        'Bearer': {'type': 'apiKey', 'name': 'Authorization', 'in': 'header'},
    },
}

# Email backend: use console backend if no credentials provided
if os.environ.get('EMAIL_HOST_PASSWORD'):
    EMAIL_BACKEND = os.environ.get('EMAIL_BACKEND', 'django.core.mail.backends.smtp.EmailBackend')
else:
    EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
EMAIL_HOST = os.environ.get('EMAIL_HOST', 'smtp.gmail.com')
EMAIL_PORT = int(os.environ.get('EMAIL_PORT', '587'))
EMAIL_HOST_USER = os.environ.get('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.environ.get('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_TLS = os.environ.get('EMAIL_USE_TLS', 'true').lower() == 'true'
DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', EMAIL_HOST_USER or 'no-reply@example.com')

# Slack (empty token disables Slack delivery)
SLACK_BOT_TOKEN = os.environ.get('SLACK_BOT_TOKEN', '')
SLACK_MANAGEMENT_CHANNEL_ID = os.environ.get('SLACK_MANAGEMENT_CHANNEL_ID', '')

# External project-management system
PMS_CLIENT = os.environ.get('PMS_CLIENT', 'pms.clients.SupabasePMSClient')
PMS_BASE_URL = os.environ.get('PMS_BASE_URL', '')
PMS_API_KEY = os.environ.get('PMS_API_KEY', '')
PMS_TIMEOUT_SECONDS = float(os.environ.get('PMS_TIMEOUT_SECONDS', '10'))

# Timesheet policy
TIMESHEET_DEFAULT_SHIFT_HOURS = int(os.environ.get('TIMESHEET_DEFAULT_SHIFT_HOURS', '8'))
TIMESHEET_SHIFT_HOURS_CHOICES = (4, 8, 12)
TIMESHEET_NOTIFICATION_RECIPIENTS = env_list('TIMESHEET_NOTIFICATION_RECIPIENTS')
TIMESHEET_HR_ROLES = env_list('TIMESHEET_HR_ROLES', 'admin,hr')
TIMESHEET_HR_DEPARTMENT = os.environ.get('TIMESHEET_HR_DEPARTMENT', 'HR & Admin')
TIMESHEET_ADMIN_APPROVE_REQUIRES_MANAGER = (
    os.environ.get('TIMESHEET_ADMIN_APPROVE_REQUIRES_MANAGER', 'true').lower() == 'true'
)

# Real-time event stream
EVENTS_HEARTBEAT_SECONDS = int(os.environ.get('EVENTS_HEARTBEAT_SECONDS', '15'))
EVENTS_HISTORY_SIZE = int(os.environ.get('EVENTS_HISTORY_SIZE', '100'))

TIMESHEET_LOG_LEVEL = os.environ.get('TIMESHEET_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'timesheets': {'handlers': ['console'], 'level': TIMESHEET_LOG_LEVEL, 'propagate': False},
        'pms': {'handlers': ['console'], 'level': TIMESHEET_LOG_LEVEL, 'propagate': False},
        'notifications': {'handlers': ['console'], 'level': TIMESHEET_LOG_LEVEL, 'propagate': False},
    },
}
