"""
Django settings for the mupacs archive.

Every archive-specific value can be overridden from the environment.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

DATA_DIR = Path(os.environ.get('MUPACS_DATA_DIR', str(BASE_DIR / 'data')))
DATA_DIR.mkdir(parents=True, exist_ok=True)

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'mupacs-insecure-development-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'true').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'pacs',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'mupacs.urls'

WSGI_APPLICATION = 'mupacs.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DATABASE_PATH', str(DATA_DIR / 'mupacs.sqlite3')),
        # Import workers write concurrently: take the write lock at BEGIN and
        # wait for it instead of failing with "database is locked".
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': int(os.environ.get('DATABASE_LOCK_TIMEOUT', '20')),
        },
        # An in-memory shared-cache test database fails fast on table locks;
        # a file keeps the busy timeout in effect for threaded tests.
        'TEST': {
            'NAME': str(DATA_DIR / 'test_mupacs.sqlite3'),
        },
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
}

# DICOM network settings
DICOM_AE_TITLE = os.environ.get('DICOM_AE_TITLE', 'MUPACS')
DICOM_PORT = int(os.environ.get('DICOM_PORT', '11112'))
DICOM_BIND_ADDRESS = os.environ.get('DICOM_BIND_ADDRESS', '')
DICOM_AUTO_START = os.environ.get('DICOM_AUTO_START', 'false').lower() in ('1', 'true', 'yes')

# Archive storage and import pipeline
PACS_STORAGE_DIR = os.environ.get('PACS_STORAGE_DIR', str(DATA_DIR / 'incoming'))
PACS_IMPORT_WORKERS = int(os.environ.get('PACS_IMPORT_WORKERS', '4'))
PACS_IMPORT_BACKLOG = int(os.environ.get('PACS_IMPORT_BACKLOG', '16'))
_submit_timeout = os.environ.get('PACS_IMPORT_SUBMIT_TIMEOUT')
PACS_IMPORT_SUBMIT_TIMEOUT = float(_submit_timeout) if _submit_timeout else None
PACS_IMPORT_PROGRESS_EVERY = int(os.environ.get('PACS_IMPORT_PROGRESS_EVERY', '100'))
PACS_SYNC_MAX_RETRIES = int(os.environ.get('PACS_SYNC_MAX_RETRIES', '3'))

# Logging
DICOM_LOG_LEVEL = os.environ.get('DICOM_LOG_LEVEL', 'INFO')
DICOM_LOG_DIR = Path(os.environ.get('DICOM_LOG_DIR', str(DATA_DIR / 'logs')))

