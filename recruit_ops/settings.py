"""
Django settings for the recruitment sheet migration project.

Configuration comes from the environment; `.env.local` and `.env` are loaded
first so local runs behave like the production server.
"""
import os
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env.local')
load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-only-secret-key-change-me')
DEBUG = os.getenv('DJANGO_DEBUG', 'false').lower() == 'true'
ALLOWED_HOSTS = [h for h in os.getenv('DJANGO_ALLOWED_HOSTS', '').split(',') if h]

INSTALLED_APPS = [
    'placements',
]

MIDDLEWARE = []


def _database_config():
    """Build the default database from DB_ENGINE (sqlite or postgres)"""
    engine = os.getenv('DB_ENGINE', 'sqlite').lower()

    if engine == 'sqlite':
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('DB_PATH', str(BASE_DIR / 'recruit_ops.sqlite3')),
        }

    if engine == 'postgres':
        required = ['POSTGRES_DB', 'POSTGRES_USER', 'POSTGRES_PASSWORD', 'POSTGRES_HOST']
        missing = [name for name in required if not os.getenv(name)]
        if missing:
            raise ImproperlyConfigured(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('POSTGRES_DB'),
            'USER': os.getenv('POSTGRES_USER'),
            'PASSWORD': os.getenv('POSTGRES_PASSWORD'),
            'HOST': os.getenv('POSTGRES_HOST'),
            'PORT': os.getenv('POSTGRES_PORT', '5432'),
        }

    raise ImproperlyConfigured(f"Unsupported DB_ENGINE: {engine}")


DATABASES = {
    'default': _database_config(),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'ja'
TIME_ZONE = 'Asia/Tokyo'
USE_I18N = True
USE_TZ = True

# Sheet import tuning
RECRUIT_IMPORT = {
    'BATCH_SIZE': os.getenv('IMPORT_BATCH_SIZE', '200'),
    'PAGE_SIZE': os.getenv('IMPORT_PAGE_SIZE', '1000'),
    'DELETE_CHUNK_SIZE': os.getenv('IMPORT_DELETE_CHUNK_SIZE', '500'),
    'ORGANIZATION_CODE': os.getenv('IMPORT_ORGANIZATION_CODE') or None,
}

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'loggers': {
        'etl': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'placements': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'sheets': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}
