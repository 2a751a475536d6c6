"""
Django settings for Little Latte Lane.

Secrets come from the deployment environment - never hardcode credentials.
Run with: uv run python manage.py runserver
"""

from pathlib import Path

import environ  # type: ignore[import-untyped]

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environ
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    LOG_LEVEL=(str, "INFO"),
    SITE_URL=(str, "http://localhost:8000"),
    YOCO_SECRET_KEY=(str, ""),
    YOCO_WEBHOOK_SECRET=(str, ""),
    YOCO_API_BASE_URL=(str, "https://payments.yoco.com/api"),
    YOCO_TIMEOUT_SECONDS=(float, 30.0),
    PAYMENT_CURRENCY=(str, "ZAR"),
    DRAFT_ORDER_RETENTION_HOURS=(int, 6),
    ORDER_READY_MINUTES=(int, 30),
    CRON_SECRET=(str, ""),
    RESEND_API_KEY=(str, ""),
    ORDER_EMAIL_FROM=(str, "Little Latte Lane <orders@littlelattelane.co.za>"),
)

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "apps.web.core",
    "apps.web.restaurant",
    "apps.web.payments",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "apps.web.config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "apps.web.config.wsgi.application"

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# Password validation
_V = "django.contrib.auth.password_validation"
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": f"{_V}.UserAttributeSimilarityValidator"},
    {"NAME": f"{_V}.MinimumLengthValidator"},
    {"NAME": f"{_V}.CommonPasswordValidator"},
    {"NAME": f"{_V}.NumericPasswordValidator"},
]

# Internationalization
LANGUAGE_CODE = "en-za"
TIME_ZONE = "Africa/Johannesburg"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR.parent.parent / "staticfiles"  # /app/staticfiles in production

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": env("LOG_LEVEL"),
            "propagate": False,
        },
    },
}

# Site
SITE_URL = env("SITE_URL").rstrip("/")

# Payments (Yoco)
YOCO_SECRET_KEY = env("YOCO_SECRET_KEY")
YOCO_WEBHOOK_SECRET = env("YOCO_WEBHOOK_SECRET")
YOCO_API_BASE_URL = env("YOCO_API_BASE_URL").rstrip("/")
YOCO_TIMEOUT_SECONDS = env("YOCO_TIMEOUT_SECONDS")
PAYMENT_CURRENCY = env("PAYMENT_CURRENCY")

# Order lifecycle
DRAFT_ORDER_RETENTION_HOURS = env("DRAFT_ORDER_RETENTION_HOURS")
ORDER_READY_MINUTES = env("ORDER_READY_MINUTES")
CRON_SECRET = env("CRON_SECRET")

# Email (Resend)
RESEND_API_KEY = env("RESEND_API_KEY")
ORDER_EMAIL_FROM = env("ORDER_EMAIL_FROM")
