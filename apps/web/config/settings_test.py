"""
Test settings - safe defaults so the suite runs without deployment secrets.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("SITE_URL", "https://testserver.local")
os.environ.setdefault("YOCO_SECRET_KEY", "sk_test_lattelane")
# base64("test-webhook-secret")
os.environ.setdefault("YOCO_WEBHOOK_SECRET", "whsec_dGVzdC13ZWJob29rLXNlY3JldA==")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

from apps.web.config.settings import *  # noqa: E402,F403

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CACHES = {
    "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"},
}
