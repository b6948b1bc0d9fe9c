import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from .base import *  # noqa: E402,F401,F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []

PESAPAL_CONSUMER_KEY = "test-key"
PESAPAL_CONSUMER_SECRET = "test-secret"
PESAPAL_BASE_URL = "https://pesapal.test/api"
PESAPAL_CALLBACK_URL = "https://chama.test/api/payments/callback/"

LOGGING['root']['level'] = 'WARNING'
