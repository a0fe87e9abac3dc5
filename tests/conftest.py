"""Test environment: in-memory SQLite and cheap bcrypt, set before the app reads its settings."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "dev"
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)
os.environ.pop("STATIC_DIR", None)
