# backend/homestock/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/homestock.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///homestock.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Preset copied into a new household's custom rule-set
    DEFAULT_RULE_SET_PRESET = os.environ.get("DEFAULT_RULE_SET_PRESET", "standard")

    # Caller-side retries when two creations race for the same auto number
    AUTO_NUMBER_RETRY_ATTEMPTS = int(os.environ.get("AUTO_NUMBER_RETRY_ATTEMPTS", "3"))
