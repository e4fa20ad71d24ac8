"""Development configuration."""
import os

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or \
        'sqlite:///campus_attendance_dev.db'
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '').lower() in ('1', 'true', 'yes')

    LOG_LEVEL = 'DEBUG'
