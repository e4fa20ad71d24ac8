"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class BaseConfig:
    """Base configuration."""

    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # Reverse proxies trusted for X-Forwarded-For / -Proto (0 trusts none)
    PROXY_FIX_X_FOR = int(os.getenv('PROXY_FIX_X_FOR', '0'))

    # CORS
    CORS_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Rate Limiting (memory:// for one instance, redis://... when scaled out)
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day;50 per hour"

    # Attendance sessions
    ATTENDANCE_SESSION_TTL_SECONDS = int(os.getenv('ATTENDANCE_SESSION_TTL_SECONDS', '300'))
    ATTENDANCE_TOKEN_BYTES = 24  # 32 url-safe characters, 192 bits
    ATTENDANCE_MIN_SESSION_TIMEOUT = 30
    ATTENDANCE_MAX_SESSION_TIMEOUT = 3600
    ATTENDANCE_SCAN_RATE_LIMIT = os.getenv('ATTENDANCE_SCAN_RATE_LIMIT', '20 per minute')
    ATTENDANCE_SESSION_RATE_LIMIT = os.getenv('ATTENDANCE_SESSION_RATE_LIMIT', '120 per minute')

    # Audit
    AUDIT_LOG_DEFAULT_LIMIT = 100

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')
