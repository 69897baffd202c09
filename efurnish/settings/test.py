"""
Django Test Settings
테스트 환경 전용 설정 (pytest, Django test)
"""

import os

# 테스트에서는 .env 없이도 실행 가능하도록 기본 SECRET_KEY 지정
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret-key-not-for-production")

from efurnish.settings.base import *  # noqa: F401, F403, E402
from efurnish.settings.components.logging import get_logging_config  # noqa: E402

# ==========================================================================
# Test Mode Flag
# ==========================================================================

TESTING = True
DEBUG = True

# ==========================================================================
# Database
# DATABASE_HOST가 지정되면 PostgreSQL, 아니면 SQLite 사용 (CI/로컬 양쪽 지원)
# ==========================================================================

if os.getenv("DATABASE_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DATABASE_NAME", "efurnish_dev"),
            "USER": os.getenv("DATABASE_USER", "postgres"),
            "PASSWORD": os.getenv("DATABASE_PASSWORD", "postgres"),
            "HOST": os.getenv("DATABASE_HOST"),
            "PORT": os.getenv("DATABASE_PORT", "5432"),
            # 테스트에서는 연결 즉시 닫기
            "CONN_MAX_AGE": 0,
            "CONN_HEALTH_CHECKS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test_db.sqlite3",  # noqa: F405
        }
    }

# ==========================================================================
# Cache (Dummy - 테스트에서는 캐시 비활성화)
# ==========================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.dummy.DummyCache",
    }
}

# ==========================================================================
# Celery (동기 실행 - 테스트에서는 즉시 실행)
# ==========================================================================

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

# ==========================================================================
# Rate Limiting - 테스트에서는 비활성화
# ==========================================================================

REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {  # noqa: F405
    "order_create": "1000/min",
    "order_status": "1000/min",
    "settings_update": "1000/min",
}

# ==========================================================================
# Logging (Quiet mode for tests)
# ==========================================================================

LOGGING = get_logging_config(debug=False)

# ==========================================================================
# Password Hashing (빠른 해싱 - 테스트 속도 향상)
# ==========================================================================

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# ==========================================================================
# Email (메모리 저장 - mail.outbox로 검증)
# ==========================================================================

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
