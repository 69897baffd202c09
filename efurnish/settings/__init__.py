"""
eFurnish 설정 패키지

DJANGO_SETTINGS_MODULE=efurnish.settings 로 실행하면 (manage.py, wsgi, celery 기본값)
.env 또는 환경변수의 EFURNISH_ENV 값으로 설정 모듈을 고릅니다.
- local (기본값): 개발 서버, 콘솔 메일
- production: SMTP 메일, 보안 설정

efurnish.settings.test 처럼 하위 모듈을 직접 지정하면 여기서는 아무것도 불러오지 않습니다.
(pytest는 pyproject.toml에서 efurnish.settings.test 를 지정)
"""

import os

from dotenv import load_dotenv

load_dotenv()

SETTINGS_ENVS = ("local", "production")

if os.environ.get("DJANGO_SETTINGS_MODULE", __name__) == __name__:
    _env = os.environ.get("EFURNISH_ENV", "local").strip().lower()

    if _env == "production":
        from efurnish.settings.production import *  # noqa: F401, F403
    elif _env == "local":
        from efurnish.settings.local import *  # noqa: F401, F403
    else:
        raise RuntimeError(f"EFURNISH_ENV must be one of {SETTINGS_ENVS}, got {_env!r}")
