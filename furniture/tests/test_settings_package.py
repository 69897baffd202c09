"""
설정 패키지(efurnish.settings) 선택 테스트
"""

import importlib

import pytest

import efurnish.settings as settings_package


class TestSettingsPackage:
    def test_submodule_settings_skip_package_loading(self):
        """하위 모듈을 직접 지정하면 패키지에는 설정값이 없음"""
        assert not hasattr(settings_package, "INSTALLED_APPS")

    def test_unknown_env_is_rejected(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("DJANGO_SETTINGS_MODULE", "efurnish.settings")
        monkeypatch.setenv("EFURNISH_ENV", "staging")

        # Act & Assert
        with pytest.raises(RuntimeError, match="staging"):
            importlib.reload(settings_package)
