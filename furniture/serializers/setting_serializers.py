from __future__ import annotations

from rest_framework import serializers

from ..models.setting import StoreSetting


class SettingKeyQuerySerializer(serializers.Serializer):
    """?key= 쿼리 파라미터 검증"""

    key = serializers.CharField(max_length=100, trim_whitespace=True)


class StoreSettingSerializer(serializers.ModelSerializer):
    """스토어 설정 조회용 Serializer (관리자 화면)"""

    class Meta:
        model = StoreSetting
        fields = ["key", "value", "updated_at"]
        read_only_fields = fields
