"""
API 엔드포인트 Rate Limiting (속도 제한) 클래스

- 주문 생성: 스팸 주문 방지
- 주문 상태 변경: 관리자 화면의 과도한 연속 요청 방지 (메일 폭주 방지)
- 설정 변경: 배송비 설정 연속 저장 방지

rate는 settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]의 scope별 값을 사용합니다.
"""

from rest_framework.throttling import UserRateThrottle


class OrderCreateRateThrottle(UserRateThrottle):
    """
    주문 생성 속도 제한

    제한: 사용자당 1분에 10회
    적용 대상: OrderViewSet.create
    """

    scope = "order_create"


class OrderStatusRateThrottle(UserRateThrottle):
    """
    주문 상태 변경 속도 제한

    제한: 사용자당 1분에 30회
    적용 대상: OrderViewSet.update_status
    """

    scope = "order_status"


class SettingsUpdateRateThrottle(UserRateThrottle):
    """
    설정 변경 속도 제한

    제한: 사용자당 1분에 10회
    적용 대상: ShippingSettingsView.put, StoreSettingView.post
    """

    scope = "settings_update"
