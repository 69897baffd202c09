from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from furniture.views.checkout_views import CheckoutSummaryView
from furniture.views.order_views import OrderViewSet
from furniture.views.setting_views import StoreSettingView
from furniture.views.shipping_views import ShippingQuoteView, ShippingSettingsView

# DRF의 라우터 생성
router = DefaultRouter()

# ViewSet 등록
router.register(r"orders", OrderViewSet, basename="order")

# URL 패턴 정의
urlpatterns = [
    # API root - 라우터가 자동으로 생성하는 URL들
    path("", include(router.urls)),
    # 배송비
    path("shipping/settings/", ShippingSettingsView.as_view(), name="shipping-settings"),
    path("shipping/quote/", ShippingQuoteView.as_view(), name="shipping-quote"),
    # 체크아웃
    path("checkout/summary/", CheckoutSummaryView.as_view(), name="checkout-summary"),
    # 스토어 설정 (key 단위)
    path("settings/", StoreSettingView.as_view(), name="store-settings"),
    # 토큰 발급/갱신 (JWT)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
]
