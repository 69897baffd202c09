"""
eFurnish URL 설정

- /admin/: Django 관리자 (주문/설정/알림 로그 관리)
- /api/: furniture 앱 API
- /api/schema/, /api/docs/: OpenAPI 스키마와 Swagger UI (drf-spectacular)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    # 관리자 페이지
    path("admin/", admin.site.urls),
    # furniture 앱 URLs 포함
    path("api/", include("furniture.urls")),
    # DRF 인증 URLs (브라우저 API 로그인/로그아웃)
    path("api-auth/", include("rest_framework.urls")),
    # API 문서
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
]
