# empowerhub/urls.py
"""
Configuração principal de URL do projeto EmpowerHub.

1. Rotas da API do marketplace (empowerhub.presentation)
2. Rotas da Documentação da API (Swagger/Redoc)
"""
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    path('', include('empowerhub.presentation.urls')),

    # ====================================================================
    # ROTAS DE DOCUMENTAÇÃO DA API (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
