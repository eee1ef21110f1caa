from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    name = 'empowerhub.infrastructure'
    label = 'infrastructure'
    verbose_name = 'Gateways da API do Marketplace'
