# empowerhub/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    # O nome completo do path da aplicação
    name = 'empowerhub.core'
    label = 'core'
    verbose_name = 'Validação, Store e Relatórios (Core)'
