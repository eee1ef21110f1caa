from django.apps import AppConfig


class PresentationConfig(AppConfig):
    name = 'empowerhub.presentation'
    label = 'presentation' # Define um label para evitar conflitos de nomes
