"""
Configurações para o projeto EmpowerHub.
"""

from decouple import config, Csv
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# ====================================================================
# CONFIGURAÇÕES BÁSICAS
# ====================================================================

# A SECRET_KEY deve ser lida de uma variável de ambiente por segurança.
# Ela também assina o cookie de sessão que guarda o token Bearer.
SECRET_KEY = config('SECRET_KEY', default='django-insecure-default-key-for-development')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,testserver', cast=Csv())


# ====================================================================
# APLICAÇÕES INSTALADAS
# ====================================================================

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.sessions',

    # Aplicações de Terceiros
    'rest_framework',
    'drf_spectacular',

    # Nossas Aplicações
    'empowerhub.core.apps.CoreConfig', # Validação, Store, Coordenadores e Relatórios
    'empowerhub.infrastructure.apps.InfrastructureConfig', # Gateways HTTP
    'empowerhub.presentation.apps.PresentationConfig', # APIViews e Serializers
]


# ====================================================================
# MIDDLEWARE
# ====================================================================

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'empowerhub.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'empowerhub.wsgi.application'


# ====================================================================
# PERSISTÊNCIA E SESSÃO
# ====================================================================

# Os dados vivem na API do marketplace; este projeto não tem banco próprio.
DATABASES = {}

# Sessão em cookie assinado (não precisa de banco).
SESSION_ENGINE = 'django.contrib.sessions.backends.signed_cookies'
SESSION_COOKIE_HTTPONLY = True

# Para onde o usuário vai quando a API responde 401
LOGIN_URL = '/login/'

# Mutações em andamento ficam no cache para valerem entre requisições.
# Com mais de um processo, use um backend compartilhado (ex: Redis, Memcached).
CACHES = {
    'default': {
        'BACKEND': config('CACHE_BACKEND', default='django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': config('CACHE_LOCATION', default='empowerhub'),
    }
}

# Segundos até uma reserva de mutação expirar sozinha
MUTACAO_TIMEOUT = config('MUTACAO_TIMEOUT', default=60, cast=int)


# ====================================================================
# INTERNACIONALIZAÇÃO
# ====================================================================

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


# ====================================================================
# CONFIGURAÇÕES DO DJANGO REST FRAMEWORK (DRF) E DOCS (SPECTACULAR)
# ====================================================================

SPECTACULAR_SETTINGS = {
    'TITLE': 'API do EmpowerHub',
    'DESCRIPTION': 'Validação, sincronização e relatórios do marketplace comunitário EmpowerHub.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

REST_FRAMEWORK = {
    # A autenticação é do colaborador externo; o token fica na sessão.
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}


# ====================================================================
# API DO MARKETPLACE (serviço externo)
# ====================================================================

MARKETPLACE_API_URL = config('MARKETPLACE_API_URL', default='http://localhost:5000/api')
MARKETPLACE_API_TIMEOUT = config('MARKETPLACE_API_TIMEOUT', default=10, cast=float)

# Quantidade máxima de endereços por comprador
LIMITE_ENDERECOS = config('LIMITE_ENDERECOS', default=3, cast=int)


# ====================================================================
# LOGGING
# ====================================================================

LOG_LEVEL = config('LOG_LEVEL', default='INFO')
LOG_FILE = config('LOG_FILE', default='')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'level': LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': True,
        },
        'empowerhub': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}

if LOG_FILE:
    LOGGING['handlers']['file'] = {
        'level': LOG_LEVEL,
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': LOG_FILE,
        'maxBytes': 1024 * 1024 * 5,  # 5 MB
        'backupCount': 5,
        'formatter': 'verbose',
    }
    for logger_config in LOGGING['loggers'].values():
        logger_config['handlers'].append('file')
