# empowerhub/infrastructure/registro.py

import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache

from empowerhub.core.ports import IRegistroMutacoes

logger = logging.getLogger(__name__)


class RegistroMutacoesCache(IRegistroMutacoes):
    """
    Mutações em andamento de um usuário guardadas no cache do Django.

    `cache.add` só grava quando a chave não existe, então duas requisições
    concorrentes para a mesma entidade não reservam as duas. A chave expira
    sozinha (MUTACAO_TIMEOUT) caso o processo caia no meio da mutação.
    """

    PREFIXO = "empowerhub:mutacao"

    def __init__(self, usuario: str, timeout: Optional[int] = None):
        self.usuario = usuario
        self.timeout = timeout or settings.MUTACAO_TIMEOUT

    def _chave(self, tipo: str, entidade_id: Optional[str]) -> str:
        return f"{self.PREFIXO}:{self.usuario}:{tipo}:{entidade_id or 'novo'}"

    def reservar(self, tipo: str, entidade_id: Optional[str]) -> bool:
        reservado = cache.add(self._chave(tipo, entidade_id), True, self.timeout)
        if not reservado:
            logger.info("Envio duplicado de %s (id=%s) bloqueado para %s.", tipo, entidade_id, self.usuario)
        return reservado

    def liberar(self, tipo: str, entidade_id: Optional[str]) -> None:
        cache.delete(self._chave(tipo, entidade_id))
