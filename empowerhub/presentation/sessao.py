# empowerhub/presentation/sessao.py
# Guarda o token Bearer e o usuário logado na sessão do Django.

from typing import Any, Dict, Optional

from django.http import HttpRequest


class SessaoMarketplace:
    """
    Credenciais emitidas pelo colaborador de autenticação, persistidas na
    sessão (cookie assinado) entre requisições.
    """

    SESSION_KEY = 'sessao_empowerhub'

    def __init__(self, request: HttpRequest):
        self.request = request

    @property
    def _dados(self) -> Dict[str, Any]:
        return self.request.session.get(self.SESSION_KEY) or {}

    @property
    def token(self) -> Optional[str]:
        return self._dados.get('token')

    @property
    def usuario(self) -> Dict[str, Any]:
        return self._dados.get('usuario') or {}

    @property
    def usuario_id(self) -> Optional[str]:
        usuario = self.usuario
        identificador = usuario.get('id', usuario.get('_id'))
        return str(identificador) if identificador is not None else None

    @property
    def autenticada(self) -> bool:
        return bool(self.token)

    def iniciar(self, token: str, usuario: Dict[str, Any]):
        """Salva as credenciais após o login."""
        self.request.session[self.SESSION_KEY] = {'token': token, 'usuario': usuario}
        self.request.session.modified = True

    def encerrar(self):
        """Logout ou 401: descarta tudo o que estava na sessão."""
        self.request.session.flush()
