# empowerhub/infrastructure/gateways.py

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import requests
from django.conf import settings

from empowerhub.core.entities import (
    Avaliacao, Doacao, Elegibilidade, IntencaoPagamento, Pedido, PerfilUsuario
)
from empowerhub.core.exceptions import (
    ErroRedeError,
    ErroValidacaoServidorError,
    FalhaRequisicaoError,
    NaoAutorizadoError,
)
from empowerhub.core.ports import (
    IAutenticacaoGateway,
    IAvaliacaoApi,
    IEnderecoApi,
    IGatewayDoacao,
    IPedidoApi,
    IPerfilApi,
    IPortfolioApi,
    IProdutoApi,
)
from .mappers import (
    AvaliacaoMapper,
    DoacaoMapper,
    EnderecoMapper,
    PedidoMapper,
    PerfilMapper,
    PortfolioMapper,
    ProdutoMapper,
)

logger = logging.getLogger(__name__)

METODOS_MUTAVEIS = {"POST", "PUT", "PATCH", "DELETE"}


# ====================================================================
# GATEWAY BASE: comunicação HTTP com a API do marketplace.
# ====================================================================

class ApiMarketplaceGateway:
    """
    Cliente HTTP da API do marketplace.

    Traduz toda resposta de erro para a taxonomia do Core:
    - falha de transporte/timeout -> ErroRedeError
    - 401 -> NaoAutorizadoError
    - 4xx com `errors` por campo -> ErroValidacaoServidorError
    - qualquer outra falha (ou `success: false`) -> FalhaRequisicaoError
    Nada é repetido automaticamente.
    """

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_base_url = (base_url or settings.MARKETPLACE_API_URL).rstrip("/")
        self.timeout = timeout or settings.MARKETPLACE_API_TIMEOUT
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _requisitar(
        self,
        metodo: str,
        caminho: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if metodo in METODOS_MUTAVEIS and not self.token:
            # Sem token não há como autorizar a escrita; nem chega a sair da máquina
            raise NaoAutorizadoError()

        url = f"{self.api_base_url}{caminho}"
        try:
            response = requests.request(
                metodo, url, json=payload, params=params, headers=self._headers(), timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Falha de conexão em %s %s: %s", metodo, url, e)
            raise ErroRedeError()

        try:
            corpo = response.json()
        except ValueError:
            corpo = {}
        if not isinstance(corpo, dict):
            corpo = {"data": corpo}

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError:
            self._levantar_erro(metodo, url, response.status_code, corpo)

        if corpo.get("success") is False:
            mensagem = corpo.get("message") or "The operation failed."
            logger.warning("%s %s respondeu success=false: %s", metodo, url, mensagem)
            raise FalhaRequisicaoError(response.status_code, mensagem)

        return corpo

    def _levantar_erro(self, metodo: str, url: str, status: int, corpo: Dict[str, Any]):
        mensagem = corpo.get("message")
        logger.warning("%s %s falhou com status %s: %s", metodo, url, status, mensagem)

        if status == 401:
            raise NaoAutorizadoError(mensagem) if mensagem else NaoAutorizadoError()

        erros = corpo.get("errors")
        if 400 <= status < 500 and isinstance(erros, dict) and erros:
            erros = {campo: str(texto) for campo, texto in erros.items()}
            if mensagem:
                raise ErroValidacaoServidorError(status, erros, message=mensagem)
            raise ErroValidacaoServidorError(status, erros)

        raise FalhaRequisicaoError(status, mensagem or f"Request failed with status {status}.")


class RecursoApiGateway(ApiMarketplaceGateway):
    """CRUD REST genérico: GET/POST {caminho}, PUT/DELETE {caminho}/{id}."""

    caminho: str = ""
    to_entity: Callable[[Dict[str, Any]], Any]

    def listar(self) -> List[Any]:
        corpo = self._requisitar("GET", self.caminho)
        return [self.to_entity(dados) for dados in corpo.get("data") or []]

    def criar(self, dados: Dict[str, Any]) -> Any:
        corpo = self._requisitar("POST", self.caminho, dados)
        return self._entidade_ou_nada(corpo)

    def atualizar(self, entidade_id: str, dados: Dict[str, Any]) -> Any:
        corpo = self._requisitar("PUT", f"{self.caminho}/{entidade_id}", dados)
        return self._entidade_ou_nada(corpo)

    def deletar(self, entidade_id: str) -> None:
        self._requisitar("DELETE", f"{self.caminho}/{entidade_id}")

    def _entidade_ou_nada(self, corpo: Dict[str, Any]):
        dados = corpo.get("data")
        return self.to_entity(dados) if isinstance(dados, dict) else None


# ====================================================================
# GATEWAYS: Implementações concretas das Portas do Core.
# ====================================================================

class ProdutoApiGateway(RecursoApiGateway, IProdutoApi):
    caminho = "/products"
    to_entity = staticmethod(ProdutoMapper.to_entity)


class EnderecoApiGateway(RecursoApiGateway, IEnderecoApi):
    caminho = "/addresses"
    to_entity = staticmethod(EnderecoMapper.to_entity)


class PortfolioApiGateway(RecursoApiGateway, IPortfolioApi):
    caminho = "/portfolio"
    to_entity = staticmethod(PortfolioMapper.to_entity)


class PedidoApiGateway(ApiMarketplaceGateway, IPedidoApi):
    """Pedidos: só listagem e movimentação de status."""

    def listar(self) -> List[Pedido]:
        corpo = self._requisitar("GET", "/orders")
        return [PedidoMapper.to_entity(dados) for dados in corpo.get("data") or []]

    def atualizar_status(self, pedido_id: str, novo_status: str) -> Any:
        corpo = self._requisitar("PUT", f"/orders/{pedido_id}/status", {"orderStatus": novo_status})
        dados = corpo.get("data")
        return PedidoMapper.to_entity(dados) if isinstance(dados, dict) else None


class PerfilApiGateway(ApiMarketplaceGateway, IPerfilApi):
    def buscar(self) -> PerfilUsuario:
        corpo = self._requisitar("GET", "/profile")
        return PerfilMapper.to_entity(corpo.get("user") or corpo.get("data") or {})

    def atualizar(self, dados: Dict[str, Any]) -> PerfilUsuario:
        corpo = self._requisitar("PUT", "/profile", dados)
        return PerfilMapper.to_entity(corpo.get("user") or corpo.get("data") or dados)

    def alterar_senha(self, dados: Dict[str, Any]) -> None:
        self._requisitar("PUT", "/profile/password", dados)


class AvaliacaoApiGateway(ApiMarketplaceGateway, IAvaliacaoApi):
    """Avaliações de produto e as duas consultas de elegibilidade do comprador."""

    def listar(self, produto_id: str) -> List[Avaliacao]:
        corpo = self._requisitar("GET", f"/reviews/{produto_id}")
        return [AvaliacaoMapper.to_entity(dados) for dados in corpo.get("data") or []]

    def criar(self, dados: Dict[str, Any]) -> Optional[Avaliacao]:
        corpo = self._requisitar("POST", "/reviews", dados)
        registro = corpo.get("data")
        return AvaliacaoMapper.to_entity(registro) if isinstance(registro, dict) else None

    def pode_avaliar(self, usuario_id: str, produto_id: str) -> Elegibilidade:
        corpo = self._requisitar("GET", "/orders/can-review", params={"userId": usuario_id, "productId": produto_id})
        return Elegibilidade(bool(corpo.get("canReview")), corpo.get("message") or "")

    def ja_avaliou(self, usuario_id: str, produto_id: str) -> bool:
        corpo = self._requisitar("GET", "/reviews/check", params={"userId": usuario_id, "productId": produto_id})
        return bool(corpo.get("hasReviewed"))


class DoacaoApiGateway(ApiMarketplaceGateway, IGatewayDoacao):
    """
    Doações. A confirmação do cartão acontece no navegador com o client_secret;
    aqui só criamos a intenção e registramos a doação confirmada.
    """

    def criar_intencao(self, vendedor_id: str, comprador_id: str, valor: Decimal) -> IntencaoPagamento:
        payload = {"sellerId": vendedor_id, "buyerId": comprador_id, "amount": float(valor)}
        corpo = self._requisitar("POST", "/donations/create-intent", payload)
        return DoacaoMapper.intencao_to_entity(corpo)

    def processar(self, doacao: Doacao) -> Doacao:
        corpo = self._requisitar("POST", "/donations/process", DoacaoMapper.to_payload(doacao))
        return DoacaoMapper.to_entity(corpo.get("data") or {}, doacao)


class AutenticacaoGateway(ApiMarketplaceGateway, IAutenticacaoGateway):
    """Colaborador de autenticação: troca e-mail/senha pelo token Bearer."""

    def autenticar(self, email: str, senha: str) -> Dict[str, Any]:
        url = f"{self.api_base_url}/auth/login"
        try:
            response = requests.request(
                "POST", url,
                json={"email": email, "password": senha},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Falha de conexão em POST %s: %s", url, e)
            raise ErroRedeError()

        try:
            corpo = response.json()
        except ValueError:
            corpo = {}
        if not isinstance(corpo, dict):
            corpo = {}

        if response.status_code >= 400 or not corpo.get("success") or not corpo.get("token"):
            mensagem = corpo.get("message") or "Invalid email or password."
            logger.warning("Login recusado para %s (status %s).", email, response.status_code)
            raise FalhaRequisicaoError(response.status_code if response.status_code >= 400 else 400, mensagem)

        return {"token": corpo["token"], "usuario": corpo.get("user") or {}}
