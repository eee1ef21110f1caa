# empowerhub/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Gateways
HTTP para a API do marketplace) DEVE seguir para se conectar aos Casos de Uso.
Leituras devolvem Entidades; escritas recebem o payload já validado
(campos no formato da API).
"""

from typing import Protocol, List, Dict, Any, Optional
from abc import abstractmethod
from decimal import Decimal

from empowerhub.core.entities import (
    Produto, Endereco, Pedido, ItemPortfolio, PerfilUsuario, IntencaoPagamento, Doacao,
    Avaliacao, Elegibilidade,
)


# ====================================================================
# 1. RECURSOS REST (listas sincronizadas pelo Store)
# ====================================================================

class IRecursoApi(Protocol):
    """Contrato genérico de um recurso com CRUD completo."""

    @abstractmethod
    def listar(self) -> List[Any]: ...

    @abstractmethod
    def criar(self, dados: Dict[str, Any]) -> Any: ...

    @abstractmethod
    def atualizar(self, entidade_id: str, dados: Dict[str, Any]) -> Any: ...

    @abstractmethod
    def deletar(self, entidade_id: str) -> None: ...


class IProdutoApi(IRecursoApi, Protocol):
    """/products"""

    @abstractmethod
    def listar(self) -> List[Produto]: ...


class IEnderecoApi(IRecursoApi, Protocol):
    """/addresses (sempre do usuário autenticado)"""

    @abstractmethod
    def listar(self) -> List[Endereco]: ...


class IPortfolioApi(IRecursoApi, Protocol):
    """/portfolio (vitrine do vendedor autenticado)"""

    @abstractmethod
    def listar(self) -> List[ItemPortfolio]: ...


class IPedidoApi(Protocol):
    """/orders: pedidos não são criados por aqui, só listados e movimentados."""

    @abstractmethod
    def listar(self) -> List[Pedido]: ...

    @abstractmethod
    def atualizar_status(self, pedido_id: str, novo_status: str) -> Any: ...


class IPerfilApi(Protocol):
    """/profile"""

    @abstractmethod
    def buscar(self) -> PerfilUsuario: ...

    @abstractmethod
    def atualizar(self, dados: Dict[str, Any]) -> PerfilUsuario: ...

    @abstractmethod
    def alterar_senha(self, dados: Dict[str, Any]) -> None: ...


class IAvaliacaoApi(Protocol):
    """/reviews: avaliações de um produto e elegibilidade do comprador."""

    @abstractmethod
    def listar(self, produto_id: str) -> List[Avaliacao]: ...

    @abstractmethod
    def criar(self, dados: Dict[str, Any]) -> Any: ...

    @abstractmethod
    def pode_avaliar(self, usuario_id: str, produto_id: str) -> Elegibilidade: ...

    @abstractmethod
    def ja_avaliou(self, usuario_id: str, produto_id: str) -> bool: ...


# ====================================================================
# 2. GATEWAYS (Serviços Externos)
# ====================================================================

class IGatewayDoacao(Protocol):
    """Protocolo do fluxo de doação (intenção de pagamento + registro)."""

    @abstractmethod
    def criar_intencao(self, vendedor_id: str, comprador_id: str, valor: Decimal) -> IntencaoPagamento: ...

    @abstractmethod
    def processar(self, doacao: Doacao) -> Doacao: ...


class IAutenticacaoGateway(Protocol):
    """Colaborador de autenticação que emite o token Bearer."""

    @abstractmethod
    def autenticar(self, email: str, senha: str) -> Dict[str, Any]: ...


# ====================================================================
# 3. ESTADO COMPARTILHADO ENTRE REQUISIÇÕES
# ====================================================================

class IRegistroMutacoes(Protocol):
    """Mutações em andamento de um usuário, visíveis para todas as requisições dele."""

    @abstractmethod
    def reservar(self, tipo: str, entidade_id: Optional[str]) -> bool: ...

    @abstractmethod
    def liberar(self, tipo: str, entidade_id: Optional[str]) -> None: ...
