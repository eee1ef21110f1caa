# empowerhub/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com os Gateways concretos da camada
de Infraestrutura. Não há instâncias globais: cada chamada recebe o token da
sessão e o Store da requisição.
"""
from typing import Optional

from django.conf import settings

from empowerhub.infrastructure.gateways import (
    AutenticacaoGateway,
    AvaliacaoApiGateway,
    DoacaoApiGateway,
    EnderecoApiGateway,
    PedidoApiGateway,
    PerfilApiGateway,
    PortfolioApiGateway,
    ProdutoApiGateway,
)
from empowerhub.infrastructure.registro import RegistroMutacoesCache
from .store import Store
from .use_cases import (
    AlterarSenhaUseCase,
    AtualizarPerfilUseCase,
    GerenciarAvaliacoesUseCase,
    GerenciarEnderecosUseCase,
    GerenciarPedidosAdminUseCase,
    GerenciarPortfolioUseCase,
    GerenciarProdutosUseCase,
    RealizarDoacaoUseCase,
)


# ====================================================================
# Use Cases de Catálogo/Vitrine
# ====================================================================

def get_gerenciar_produtos_use_case(token: Optional[str], store: Store) -> GerenciarProdutosUseCase:
    return GerenciarProdutosUseCase(ProdutoApiGateway(token), store)

def get_gerenciar_portfolio_use_case(token: Optional[str], store: Store) -> GerenciarPortfolioUseCase:
    return GerenciarPortfolioUseCase(PortfolioApiGateway(token), store)

def get_gerenciar_avaliacoes_use_case(token: Optional[str], store: Store, produto_id: str) -> GerenciarAvaliacoesUseCase:
    return GerenciarAvaliacoesUseCase(AvaliacaoApiGateway(token), store, produto_id)


# ====================================================================
# Use Cases do Comprador
# ====================================================================

def get_gerenciar_enderecos_use_case(token: Optional[str], store: Store) -> GerenciarEnderecosUseCase:
    return GerenciarEnderecosUseCase(EnderecoApiGateway(token), store, limite=settings.LIMITE_ENDERECOS)

def get_atualizar_perfil_use_case(token: Optional[str], store: Optional[Store] = None) -> AtualizarPerfilUseCase:
    return AtualizarPerfilUseCase(PerfilApiGateway(token), store)

def get_alterar_senha_use_case(token: Optional[str], store: Optional[Store] = None) -> AlterarSenhaUseCase:
    return AlterarSenhaUseCase(PerfilApiGateway(token), store)

def get_realizar_doacao_use_case(token: Optional[str]) -> RealizarDoacaoUseCase:
    return RealizarDoacaoUseCase(DoacaoApiGateway(token))


# ====================================================================
# Use Cases Administrativos
# ====================================================================

def get_gerenciar_pedidos_admin_use_case(token: Optional[str], store: Store) -> GerenciarPedidosAdminUseCase:
    return GerenciarPedidosAdminUseCase(PedidoApiGateway(token), store)


# ====================================================================
# Autenticação (colaborador externo)
# ====================================================================

def get_perfil_gateway(token: Optional[str]) -> PerfilApiGateway:
    return PerfilApiGateway(token)

def get_autenticacao_gateway() -> AutenticacaoGateway:
    return AutenticacaoGateway()


# ====================================================================
# Estado compartilhado entre requisições
# ====================================================================

def get_registro_mutacoes(usuario: str) -> RegistroMutacoesCache:
    return RegistroMutacoesCache(usuario)
