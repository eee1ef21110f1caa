# empowerhub/core/store.py
"""
Store de Entidades: cache em memória das listas buscadas na API.

O estado é imutável; cada ação tipada passa pelo redutor puro `reduzir`, que
devolve um novo estado. As listas nunca são corrigidas localmente: após toda
mutação o coordenador recarrega a lista inteira.

Não há instância global: cada sessão/tela cria (ou recebe) o seu Store.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

from empowerhub.core.entities import TipoEntidade

logger = logging.getLogger(__name__)


# ====================================================================
# 1. ESTADO
# ====================================================================

@dataclass(frozen=True)
class ListaEntidade:
    """Uma fatia do estado: os itens de um tipo de entidade."""
    itens: Tuple[Any, ...] = ()
    carregando: bool = False
    erro: Optional[str] = None


@dataclass(frozen=True)
class EstadoEntidades:
    produtos: ListaEntidade = field(default_factory=ListaEntidade)
    enderecos: ListaEntidade = field(default_factory=ListaEntidade)
    pedidos: ListaEntidade = field(default_factory=ListaEntidade)
    portfolio: ListaEntidade = field(default_factory=ListaEntidade)
    avaliacoes: ListaEntidade = field(default_factory=ListaEntidade)
    # Pares (tipo, id) com mutação em andamento; id None = criação
    mutacoes_em_andamento: FrozenSet[Tuple[str, Optional[str]]] = frozenset()

    def lista(self, tipo: TipoEntidade) -> ListaEntidade:
        return getattr(self, tipo.value)


# ====================================================================
# 2. AÇÕES
# ====================================================================

@dataclass(frozen=True)
class CarregamentoIniciado:
    tipo: TipoEntidade


@dataclass(frozen=True)
class ListaCarregada:
    tipo: TipoEntidade
    itens: Tuple[Any, ...]


@dataclass(frozen=True)
class CarregamentoFalhou:
    tipo: TipoEntidade
    mensagem: str


@dataclass(frozen=True)
class MutacaoIniciada:
    tipo: TipoEntidade
    entidade_id: Optional[str] = None


@dataclass(frozen=True)
class MutacaoFinalizada:
    tipo: TipoEntidade
    entidade_id: Optional[str] = None


@dataclass(frozen=True)
class SessaoEncerrada:
    """O usuário perdeu a sessão (401): todo o cache é descartado."""
    pass


Acao = Union[
    CarregamentoIniciado, ListaCarregada, CarregamentoFalhou,
    MutacaoIniciada, MutacaoFinalizada, SessaoEncerrada,
]


# ====================================================================
# 3. REDUTOR
# ====================================================================

def _com_lista(estado: EstadoEntidades, tipo: TipoEntidade, **mudancas) -> EstadoEntidades:
    nova_lista = replace(estado.lista(tipo), **mudancas)
    return replace(estado, **{tipo.value: nova_lista})


def reduzir(estado: EstadoEntidades, acao: Acao) -> EstadoEntidades:
    """Aplica uma ação ao estado e devolve o novo estado (sem efeitos colaterais)."""
    if isinstance(acao, CarregamentoIniciado):
        return _com_lista(estado, acao.tipo, carregando=True, erro=None)

    if isinstance(acao, ListaCarregada):
        return _com_lista(estado, acao.tipo, itens=tuple(acao.itens), carregando=False, erro=None)

    if isinstance(acao, CarregamentoFalhou):
        # Mantém os itens anteriores: uma falha nunca altera a lista local
        return _com_lista(estado, acao.tipo, carregando=False, erro=acao.mensagem)

    if isinstance(acao, MutacaoIniciada):
        chave = (acao.tipo.value, acao.entidade_id)
        return replace(estado, mutacoes_em_andamento=estado.mutacoes_em_andamento | {chave})

    if isinstance(acao, MutacaoFinalizada):
        chave = (acao.tipo.value, acao.entidade_id)
        return replace(estado, mutacoes_em_andamento=estado.mutacoes_em_andamento - {chave})

    if isinstance(acao, SessaoEncerrada):
        return EstadoEntidades()

    raise TypeError(f"Ação desconhecida: {acao!r}")


# ====================================================================
# 4. CONTAINER
# ====================================================================

class Store:
    """
    Container injetável do estado das entidades.

    `registro` (opcional) guarda as mutações em andamento fora do Store, para
    que a guarda de envio duplicado valha entre requisições do mesmo usuário.
    """

    def __init__(self, estado_inicial: Optional[EstadoEntidades] = None, registro=None):
        self._estado = estado_inicial or EstadoEntidades()
        self._assinantes: List[Callable[[EstadoEntidades], None]] = []
        self.registro = registro
        self.montado = True

    @property
    def estado(self) -> EstadoEntidades:
        return self._estado

    def despachar(self, acao: Acao) -> bool:
        """
        Aplica a ação e notifica os assinantes.
        Retorna False se o Store já foi desmontado (o resultado é descartado).
        """
        if not self.montado:
            logger.debug("Store desmontado; ação ignorada: %r", acao)
            return False
        self._estado = reduzir(self._estado, acao)
        for assinante in list(self._assinantes):
            assinante(self._estado)
        return True

    def assinar(self, assinante: Callable[[EstadoEntidades], None]) -> Callable[[], None]:
        """Registra um assinante e retorna a função que cancela a assinatura."""
        self._assinantes.append(assinante)

        def cancelar():
            if assinante in self._assinantes:
                self._assinantes.remove(assinante)

        return cancelar

    def desmontar(self):
        """A tela foi fechada: respostas que chegarem depois serão ignoradas."""
        self.montado = False
        self._assinantes.clear()

    def itens(self, tipo: TipoEntidade) -> Sequence[Any]:
        return self._estado.lista(tipo).itens

    def mutacao_em_andamento(self, tipo: TipoEntidade, entidade_id: Optional[str] = None) -> bool:
        return (tipo.value, entidade_id) in self._estado.mutacoes_em_andamento

    def reservar_mutacao(self, tipo: TipoEntidade, entidade_id: Optional[str] = None) -> bool:
        """Marca a mutação como em andamento. False se já houver uma para a mesma entidade."""
        if self.mutacao_em_andamento(tipo, entidade_id):
            return False
        if self.registro is not None and not self.registro.reservar(tipo.value, entidade_id):
            return False
        self.despachar(MutacaoIniciada(tipo, entidade_id))
        return True

    def liberar_mutacao(self, tipo: TipoEntidade, entidade_id: Optional[str] = None):
        self.despachar(MutacaoFinalizada(tipo, entidade_id))
        if self.registro is not None:
            self.registro.liberar(tipo.value, entidade_id)
