# empowerhub/core/relatorios.py
"""
Agregador de Relatórios.

Deriva estatísticas das listas de pedidos e produtos que já estão em memória
(no Store). Não faz chamadas de rede.

Valores monetários são somados em Decimal com precisão total; o arredondamento
para 2 casas acontece apenas na apresentação (ver `arredondar_moeda`).
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from empowerhub.core.entities import Pedido, Produto, StatusPedido, STATUS_VENDA_EFETIVADA

TOP_N = 5
LIMITE_ESTOQUE_BAIXO = 10

T = TypeVar("T")


class JanelaTempo(str, Enum):
    ALL = "all"
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    LAST_90_DAYS = "last90days"
    LAST_YEAR = "lastYear"


DIAS_POR_JANELA: Dict[JanelaTempo, int] = {
    JanelaTempo.LAST_7_DAYS: 7,
    JanelaTempo.LAST_30_DAYS: 30,
    JanelaTempo.LAST_90_DAYS: 90,
    JanelaTempo.LAST_YEAR: 365,
}


# ====================================================================
# 1. ESTRUTURAS DOS RELATÓRIOS
# ====================================================================

@dataclass
class VendaProduto:
    """Acumulado de vendas de um produto (quantidade e receita)."""
    produto_id: str
    titulo: str
    quantidade: int = 0
    receita: Decimal = Decimal("0")


@dataclass
class LinhaVenda:
    id: Optional[str]
    data: date
    status: str
    status_pagamento: str
    itens: int
    valor: Decimal


@dataclass
class RelatorioVendas:
    janela: JanelaTempo
    linhas: List[LinhaVenda]
    total_vendas: Decimal
    total_pedidos: int
    valor_medio: Decimal
    mais_vendidos: List[VendaProduto]


@dataclass
class LinhaProduto:
    id: Optional[str]
    titulo: str
    categoria: str
    preco: Decimal
    em_estoque: int
    quantidade_vendida: int = 0
    receita: Decimal = Decimal("0")


@dataclass
class RelatorioProdutos:
    janela: JanelaTempo
    linhas: List[LinhaProduto]
    total_estoque: int
    total_itens_vendidos: int
    receita_total: Decimal
    mais_vendidos: List[LinhaProduto]


@dataclass
class ResumoPainel:
    """Métricas do painel administrativo (período atual vs. período anterior)."""
    janela: JanelaTempo
    total_vendas: Decimal
    total_pedidos: int
    valor_medio: Decimal
    # None quando a janela é "all" (não há período anterior)
    crescimento_vendas: Optional[Decimal]
    crescimento_pedidos: Optional[Decimal]
    pedidos_por_status: Dict[str, int] = field(default_factory=dict)
    produtos_estoque_baixo: int = 0
    produtos_sem_estoque: int = 0
    mais_vendidos: List[VendaProduto] = field(default_factory=list)


# ====================================================================
# 2. FUNÇÕES AUXILIARES
# ====================================================================

def arredondar_moeda(valor: Decimal) -> Decimal:
    """Arredonda para 2 casas. Usar só na apresentação."""
    return Decimal(valor).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _utc(momento: datetime) -> datetime:
    # Datas sem fuso vindas da API são tratadas como UTC
    if momento.tzinfo is None:
        return momento.replace(tzinfo=timezone.utc)
    return momento


def data_de_corte(janela: JanelaTempo, agora: Optional[datetime] = None) -> Optional[datetime]:
    """Início da janela (agora - N dias), ou None para "all"."""
    dias = DIAS_POR_JANELA.get(JanelaTempo(janela))
    if dias is None:
        return None
    agora = _utc(agora or datetime.now(timezone.utc))
    return agora - timedelta(days=dias)


def filtrar_por_janela(
    pedidos: Iterable[Pedido],
    janela: JanelaTempo,
    agora: Optional[datetime] = None,
) -> List[Pedido]:
    corte = data_de_corte(janela, agora)
    if corte is None:
        return list(pedidos)
    return [pedido for pedido in pedidos if _utc(pedido.data_pedido) >= corte]


def _top(registros: Iterable[T], chave: Callable[[T], object], n: int = TOP_N) -> List[T]:
    # sorted() é estável mesmo com reverse=True: empates mantêm a ordem de chegada
    return sorted(registros, key=chave, reverse=True)[:n]


def _soma_valores(pedidos: Sequence[Pedido]) -> Decimal:
    return sum((pedido.valor_total for pedido in pedidos), Decimal("0"))


def _media(total: Decimal, quantidade: int) -> Decimal:
    return total / quantidade if quantidade else Decimal("0")


def acumular_vendas_por_produto(pedidos: Iterable[Pedido]) -> Dict[str, VendaProduto]:
    """Quantidade e receita por produto, na ordem em que cada produto aparece."""
    vendas: Dict[str, VendaProduto] = {}
    for pedido in pedidos:
        for item in pedido.itens:
            venda = vendas.get(item.produto_id)
            if venda is None:
                venda = vendas[item.produto_id] = VendaProduto(item.produto_id, item.titulo)
            venda.quantidade += item.quantidade
            venda.receita += item.subtotal
    return vendas


def _crescimento(atual: Decimal, anterior: Decimal) -> Decimal:
    if anterior == 0:
        return Decimal("100")
    return (atual - anterior) / anterior * 100


# ====================================================================
# 3. RELATÓRIOS
# ====================================================================

def gerar_relatorio_vendas(
    pedidos: Iterable[Pedido],
    janela: JanelaTempo = JanelaTempo.ALL,
    agora: Optional[datetime] = None,
) -> RelatorioVendas:
    """Totais de vendas da janela e os 5 produtos mais vendidos (por quantidade)."""
    janela = JanelaTempo(janela)
    filtrados = filtrar_por_janela(pedidos, janela, agora)

    linhas = [
        LinhaVenda(
            id=pedido.id,
            data=_utc(pedido.data_pedido).date(),
            status=pedido.status_pedido,
            status_pagamento=pedido.status_pagamento,
            itens=pedido.quantidade_itens,
            valor=pedido.valor_total,
        )
        for pedido in filtrados
    ]

    total_vendas = _soma_valores(filtrados)
    total_pedidos = len(filtrados)
    vendas = acumular_vendas_por_produto(filtrados)

    return RelatorioVendas(
        janela=janela,
        linhas=linhas,
        total_vendas=total_vendas,
        total_pedidos=total_pedidos,
        valor_medio=_media(total_vendas, total_pedidos),
        mais_vendidos=_top(vendas.values(), lambda venda: venda.quantidade),
    )


def gerar_relatorio_produtos(
    pedidos: Iterable[Pedido],
    produtos: Iterable[Produto],
    janela: JanelaTempo = JanelaTempo.ALL,
    agora: Optional[datetime] = None,
) -> RelatorioProdutos:
    """
    Desempenho por produto. Só pedidos entregues ou confirmados contam como
    venda; itens de produtos que não estão na lista são ignorados.
    """
    janela = JanelaTempo(janela)
    produtos = list(produtos)

    linhas: Dict[str, LinhaProduto] = {}
    for produto in produtos:
        linhas[produto.id] = LinhaProduto(
            id=produto.id,
            titulo=produto.titulo,
            categoria=produto.categoria,
            preco=produto.preco,
            em_estoque=produto.estoque_total,
        )

    for pedido in filtrar_por_janela(pedidos, janela, agora):
        if pedido.status_pedido not in STATUS_VENDA_EFETIVADA:
            continue
        for item in pedido.itens:
            linha = linhas.get(item.produto_id)
            if linha is None:
                continue
            linha.quantidade_vendida += item.quantidade
            linha.receita += item.subtotal

    registros = list(linhas.values())
    return RelatorioProdutos(
        janela=janela,
        linhas=registros,
        total_estoque=sum(produto.estoque_total for produto in produtos),
        total_itens_vendidos=sum(linha.quantidade_vendida for linha in registros),
        receita_total=sum((linha.receita for linha in registros), Decimal("0")),
        mais_vendidos=_top(registros, lambda linha: linha.receita),
    )


def gerar_resumo_painel(
    pedidos: Iterable[Pedido],
    produtos: Iterable[Produto],
    janela: JanelaTempo = JanelaTempo.LAST_30_DAYS,
    agora: Optional[datetime] = None,
) -> ResumoPainel:
    """Métricas do painel: vendas, crescimento vs. período anterior, status e estoque."""
    janela = JanelaTempo(janela)
    pedidos = list(pedidos)
    produtos = list(produtos)
    agora = _utc(agora or datetime.now(timezone.utc))

    atuais = filtrar_por_janela(pedidos, janela, agora)
    total_vendas = _soma_valores(atuais)

    crescimento_vendas = crescimento_pedidos = None
    corte = data_de_corte(janela, agora)
    if corte is not None:
        inicio_anterior = corte - timedelta(days=DIAS_POR_JANELA[janela])
        anteriores = [
            pedido for pedido in pedidos
            if inicio_anterior <= _utc(pedido.data_pedido) < corte
        ]
        crescimento_vendas = _crescimento(total_vendas, _soma_valores(anteriores))
        crescimento_pedidos = _crescimento(Decimal(len(atuais)), Decimal(len(anteriores)))

    por_status = {status.value: 0 for status in StatusPedido}
    for pedido in atuais:
        if pedido.status_pedido in por_status:
            por_status[pedido.status_pedido] += 1

    return ResumoPainel(
        janela=janela,
        total_vendas=total_vendas,
        total_pedidos=len(atuais),
        valor_medio=_media(total_vendas, len(atuais)),
        crescimento_vendas=crescimento_vendas,
        crescimento_pedidos=crescimento_pedidos,
        pedidos_por_status=por_status,
        produtos_estoque_baixo=sum(1 for p in produtos if 0 < p.estoque_total < LIMITE_ESTOQUE_BAIXO),
        produtos_sem_estoque=sum(1 for p in produtos if p.estoque_total <= 0),
        mais_vendidos=_top(acumular_vendas_por_produto(atuais).values(), lambda venda: venda.quantidade),
    )
