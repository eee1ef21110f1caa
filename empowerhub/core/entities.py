from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, FrozenSet

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros, como consumidos da API externa.
# ====================================================================

class CategoriaProduto(str, Enum):
    """Categorias fechadas do catálogo."""
    MEN = "men"
    WOMEN = "women"
    KIDS = "kids"
    ACCESSORIES = "accessories"
    FOOTWEAR = "footwear"
    AGRICULTURE = "agriculture"
    HEALTHCARE = "healthcare"
    HANDCRAFT = "handcraft"


# Tabela estática categoria -> subcategorias (id, rótulo)
SUBCATEGORIAS: Dict[CategoriaProduto, Dict[str, str]] = {
    CategoriaProduto.MEN: {"clothes-men": "Men's Clothes"},
    CategoriaProduto.WOMEN: {"clothes-women": "Women's Clothes"},
    CategoriaProduto.KIDS: {"clothes-kids": "Kids' Clothes"},
    CategoriaProduto.ACCESSORIES: {
        "accessories-watches": "Watches",
        "accessories-bags": "Bags",
    },
    CategoriaProduto.FOOTWEAR: {
        "footwear-casual": "Casual Shoes",
        "footwear-formal": "Formal Shoes",
    },
    CategoriaProduto.AGRICULTURE: {
        "agriculture-organic": "Organic Products",
        "agriculture-seeds": "Seeds & Seedlings",
        "agriculture-tools": "Farming Tools",
        "agriculture-fertilizers": "Natural Fertilizers",
    },
    CategoriaProduto.HEALTHCARE: {
        "healthcare-herbal": "Herbal Remedies",
        "healthcare-wellness": "Wellness Products",
        "healthcare-personal": "Personal Care",
        "healthcare-hygiene": "Hygiene Products",
    },
    CategoriaProduto.HANDCRAFT: {
        "handcraft-pottery": "Pottery & Ceramics",
        "handcraft-textiles": "Handwoven Textiles",
        "handcraft-jewelry": "Handmade Jewelry",
        "handcraft-decor": "Home Decor Items",
    },
}


def subcategorias_de(categoria: str) -> Dict[str, str]:
    """Retorna as subcategorias de uma categoria (vazio se a categoria não existir)."""
    try:
        return SUBCATEGORIAS[CategoriaProduto(categoria)]
    except ValueError:
        return {}


class StatusPedido(str, Enum):
    """Status possíveis de um pedido."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROCESS = "inProcess"
    IN_SHIPPING = "inShipping"
    DELIVERED = "delivered"
    REJECTED = "rejected"


# Pedidos que contam como venda efetivada no relatório de produtos
STATUS_VENDA_EFETIVADA: FrozenSet[str] = frozenset({
    StatusPedido.DELIVERED.value,
    StatusPedido.CONFIRMED.value,
})


class CategoriaPortfolio(str, Enum):
    """Abas da vitrine do vendedor."""
    TOP_RATED = "topRated"
    BEST_SELLING = "bestSelling"
    SPECIAL_COLLECTION = "specialCollection"


class TipoEntidade(str, Enum):
    """Listas mantidas pelo Store."""
    PRODUTOS = "produtos"
    ENDERECOS = "enderecos"
    PEDIDOS = "pedidos"
    PORTFOLIO = "portfolio"
    AVALIACOES = "avaliacoes"


@dataclass
class Produto:
    """Entidade do Produto à venda no marketplace."""
    titulo: str
    descricao: str
    categoria: str
    subcategoria: str
    preco: Decimal
    estoque_total: int
    preco_promocional: Decimal = Decimal("0")
    imagem: Optional[str] = None
    id: Optional[str] = None

    @property
    def em_promocao(self) -> bool:
        return bool(self.preco_promocional) and self.preco_promocional < self.preco

    @property
    def preco_efetivo(self) -> Decimal:
        """Preço cobrado: o promocional, quando houver."""
        return self.preco_promocional if self.em_promocao else self.preco


@dataclass
class Endereco:
    """Entidade do Endereço de entrega do usuário."""
    endereco: str
    cidade: str
    telefone: str
    cep: str
    observacoes: str = ""
    usuario_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class ItemPedido:
    """Snapshot de um item no momento da compra."""
    produto_id: str
    quantidade: int
    preco_unitario: Decimal
    titulo: str = ""

    @property
    def subtotal(self) -> Decimal:
        return self.preco_unitario * self.quantidade


@dataclass
class Pedido:
    """Entidade do Pedido de Venda."""
    itens: List[ItemPedido]
    valor_total: Decimal
    status_pedido: str
    data_pedido: datetime
    status_pagamento: str = "pending"
    usuario_id: Optional[str] = None
    id: Optional[str] = None

    @property
    def quantidade_itens(self) -> int:
        return sum(item.quantidade for item in self.itens)

    @property
    def total_calculado(self) -> Decimal:
        """Soma dos itens. Não é comparada com valor_total no cliente."""
        return sum((item.subtotal for item in self.itens), Decimal("0"))


@dataclass
class ItemPortfolio:
    """Entrada da vitrine (portfólio) de um vendedor."""
    nome: str
    descricao: str
    preco: Decimal
    imagem: str
    categoria: str
    tipo_artesanato: str
    materiais: List[str] = field(default_factory=list)
    avaliacao: Decimal = Decimal("0")
    avaliacoes: int = 0
    vendidos: int = 0
    id: Optional[str] = None


@dataclass
class PerfilUsuario:
    """Dados de perfil editáveis pelo próprio usuário."""
    nome_usuario: str
    email: str
    telefone: str = ""
    bio: str = ""
    localizacao: str = ""
    categorias_interesse: FrozenSet[str] = frozenset()
    notificar_email: bool = True
    notificar_sms: bool = False
    notificar_ofertas: bool = True
    id: Optional[str] = None


@dataclass
class IntencaoPagamento:
    """Intenção de pagamento criada pelo provedor de cartão."""
    id: str
    client_secret: str


@dataclass
class Doacao:
    """Doação (gorjeta) de um comprador para um vendedor."""
    vendedor_id: str
    comprador_id: str
    valor: Decimal
    mensagem: str = ""
    comprador_email: Optional[str] = None
    intencao_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class Avaliacao:
    """Avaliação (nota de 1 a 5 e comentário) de um produto comprado."""
    produto_id: str
    usuario_id: str
    nota: int
    mensagem: str
    nome_usuario: str = ""
    id: Optional[str] = None


@dataclass
class Elegibilidade:
    """Resposta à pergunta "este usuário pode avaliar este produto?"."""
    pode_avaliar: bool
    mensagem: str = ""
