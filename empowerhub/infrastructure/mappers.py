"""
Mapeadores (Mappers) para converter entre:
1. Documentos JSON da API do marketplace (camelCase, `_id`)
2. Entidades de Domínio (empowerhub.core.entities)
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from empowerhub.core.entities import (
    Avaliacao,
    Doacao,
    Endereco,
    IntencaoPagamento,
    ItemPedido,
    ItemPortfolio,
    Pedido,
    PerfilUsuario,
    Produto,
)
from empowerhub.core.exceptions import FalhaRequisicaoError

logger = logging.getLogger(__name__)


def para_decimal(valor: Any, padrao: Decimal = Decimal("0")) -> Decimal:
    """Converte números do JSON para Decimal passando por str (evita ruído de float)."""
    if valor is None or valor == "":
        return padrao
    try:
        return Decimal(str(valor))
    except InvalidOperation:
        return padrao


def para_inteiro(valor: Any, padrao: int = 0) -> int:
    try:
        return int(valor)
    except (TypeError, ValueError):
        return padrao


def para_data(valor: Any) -> datetime:
    """
    Datas ISO-8601 da API. Sem data, usa o instante atual.
    Data em outro formato é resposta inválida do servidor (FalhaRequisicaoError 502).
    """
    if isinstance(valor, datetime):
        return valor
    if not valor:
        return datetime.now(timezone.utc)
    try:
        return datetime.fromisoformat(str(valor).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Data fora do padrão ISO-8601 na resposta da API: %r", valor)
        raise FalhaRequisicaoError(502, f"The server returned an invalid date: {valor}")


def _id(dados: Dict[str, Any]) -> Optional[str]:
    identificador = dados.get("_id", dados.get("id"))
    return str(identificador) if identificador is not None else None


class ProdutoMapper:
    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> Produto:
        return Produto(
            id=_id(dados),
            titulo=dados.get("title", ""),
            descricao=dados.get("description", ""),
            categoria=dados.get("category", ""),
            subcategoria=dados.get("subcategory", ""),
            preco=para_decimal(dados.get("price")),
            preco_promocional=para_decimal(dados.get("salePrice")),
            estoque_total=para_inteiro(dados.get("totalStock")),
            imagem=dados.get("image"),
        )


class EnderecoMapper:
    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> Endereco:
        return Endereco(
            id=_id(dados),
            usuario_id=dados.get("userId"),
            endereco=dados.get("address", ""),
            cidade=dados.get("city", ""),
            telefone=dados.get("phone", ""),
            cep=dados.get("pincode", ""),
            observacoes=dados.get("notes", ""),
        )


class PedidoMapper:
    @staticmethod
    def item_to_entity(dados: Dict[str, Any]) -> ItemPedido:
        return ItemPedido(
            produto_id=str(dados.get("productId", "")),
            titulo=dados.get("title", ""),
            quantidade=para_inteiro(dados.get("quantity")),
            preco_unitario=para_decimal(dados.get("price")),
        )

    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> Pedido:
        return Pedido(
            id=_id(dados),
            usuario_id=dados.get("userId"),
            itens=[PedidoMapper.item_to_entity(item) for item in dados.get("cartItems") or []],
            valor_total=para_decimal(dados.get("totalAmount")),
            status_pedido=dados.get("orderStatus", "pending"),
            status_pagamento=dados.get("paymentStatus", "pending"),
            data_pedido=para_data(dados.get("orderDate")),
        )


class PortfolioMapper:
    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> ItemPortfolio:
        return ItemPortfolio(
            id=_id(dados),
            nome=dados.get("name", ""),
            descricao=dados.get("description", ""),
            preco=para_decimal(dados.get("price")),
            imagem=dados.get("image", ""),
            categoria=dados.get("category", ""),
            tipo_artesanato=dados.get("craftType", ""),
            materiais=list(dados.get("materials") or []),
            avaliacao=para_decimal(dados.get("rating")),
            avaliacoes=para_inteiro(dados.get("reviews")),
            vendidos=para_inteiro(dados.get("sold")),
        )


class PerfilMapper:
    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> PerfilUsuario:
        notificacoes = dados.get("notifications") or {}
        return PerfilUsuario(
            id=_id(dados),
            nome_usuario=dados.get("userName", ""),
            email=dados.get("email", ""),
            telefone=dados.get("phone", ""),
            bio=dados.get("bio", ""),
            localizacao=dados.get("location", ""),
            categorias_interesse=frozenset(dados.get("interestedCategories") or []),
            notificar_email=bool(notificacoes.get("email", True)),
            notificar_sms=bool(notificacoes.get("sms", False)),
            notificar_ofertas=bool(notificacoes.get("offers", True)),
        )


class DoacaoMapper:
    @staticmethod
    def intencao_to_entity(dados: Dict[str, Any]) -> IntencaoPagamento:
        return IntencaoPagamento(
            id=dados.get("paymentIntentId", ""),
            client_secret=dados.get("clientSecret", ""),
        )

    @staticmethod
    def to_payload(doacao: Doacao) -> Dict[str, Any]:
        # O provedor de pagamento espera o valor como número JSON
        return {
            "paymentIntentId": doacao.intencao_id,
            "sellerId": doacao.vendedor_id,
            "buyerId": doacao.comprador_id,
            "buyerEmail": doacao.comprador_email,
            "amount": float(doacao.valor),
            "message": doacao.mensagem,
        }

    @staticmethod
    def to_entity(dados: Dict[str, Any], original: Doacao) -> Doacao:
        return Doacao(
            id=_id(dados),
            vendedor_id=dados.get("sellerId", original.vendedor_id),
            comprador_id=dados.get("buyerId", original.comprador_id),
            valor=para_decimal(dados.get("amount"), padrao=original.valor),
            mensagem=dados.get("message", original.mensagem),
            comprador_email=dados.get("buyerEmail", original.comprador_email),
            intencao_id=dados.get("paymentIntentId", original.intencao_id),
        )


class AvaliacaoMapper:
    @staticmethod
    def to_entity(dados: Dict[str, Any]) -> Avaliacao:
        return Avaliacao(
            id=_id(dados),
            produto_id=str(dados.get("productId", "")),
            usuario_id=str(dados.get("userId", "")),
            nome_usuario=dados.get("userName", ""),
            mensagem=dados.get("reviewMessage", ""),
            nota=para_inteiro(dados.get("reviewValue")),
        )
