from rest_framework import serializers

from empowerhub.core.entities import Doacao
from empowerhub.core.relatorios import arredondar_moeda
from empowerhub.core.validacao import como_decimal


class MoedaField(serializers.Field):
    """Valor monetário arredondado para 2 casas (só na saída)."""

    def __init__(self, **kwargs):
        kwargs.setdefault('read_only', True)
        super().__init__(**kwargs)

    def to_representation(self, valor):
        return str(arredondar_moeda(valor))


class PercentualField(MoedaField):
    def to_representation(self, valor):
        if valor is None:
            return None
        return super().to_representation(valor)


# ====================================================================
# SERIALIZERS DAS ENTIDADES
# ====================================================================

class ProdutoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    title = serializers.CharField(source='titulo')
    description = serializers.CharField(source='descricao')
    category = serializers.CharField(source='categoria')
    subcategory = serializers.CharField(source='subcategoria')
    price = MoedaField(source='preco')
    salePrice = MoedaField(source='preco_promocional')
    effectivePrice = MoedaField(source='preco_efetivo')
    onSale = serializers.BooleanField(source='em_promocao', read_only=True)
    totalStock = serializers.IntegerField(source='estoque_total')
    image = serializers.CharField(source='imagem', allow_null=True)


class EnderecoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    userId = serializers.CharField(source='usuario_id', allow_null=True)
    address = serializers.CharField(source='endereco')
    city = serializers.CharField(source='cidade')
    phone = serializers.CharField(source='telefone')
    pincode = serializers.CharField(source='cep')
    notes = serializers.CharField(source='observacoes')


class ItemPedidoSerializer(serializers.Serializer):
    productId = serializers.CharField(source='produto_id')
    title = serializers.CharField(source='titulo')
    quantity = serializers.IntegerField(source='quantidade')
    price = MoedaField(source='preco_unitario')
    subtotal = MoedaField()


class PedidoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    userId = serializers.CharField(source='usuario_id', allow_null=True)
    cartItems = ItemPedidoSerializer(source='itens', many=True)
    totalAmount = MoedaField(source='valor_total')
    orderStatus = serializers.CharField(source='status_pedido')
    paymentStatus = serializers.CharField(source='status_pagamento')
    orderDate = serializers.DateTimeField(source='data_pedido')


class ItemPortfolioSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(source='nome')
    description = serializers.CharField(source='descricao')
    price = MoedaField(source='preco')
    image = serializers.CharField(source='imagem')
    category = serializers.CharField(source='categoria')
    craftType = serializers.CharField(source='tipo_artesanato')
    materials = serializers.ListField(source='materiais', child=serializers.CharField())
    rating = serializers.DecimalField(source='avaliacao', max_digits=3, decimal_places=1)
    reviews = serializers.IntegerField(source='avaliacoes')
    sold = serializers.IntegerField(source='vendidos')


class AvaliacaoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    productId = serializers.CharField(source='produto_id')
    userId = serializers.CharField(source='usuario_id')
    userName = serializers.CharField(source='nome_usuario')
    reviewMessage = serializers.CharField(source='mensagem')
    reviewValue = serializers.IntegerField(source='nota')


class PerfilSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    userName = serializers.CharField(source='nome_usuario')
    email = serializers.CharField()
    phone = serializers.CharField(source='telefone')
    bio = serializers.CharField()
    location = serializers.CharField(source='localizacao')
    interestedCategories = serializers.SerializerMethodField()
    notifications = serializers.SerializerMethodField()

    def get_interestedCategories(self, perfil):
        return sorted(perfil.categorias_interesse)

    def get_notifications(self, perfil):
        return {
            'email': perfil.notificar_email,
            'sms': perfil.notificar_sms,
            'offers': perfil.notificar_ofertas,
        }


# ====================================================================
# SERIALIZERS DOS RELATÓRIOS
# ====================================================================

class VendaProdutoSerializer(serializers.Serializer):
    productId = serializers.CharField(source='produto_id')
    title = serializers.CharField(source='titulo')
    quantity = serializers.IntegerField(source='quantidade')
    revenue = MoedaField(source='receita')


class LinhaVendaSerializer(serializers.Serializer):
    id = serializers.CharField()
    date = serializers.DateField(source='data')
    status = serializers.CharField()
    paymentStatus = serializers.CharField(source='status_pagamento')
    items = serializers.IntegerField(source='itens')
    amount = MoedaField(source='valor')


class RelatorioVendasSerializer(serializers.Serializer):
    timeframe = serializers.CharField(source='janela.value')
    orders = LinhaVendaSerializer(source='linhas', many=True)
    totalSales = MoedaField(source='total_vendas')
    totalOrders = serializers.IntegerField(source='total_pedidos')
    averageOrderValue = MoedaField(source='valor_medio')
    topProducts = VendaProdutoSerializer(source='mais_vendidos', many=True)


class LinhaProdutoSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField(source='titulo')
    category = serializers.CharField(source='categoria')
    price = MoedaField(source='preco')
    inStock = serializers.IntegerField(source='em_estoque')
    quantitySold = serializers.IntegerField(source='quantidade_vendida')
    revenue = MoedaField(source='receita')


class RelatorioProdutosSerializer(serializers.Serializer):
    timeframe = serializers.CharField(source='janela.value')
    products = LinhaProdutoSerializer(source='linhas', many=True)
    totalInventory = serializers.IntegerField(source='total_estoque')
    totalSoldItems = serializers.IntegerField(source='total_itens_vendidos')
    totalRevenue = MoedaField(source='receita_total')
    topProducts = LinhaProdutoSerializer(source='mais_vendidos', many=True)


class ResumoPainelSerializer(serializers.Serializer):
    timeframe = serializers.CharField(source='janela.value')
    totalSales = MoedaField(source='total_vendas')
    totalOrders = serializers.IntegerField(source='total_pedidos')
    averageOrderValue = MoedaField(source='valor_medio')
    salesGrowth = PercentualField(source='crescimento_vendas')
    ordersGrowth = PercentualField(source='crescimento_pedidos')
    ordersByStatus = serializers.DictField(source='pedidos_por_status', child=serializers.IntegerField())
    lowStockProducts = serializers.IntegerField(source='produtos_estoque_baixo')
    outOfStockProducts = serializers.IntegerField(source='produtos_sem_estoque')
    topProducts = VendaProdutoSerializer(source='mais_vendidos', many=True)


# ====================================================================
# SERIALIZERS DE ENTRADA
# ====================================================================

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()


class ProcessarDoacaoSerializer(serializers.Serializer):
    """
    Dados enviados depois que o provedor confirmou o cartão no navegador.
    O valor é validado pelo Core, não aqui.
    """
    paymentIntentId = serializers.CharField()
    sellerId = serializers.CharField()
    buyerId = serializers.CharField(required=False)
    buyerEmail = serializers.EmailField(required=False, allow_blank=True)
    amount = serializers.CharField()
    message = serializers.CharField(required=False, allow_blank=True, default='')

    def to_doacao_entity(self, comprador_id: str) -> Doacao:
        dados = self.validated_data
        return Doacao(
            vendedor_id=dados['sellerId'],
            comprador_id=dados.get('buyerId') or comprador_id,
            valor=como_decimal(dados['amount']),
            mensagem=dados.get('message', ''),
            comprador_email=dados.get('buyerEmail') or None,
            intencao_id=dados['paymentIntentId'],
        )
