# empowerhub/core/testes_relatorios.py

import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from empowerhub.core.entities import ItemPedido, Pedido, Produto
from empowerhub.core.relatorios import (
    JanelaTempo,
    arredondar_moeda,
    data_de_corte,
    filtrar_por_janela,
    gerar_relatorio_produtos,
    gerar_relatorio_vendas,
    gerar_resumo_painel,
)

AGORA = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def pedido(pedido_id, valor, dias_atras=1, status="delivered", itens=None):
    return Pedido(
        id=pedido_id,
        itens=itens or [],
        valor_total=Decimal(valor),
        status_pedido=status,
        data_pedido=AGORA - timedelta(days=dias_atras),
    )


def item(produto_id, quantidade, preco):
    return ItemPedido(produto_id=produto_id, quantidade=quantidade, preco_unitario=Decimal(preco))


def produto(produto_id, preco="10", estoque=20):
    return Produto(
        id=produto_id, titulo=f"Produto {produto_id}", descricao="Descrição longa",
        categoria="handcraft", subcategoria="handcraft-decor",
        preco=Decimal(preco), estoque_total=estoque,
    )


class TestJanelaTempo(unittest.TestCase):

    def test_corte(self):
        self.assertIsNone(data_de_corte(JanelaTempo.ALL, AGORA))
        self.assertEqual(data_de_corte(JanelaTempo.LAST_7_DAYS, AGORA), AGORA - timedelta(days=7))
        self.assertEqual(data_de_corte("lastYear", AGORA), AGORA - timedelta(days=365))

    def test_datas_sem_fuso_sao_utc(self):
        sem_fuso = Pedido(
            id="o1", itens=[], valor_total=Decimal("1"), status_pedido="pending",
            data_pedido=datetime(2024, 6, 29, 12, 0),
        )

        self.assertEqual(len(filtrar_por_janela([sem_fuso], JanelaTempo.LAST_7_DAYS, AGORA)), 1)


class TestRelatorioVendas(unittest.TestCase):

    def test_totais_da_janela(self):
        """
        Cenário: dois pedidos (100 e 50) nos últimos 7 dias e um mais antigo.
        """
        # ARRANGE
        pedidos = [pedido("o1", "100", 2), pedido("o2", "50", 3), pedido("o3", "999", 40)]

        # ACT
        relatorio = gerar_relatorio_vendas(pedidos, JanelaTempo.LAST_7_DAYS, agora=AGORA)

        # ASSERT
        self.assertEqual(relatorio.total_vendas, Decimal("150"))
        self.assertEqual(relatorio.total_pedidos, 2)
        self.assertEqual(relatorio.valor_medio, Decimal("75"))
        self.assertEqual([linha.id for linha in relatorio.linhas], ["o1", "o2"])

    def test_sem_pedidos(self):
        relatorio = gerar_relatorio_vendas([], JanelaTempo.ALL, agora=AGORA)

        self.assertEqual(relatorio.total_vendas, Decimal("0"))
        self.assertEqual(relatorio.valor_medio, Decimal("0"))
        self.assertEqual(relatorio.mais_vendidos, [])

    def test_top_5_por_quantidade_com_desempate_estavel(self):
        """Cenário: seis produtos vendidos; só cinco aparecem, na ordem certa."""
        itens = [
            item("a", 1, "10"), item("b", 5, "10"), item("c", 3, "10"),
            item("d", 3, "10"), item("e", 2, "10"), item("f", 4, "10"),
        ]
        relatorio = gerar_relatorio_vendas([pedido("o1", "180", itens=itens)], agora=AGORA)

        self.assertEqual([v.produto_id for v in relatorio.mais_vendidos], ["b", "f", "c", "d", "e"])
        self.assertEqual(relatorio.mais_vendidos[0].receita, Decimal("50"))


class TestRelatorioProdutos(unittest.TestCase):

    def test_so_pedidos_entregues_ou_confirmados_contam(self):
        """
        Cenário: pedido entregue com 2 unidades a 10 e pedido pendente com 5
        unidades do mesmo produto. Só o entregue conta.
        """
        pedidos = [
            pedido("o1", "20", status="delivered", itens=[item("p1", 2, "10")]),
            pedido("o2", "50", status="pending", itens=[item("p1", 5, "10")]),
        ]

        relatorio = gerar_relatorio_produtos(pedidos, [produto("p1")], agora=AGORA)

        linha = relatorio.linhas[0]
        self.assertEqual(linha.quantidade_vendida, 2)
        self.assertEqual(linha.receita, Decimal("20"))
        self.assertEqual(relatorio.receita_total, Decimal("20"))

    def test_produto_desconhecido_e_ignorado(self):
        pedidos = [pedido("o1", "30", status="confirmed", itens=[item("x", 3, "10")])]

        relatorio = gerar_relatorio_produtos(pedidos, [produto("p1", estoque=7)], agora=AGORA)

        self.assertEqual(relatorio.total_itens_vendidos, 0)
        self.assertEqual(relatorio.total_estoque, 7)
        self.assertEqual([linha.id for linha in relatorio.linhas], ["p1"])

    def test_top_5_por_receita(self):
        produtos = [produto(f"p{i}") for i in range(6)]
        itens = [item(f"p{i}", i + 1, "10") for i in range(6)]

        relatorio = gerar_relatorio_produtos([pedido("o1", "210", itens=itens)], produtos, agora=AGORA)

        self.assertEqual([linha.id for linha in relatorio.mais_vendidos], ["p5", "p4", "p3", "p2", "p1"])


class TestResumoPainel(unittest.TestCase):

    def test_crescimento_e_estoque(self):
        # ARRANGE
        pedidos = [
            pedido("o1", "200", dias_atras=5, status="pending"),
            pedido("o2", "100", dias_atras=10, status="delivered"),
            pedido("o3", "100", dias_atras=40, status="delivered"),
        ]
        produtos = [produto("p1", estoque=0), produto("p2", estoque=5), produto("p3", estoque=50)]

        # ACT
        resumo = gerar_resumo_painel(pedidos, produtos, JanelaTempo.LAST_30_DAYS, agora=AGORA)

        # ASSERT
        self.assertEqual(resumo.total_vendas, Decimal("300"))
        self.assertEqual(resumo.crescimento_vendas, Decimal("200"))
        self.assertEqual(resumo.crescimento_pedidos, Decimal("100"))
        self.assertEqual(resumo.pedidos_por_status["pending"], 1)
        self.assertEqual(resumo.pedidos_por_status["delivered"], 1)
        self.assertEqual(resumo.pedidos_por_status["rejected"], 0)
        self.assertEqual(resumo.produtos_sem_estoque, 1)
        self.assertEqual(resumo.produtos_estoque_baixo, 1)

    def test_sem_periodo_anterior(self):
        resumo = gerar_resumo_painel([pedido("o1", "10")], [], JanelaTempo.LAST_7_DAYS, agora=AGORA)

        self.assertEqual(resumo.crescimento_vendas, Decimal("100"))

    def test_janela_total_nao_tem_crescimento(self):
        resumo = gerar_resumo_painel([pedido("o1", "10")], [], JanelaTempo.ALL, agora=AGORA)

        self.assertIsNone(resumo.crescimento_vendas)
        self.assertIsNone(resumo.crescimento_pedidos)


class TestArredondamento(unittest.TestCase):

    def test_arredonda_meio_para_cima(self):
        self.assertEqual(arredondar_moeda(Decimal("2.675")), Decimal("2.68"))
        self.assertEqual(arredondar_moeda(Decimal("100") / 3), Decimal("33.33"))


if __name__ == '__main__':
    unittest.main()
