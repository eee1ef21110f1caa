# empowerhub/core/testes.py

import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock

from empowerhub.core.entities import (
    Avaliacao,
    Doacao,
    Elegibilidade,
    Endereco,
    IntencaoPagamento,
    ItemPedido,
    Pedido,
    PerfilUsuario,
    Produto,
    TipoEntidade,
)
from empowerhub.core.exceptions import (
    DoacaoFalhouError,
    ErroRedeError,
    FalhaRequisicaoError,
    ItemNaoEncontradoError,
    LimiteEnderecosError,
    NaoAutorizadoError,
    OperacaoEmAndamentoError,
    StatusInvalidoError,
    ValidacaoError,
)
from empowerhub.core.store import (
    CarregamentoFalhou,
    CarregamentoIniciado,
    EstadoEntidades,
    ListaCarregada,
    MutacaoIniciada,
    SessaoEncerrada,
    Store,
    reduzir,
)
from empowerhub.core.use_cases import (
    AlterarSenhaUseCase,
    AtualizarPerfilUseCase,
    GerenciarAvaliacoesUseCase,
    GerenciarEnderecosUseCase,
    GerenciarPedidosAdminUseCase,
    GerenciarProdutosUseCase,
    RealizarDoacaoUseCase,
)


def fazer_endereco(endereco_id):
    return Endereco(
        id=endereco_id, endereco="12 Temple Road", cidade="Kandy",
        telefone="0771234567", cep="20000",
    )


def fazer_produto(produto_id="p1", **mudancas):
    dados = dict(
        id=produto_id, titulo="Clay pot", descricao="Traditional clay pot",
        categoria="handcraft", subcategoria="handcraft-pottery",
        preco=Decimal("100"), estoque_total=5,
    )
    dados.update(mudancas)
    return Produto(**dados)


def fazer_pedido(pedido_id, status="pending"):
    return Pedido(
        id=pedido_id,
        itens=[ItemPedido(produto_id="p1", quantidade=1, preco_unitario=Decimal("100"))],
        valor_total=Decimal("100"),
        status_pedido=status,
        data_pedido=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


DADOS_ENDERECO = {
    "address": "45 Lake Drive",
    "city": "Colombo",
    "phone": "0771234567",
    "pincode": "00100",
    "notes": "",
}

DADOS_PRODUTO = {
    "title": "Clay pot",
    "description": "Traditional clay pot fired in a kiln.",
    "category": "handcraft",
    "subcategory": "handcraft-pottery",
    "price": "100",
    "salePrice": "80",
    "totalStock": "5",
    "image": "https://cdn.example.com/pot.png",
}


# ====================================================================
# STORE
# ====================================================================

class TestStore(unittest.TestCase):

    def test_redutor_nao_altera_o_estado_anterior(self):
        estado = EstadoEntidades()

        novo = reduzir(estado, ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto(),)))

        self.assertEqual(estado.produtos.itens, ())
        self.assertEqual(len(novo.produtos.itens), 1)

    def test_falha_de_carregamento_mantem_itens(self):
        """Cenário: uma recarga que falha não apaga a lista que já estava na tela."""
        estado = reduzir(EstadoEntidades(), ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto(),)))
        estado = reduzir(estado, CarregamentoIniciado(TipoEntidade.PRODUTOS))

        estado = reduzir(estado, CarregamentoFalhou(TipoEntidade.PRODUTOS, "offline"))

        self.assertEqual(len(estado.produtos.itens), 1)
        self.assertFalse(estado.produtos.carregando)
        self.assertEqual(estado.produtos.erro, "offline")

    def test_sessao_encerrada_limpa_tudo(self):
        estado = reduzir(EstadoEntidades(), ListaCarregada(TipoEntidade.ENDERECOS, (fazer_endereco("a1"),)))
        estado = reduzir(estado, MutacaoIniciada(TipoEntidade.ENDERECOS, "a1"))

        self.assertEqual(reduzir(estado, SessaoEncerrada()), EstadoEntidades())

    def test_acao_desconhecida(self):
        with self.assertRaises(TypeError):
            reduzir(EstadoEntidades(), object())

    def test_assinantes_e_desmontagem(self):
        store = Store()
        recebidos = []
        cancelar = store.assinar(recebidos.append)

        store.despachar(CarregamentoIniciado(TipoEntidade.PEDIDOS))
        cancelar()
        store.despachar(CarregamentoFalhou(TipoEntidade.PEDIDOS, "x"))
        store.desmontar()
        aplicada = store.despachar(ListaCarregada(TipoEntidade.PEDIDOS, (fazer_pedido("o1"),)))

        self.assertEqual(len(recebidos), 1)
        self.assertFalse(aplicada)
        self.assertEqual(store.itens(TipoEntidade.PEDIDOS), ())


# ====================================================================
# COORDENADOR DE SINCRONIZAÇÃO
# ====================================================================

class TestGerenciarEnderecos(unittest.TestCase):

    def setUp(self):
        self.api_mock = Mock()
        self.store = Store()
        self.use_case = GerenciarEnderecosUseCase(self.api_mock, self.store, limite=3)

    def test_quarto_endereco_e_rejeitado_sem_chamada_de_rede(self):
        """
        Cenário: o comprador já tem 3 endereços e tenta cadastrar o quarto.
        """
        # ARRANGE
        self.api_mock.listar.return_value = [fazer_endereco(f"a{i}") for i in range(3)]
        self.use_case.recarregar()
        self.api_mock.reset_mock()

        # ACT / ASSERT
        with self.assertRaises(LimiteEnderecosError) as ctx:
            self.use_case.criar(DADOS_ENDERECO)

        self.assertEqual(ctx.exception.message, "You can add a maximum of 3 addresses.")
        self.api_mock.criar.assert_not_called()
        self.api_mock.listar.assert_not_called()

    def test_limite_vale_antes_da_validacao(self):
        self.api_mock.listar.return_value = [fazer_endereco(f"a{i}") for i in range(3)]
        self.use_case.recarregar()

        with self.assertRaises(LimiteEnderecosError):
            self.use_case.criar({})

    def test_criar_recarrega_a_lista_inteira(self):
        # ARRANGE
        self.api_mock.listar.return_value = [fazer_endereco("a1"), fazer_endereco("a2")]

        # ACT
        self.use_case.criar(DADOS_ENDERECO)

        # ASSERT
        self.api_mock.criar.assert_called_once_with(DADOS_ENDERECO)
        self.api_mock.listar.assert_called_once()
        self.assertEqual([e.id for e in self.store.itens(TipoEntidade.ENDERECOS)], ["a1", "a2"])
        self.assertFalse(self.store.mutacao_em_andamento(TipoEntidade.ENDERECOS))

    def test_dados_invalidos_nao_chegam_a_rede(self):
        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.criar(dict(DADOS_ENDERECO, city="123"))

        self.assertIn("city", ctx.exception.erros)
        self.api_mock.criar.assert_not_called()

    def test_falha_na_mutacao_nao_altera_a_lista(self):
        """Cenário: a API recusa a atualização; a lista local continua igual e não há recarga."""
        self.api_mock.listar.return_value = [fazer_endereco("a1")]
        self.use_case.recarregar()
        self.api_mock.listar.reset_mock()
        self.api_mock.atualizar.side_effect = FalhaRequisicaoError(500, "boom")

        with self.assertRaises(FalhaRequisicaoError):
            self.use_case.atualizar("a1", {"city": "Galle"})

        self.api_mock.listar.assert_not_called()
        self.assertEqual(self.store.itens(TipoEntidade.ENDERECOS)[0].cidade, "Kandy")
        self.assertFalse(self.store.mutacao_em_andamento(TipoEntidade.ENDERECOS, "a1"))

    def test_envio_duplicado_e_bloqueado(self):
        self.store.despachar(MutacaoIniciada(TipoEntidade.ENDERECOS, "a1"))

        with self.assertRaises(OperacaoEmAndamentoError):
            self.use_case.deletar("a1")

        self.api_mock.deletar.assert_not_called()

    def test_nao_autorizado_encerra_a_sessao(self):
        self.api_mock.listar.return_value = [fazer_endereco("a1")]
        self.use_case.recarregar()
        self.api_mock.deletar.side_effect = NaoAutorizadoError()

        with self.assertRaises(NaoAutorizadoError):
            self.use_case.deletar("a1")

        self.assertEqual(self.store.estado, EstadoEntidades())

    def test_resposta_apos_desmontar_e_ignorada(self):
        """Cenário: a tela fechou antes da resposta; não há recarga nem mudança de estado."""
        def criar_e_desmontar(dados):
            self.store.desmontar()
            return None

        self.api_mock.criar.side_effect = criar_e_desmontar

        self.use_case.criar(DADOS_ENDERECO)

        self.api_mock.listar.assert_not_called()
        self.assertEqual(self.store.itens(TipoEntidade.ENDERECOS), ())


class TestGerenciarProdutos(unittest.TestCase):

    def setUp(self):
        self.api_mock = Mock()
        self.store = Store()
        self.use_case = GerenciarProdutosUseCase(self.api_mock, self.store)

    def test_preco_promocional_maior_que_preco_bloqueia_envio(self):
        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.criar(dict(DADOS_PRODUTO, salePrice="150"))

        self.assertEqual(list(ctx.exception.erros), ["salePrice"])
        self.api_mock.criar.assert_not_called()

    def test_campos_desconhecidos_nao_sao_enviados(self):
        self.api_mock.listar.return_value = []

        self.use_case.criar(dict(DADOS_PRODUTO, isAdmin=True))

        self.assertNotIn("isAdmin", self.api_mock.criar.call_args[0][0])

    def test_erro_de_rede_na_recarga(self):
        self.api_mock.listar.side_effect = ErroRedeError()

        with self.assertRaises(ErroRedeError):
            self.use_case.recarregar()

        self.assertEqual(self.store.estado.produtos.erro, ErroRedeError().message)

    def test_preco_promocional_parcial_e_comparado_ao_preco_atual(self):
        """
        Cenário: o produto p1 custa 100; a atualização só envia salePrice=500.
        A regra vale sobre o produto mesclado e nada sai para a rede.
        """
        # ARRANGE
        self.store.despachar(ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto("p1"),)))

        # ACT
        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.atualizar("p1", {"salePrice": "500"})

        # ASSERT
        self.assertEqual(ctx.exception.erros, {"salePrice": "Sale price must be less than the regular price"})
        self.api_mock.atualizar.assert_not_called()

    def test_baixar_o_preco_abaixo_da_promocao_atual_e_bloqueado(self):
        self.store.despachar(ListaCarregada(
            TipoEntidade.PRODUTOS, (fazer_produto("p1", preco_promocional=Decimal("50")),)
        ))

        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.atualizar("p1", {"price": "1"})

        self.assertIn("salePrice", ctx.exception.erros)
        self.api_mock.atualizar.assert_not_called()

    def test_atualizacao_parcial_valida_envia_so_os_campos_alterados(self):
        self.store.despachar(ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto("p1"),)))
        self.api_mock.listar.return_value = [fazer_produto("p1", preco_promocional=Decimal("90"))]

        self.use_case.atualizar("p1", {"salePrice": "90"})

        self.api_mock.atualizar.assert_called_once_with("p1", {"salePrice": "90"})

    def test_produto_fora_do_store_e_recarregado_antes_de_validar(self):
        self.api_mock.listar.return_value = [fazer_produto("p1")]

        with self.assertRaises(ValidacaoError):
            self.use_case.atualizar("p1", {"salePrice": "100"})

        self.api_mock.listar.assert_called_once_with()
        self.api_mock.atualizar.assert_not_called()

    def test_atualizar_produto_inexistente(self):
        self.api_mock.listar.return_value = []

        with self.assertRaises(ItemNaoEncontradoError):
            self.use_case.atualizar("x", {"title": "Pot"})

    def test_subcategoria_parcial_e_conferida_com_a_categoria_atual(self):
        self.store.despachar(ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto("p1"),)))

        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.atualizar("p1", {"subcategory": "footwear-casual"})

        self.assertEqual(list(ctx.exception.erros), ["subcategory"])


class TestGerenciarPedidosAdmin(unittest.TestCase):

    def setUp(self):
        self.api_mock = Mock()
        self.api_mock.listar.return_value = [
            fazer_pedido("o1"), fazer_pedido("o2", status="delivered"),
        ]
        self.store = Store()
        self.use_case = GerenciarPedidosAdminUseCase(self.api_mock, self.store)
        self.use_case.recarregar()

    def test_listar_com_filtro(self):
        self.assertEqual([p.id for p in self.use_case.listar_todos("delivered")], ["o2"])
        self.assertEqual(len(self.use_case.listar_todos()), 2)

    def test_detalhar_inexistente(self):
        with self.assertRaises(ItemNaoEncontradoError):
            self.use_case.detalhar_pedido("o9")

    def test_status_invalido_nao_chega_a_rede(self):
        with self.assertRaises(StatusInvalidoError):
            self.use_case.atualizar_status("o1", "shipped")

        self.api_mock.atualizar_status.assert_not_called()

    def test_atualizar_status_recarrega(self):
        self.api_mock.listar.reset_mock()

        self.use_case.atualizar_status("o1", "inShipping")

        self.api_mock.atualizar_status.assert_called_once_with("o1", "inShipping")
        self.api_mock.listar.assert_called_once()


# ====================================================================
# PERFIL, SENHA E DOAÇÕES
# ====================================================================

class TestPerfilESenha(unittest.TestCase):

    def setUp(self):
        self.perfil_api_mock = Mock()
        self.perfil_api_mock.buscar.return_value = PerfilUsuario(nome_usuario="Nimal", email="nimal@example.com")

    def test_atualizar_perfil_devolve_o_perfil_do_servidor(self):
        use_case = AtualizarPerfilUseCase(self.perfil_api_mock)

        perfil = use_case.executar({"bio": "Potter", "interestedCategories": ["handcraft"], "extra": 1})

        self.perfil_api_mock.atualizar.assert_called_once_with(
            {"bio": "Potter", "interestedCategories": ["handcraft"]}
        )
        self.assertEqual(perfil.nome_usuario, "Nimal")

    def test_perfil_invalido(self):
        use_case = AtualizarPerfilUseCase(self.perfil_api_mock)

        with self.assertRaises(ValidacaoError):
            use_case.executar({"userName": "Ni"})

        self.perfil_api_mock.atualizar.assert_not_called()

    def test_alterar_senha_nao_envia_confirmacao(self):
        use_case = AlterarSenhaUseCase(self.perfil_api_mock)

        use_case.executar({
            "currentPassword": "Antiga123",
            "newPassword": "Nova12345",
            "confirmPassword": "Nova12345",
        })

        self.perfil_api_mock.alterar_senha.assert_called_once_with(
            {"currentPassword": "Antiga123", "newPassword": "Nova12345"}
        )

    def test_senha_com_401_encerra_sessao(self):
        store = Store()
        store.despachar(ListaCarregada(TipoEntidade.PRODUTOS, (fazer_produto(),)))
        self.perfil_api_mock.alterar_senha.side_effect = NaoAutorizadoError()
        use_case = AlterarSenhaUseCase(self.perfil_api_mock, store)

        with self.assertRaises(NaoAutorizadoError):
            use_case.executar({
                "currentPassword": "Antiga123",
                "newPassword": "Nova12345",
                "confirmPassword": "Nova12345",
            })

        self.assertEqual(store.itens(TipoEntidade.PRODUTOS), ())


class TestRealizarDoacao(unittest.TestCase):

    def setUp(self):
        self.gateway_mock = Mock()
        self.use_case = RealizarDoacaoUseCase(self.gateway_mock)

    def test_iniciar_cria_intencao_com_decimal(self):
        self.gateway_mock.criar_intencao.return_value = IntencaoPagamento(id="pi_1", client_secret="sec")

        intencao = self.use_case.iniciar("s1", "b1", {"amount": "12.50"})

        self.gateway_mock.criar_intencao.assert_called_once_with("s1", "b1", Decimal("12.50"))
        self.assertEqual(intencao.client_secret, "sec")

    def test_valor_invalido_nao_chega_ao_provedor(self):
        with self.assertRaises(ValidacaoError):
            self.use_case.iniciar("s1", "b1", {"amount": "0"})

        self.gateway_mock.criar_intencao.assert_not_called()

    def test_falha_do_provedor_vira_doacao_falhou(self):
        self.gateway_mock.criar_intencao.side_effect = FalhaRequisicaoError(502, "stripe down")

        with self.assertRaises(DoacaoFalhouError) as ctx:
            self.use_case.iniciar("s1", "b1", {"amount": "5"})

        self.assertEqual(ctx.exception.message, "stripe down")

    def test_confirmar_exige_intencao(self):
        with self.assertRaises(DoacaoFalhouError):
            self.use_case.confirmar(Doacao(vendedor_id="s1", comprador_id="b1", valor=Decimal("5")))

        self.gateway_mock.processar.assert_not_called()

    def test_confirmar_registra(self):
        doacao = Doacao(vendedor_id="s1", comprador_id="b1", valor=Decimal("5"), intencao_id="pi_1")
        self.gateway_mock.processar.return_value = doacao

        self.assertIs(self.use_case.confirmar(doacao), doacao)


# ====================================================================
# REGISTRO DE MUTAÇÕES (entre requisições)
# ====================================================================

class TestRegistroMutacoes(unittest.TestCase):

    def test_reserva_ocupada_em_outra_requisicao_bloqueia_envio(self):
        """
        Cenário: outra requisição do mesmo usuário já reservou a criação de
        endereço. O Store desta requisição está vazio, mas o registro barra.
        """
        # ARRANGE
        registro = Mock()
        registro.reservar.return_value = False
        api_mock = Mock()
        use_case = GerenciarEnderecosUseCase(api_mock, Store(registro=registro))

        # ACT / ASSERT
        with self.assertRaises(OperacaoEmAndamentoError):
            use_case.criar(DADOS_ENDERECO)

        registro.reservar.assert_called_once_with("enderecos", None)
        api_mock.criar.assert_not_called()
        registro.liberar.assert_not_called()

    def test_reserva_e_liberada_mesmo_com_falha(self):
        registro = Mock()
        registro.reservar.return_value = True
        api_mock = Mock()
        api_mock.deletar.side_effect = FalhaRequisicaoError(500, "boom")
        store = Store(registro=registro)

        with self.assertRaises(FalhaRequisicaoError):
            GerenciarEnderecosUseCase(api_mock, store).deletar("a1")

        registro.liberar.assert_called_once_with("enderecos", "a1")
        self.assertFalse(store.mutacao_em_andamento(TipoEntidade.ENDERECOS, "a1"))


# ====================================================================
# AVALIAÇÕES
# ====================================================================

def fazer_avaliacao(nota, usuario_id="u2"):
    return Avaliacao(produto_id="p1", usuario_id=usuario_id, nota=nota, mensagem="Nice", id=f"r-{usuario_id}")


class TestGerenciarAvaliacoes(unittest.TestCase):

    def setUp(self):
        self.api_mock = Mock()
        self.store = Store()
        self.use_case = GerenciarAvaliacoesUseCase(self.api_mock, self.store, "p1")
        self.usuario = {"id": "u1", "userName": "Nimal"}

    def test_avaliar_envia_e_recarrega_as_avaliacoes_do_produto(self):
        # ARRANGE
        self.api_mock.listar.return_value = [fazer_avaliacao(4), fazer_avaliacao(5, "u1")]

        # ACT
        self.use_case.avaliar(self.usuario, {"reviewValue": "5", "reviewMessage": "  Lovely pot "})

        # ASSERT
        self.api_mock.criar.assert_called_once_with({
            "productId": "p1",
            "userId": "u1",
            "userName": "Nimal",
            "reviewMessage": "Lovely pot",
            "reviewValue": 5,
        })
        self.api_mock.listar.assert_called_once_with("p1")
        self.assertEqual(len(self.use_case.avaliacoes()), 2)
        self.assertEqual(self.use_case.media(), Decimal("4.5"))

    def test_nota_zero_nao_chega_a_rede(self):
        with self.assertRaises(ValidacaoError) as ctx:
            self.use_case.avaliar(self.usuario, {"reviewValue": 0, "reviewMessage": "ok"})

        self.assertEqual(ctx.exception.erros, {"reviewValue": "Please select a rating"})
        self.api_mock.criar.assert_not_called()

    def test_sem_usuario_logado(self):
        with self.assertRaises(NaoAutorizadoError):
            self.use_case.avaliar({}, {"reviewValue": 5, "reviewMessage": "ok"})

        self.api_mock.criar.assert_not_called()

    def test_recusa_do_servidor_nao_recarrega(self):
        self.api_mock.criar.side_effect = FalhaRequisicaoError(403, "You need to purchase the product first.")

        with self.assertRaises(FalhaRequisicaoError):
            self.use_case.avaliar(self.usuario, {"reviewValue": 3, "reviewMessage": "ok"})

        self.api_mock.listar.assert_not_called()

    def test_media_sem_avaliacoes(self):
        self.assertEqual(self.use_case.media(), Decimal("0"))

    def test_elegibilidade(self):
        self.api_mock.ja_avaliou.return_value = False
        self.api_mock.pode_avaliar.return_value = Elegibilidade(True, "")

        self.assertTrue(self.use_case.verificar_elegibilidade("u1").pode_avaliar)
        self.api_mock.pode_avaliar.assert_called_once_with("u1", "p1")

    def test_quem_ja_avaliou_nao_pode_avaliar_de_novo(self):
        self.api_mock.ja_avaliou.return_value = True

        elegibilidade = self.use_case.verificar_elegibilidade("u1")

        self.assertFalse(elegibilidade.pode_avaliar)
        self.assertEqual(elegibilidade.mensagem, "You already reviewed this product!")
        self.api_mock.pode_avaliar.assert_not_called()

    def test_elegibilidade_sem_resposta_do_servidor(self):
        self.api_mock.ja_avaliou.side_effect = ErroRedeError()

        elegibilidade = self.use_case.verificar_elegibilidade("u1")

        self.assertFalse(elegibilidade.pode_avaliar)
        self.assertEqual(elegibilidade.mensagem, "Could not verify if you can review this product")

    def test_elegibilidade_sem_usuario(self):
        self.assertFalse(self.use_case.verificar_elegibilidade(None).pode_avaliar)
        self.api_mock.ja_avaliou.assert_not_called()


if __name__ == '__main__':
    unittest.main()
