from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

from django.core.cache import cache
from django.test import SimpleTestCase
from rest_framework.test import APIClient

from empowerhub.core.entities import Avaliacao, Elegibilidade, Endereco, ItemPedido, Pedido, Produto
from empowerhub.core.exceptions import ErroRedeError, NaoAutorizadoError
from empowerhub.core.use_cases import (
    GerenciarAvaliacoesUseCase,
    GerenciarEnderecosUseCase,
    GerenciarPedidosAdminUseCase,
    GerenciarProdutosUseCase,
)
from empowerhub.infrastructure.registro import RegistroMutacoesCache

DI = 'empowerhub.core.dependency_injection'


def fazer_produto(produto_id='p1'):
    return Produto(
        id=produto_id, titulo='Clay pot', descricao='Traditional clay pot',
        categoria='handcraft', subcategoria='handcraft-pottery',
        preco=Decimal('19.999'), estoque_total=4,
    )


def fazer_endereco(endereco_id):
    return Endereco(
        id=endereco_id, endereco='12 Temple Road', cidade='Kandy',
        telefone='0771234567', cep='20000',
    )


class ViewsTestBase(SimpleTestCase):

    def setUp(self):
        self.client = APIClient()
        self.api_mock = Mock()
        cache.clear()

    def login(self):
        gateway = Mock()
        gateway.autenticar.return_value = {'token': 'tok', 'usuario': {'id': 'u1'}}
        with patch(f'{DI}.get_autenticacao_gateway', return_value=gateway):
            response = self.client.post('/login/', {'email': 'a@b.com', 'password': 'x'}, format='json')
        self.assertEqual(response.status_code, 200)


class SessaoTestCase(ViewsTestBase):

    def test_sem_sessao_redireciona_para_login(self):
        response = self.client.get('/api/products/')

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/login/')

    def test_login_invalido(self):
        response = self.client.post('/login/', {'email': 'nao-e-email'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['errors'])

    def test_401_da_api_encerra_sessao(self):
        """
        Cenário: o token expirou; a API responde 401 e a sessão é descartada.
        """
        # ARRANGE
        self.login()
        self.api_mock.listar.side_effect = NaoAutorizadoError()
        fabrica = lambda token, store: GerenciarProdutosUseCase(self.api_mock, store)

        # ACT
        with patch(f'{DI}.get_gerenciar_produtos_use_case', side_effect=fabrica):
            primeira = self.client.get('/api/products/')
        segunda = self.client.get('/api/products/')

        # ASSERT
        self.assertEqual(primeira.status_code, 302)
        self.assertEqual(segunda.status_code, 302)
        self.assertEqual(self.api_mock.listar.call_count, 1)


class ProdutosViewTestCase(ViewsTestBase):

    def setUp(self):
        super().setUp()
        self.login()
        self.api_mock.listar.return_value = [fazer_produto()]
        fabrica = lambda token, store: GerenciarProdutosUseCase(self.api_mock, store)
        patcher = patch(f'{DI}.get_gerenciar_produtos_use_case', side_effect=fabrica)
        self.fabrica_mock = patcher.start()
        self.addCleanup(patcher.stop)

    def test_listar(self):
        response = self.client.get('/api/products/')

        self.assertEqual(response.status_code, 200)
        dados = response.json()['data'][0]
        self.assertEqual(dados['title'], 'Clay pot')
        self.assertEqual(dados['price'], '20.00')
        self.assertEqual(self.fabrica_mock.call_args[0][0], 'tok')

    def test_criar_invalido_devolve_erros_por_campo(self):
        response = self.client.post('/api/products/', {'title': 'Pot', 'price': '10', 'salePrice': '20'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors']['salePrice'], 'Sale price must be less than the regular price')
        self.api_mock.criar.assert_not_called()

    def test_erro_de_rede_vira_502(self):
        self.api_mock.listar.side_effect = ErroRedeError()

        response = self.client.get('/api/products/')

        self.assertEqual(response.status_code, 502)
        self.assertFalse(response.json()['success'])

    def test_excluir(self):
        response = self.client.delete('/api/products/p1/')

        self.assertEqual(response.status_code, 200)
        self.api_mock.deletar.assert_called_once_with('p1')

    def test_atualizar_promocao_acima_do_preco_atual(self):
        response = self.client.put('/api/products/p1/', {'salePrice': '500'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {'salePrice': 'Sale price must be less than the regular price'})
        self.api_mock.atualizar.assert_not_called()

    def test_exclusao_em_andamento_em_outra_requisicao_devolve_409(self):
        """
        Cenário: a exclusão de p1 já foi reservada por outra requisição do
        mesmo usuário; um segundo clique não chega à API.
        """
        RegistroMutacoesCache('u1').reservar('produtos', 'p1')

        response = self.client.delete('/api/products/p1/')

        self.assertEqual(response.status_code, 409)
        self.api_mock.deletar.assert_not_called()


class EnderecosViewTestCase(ViewsTestBase):

    def test_quarto_endereco(self):
        self.login()
        self.api_mock.listar.return_value = [fazer_endereco(f'a{i}') for i in range(3)]
        fabrica = lambda token, store: GerenciarEnderecosUseCase(self.api_mock, store, limite=3)

        with patch(f'{DI}.get_gerenciar_enderecos_use_case', side_effect=fabrica):
            response = self.client.post('/api/addresses/', {
                'address': '45 Lake Drive', 'city': 'Colombo',
                'phone': '0771234567', 'pincode': '00100',
            }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'You can add a maximum of 3 addresses.')
        self.api_mock.criar.assert_not_called()


class AvaliacoesViewTestCase(ViewsTestBase):

    def setUp(self):
        super().setUp()
        self.login()
        self.api_mock.listar.return_value = [
            Avaliacao(produto_id='p1', usuario_id='u2', nota=4, mensagem='Good', id='r1'),
            Avaliacao(produto_id='p1', usuario_id='u3', nota=5, mensagem='Great', id='r2'),
        ]
        patcher = patch(
            f'{DI}.get_gerenciar_avaliacoes_use_case',
            side_effect=lambda token, store, produto_id: GerenciarAvaliacoesUseCase(self.api_mock, store, produto_id),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_listar_com_media(self):
        response = self.client.get('/api/products/p1/reviews/')

        dados = response.json()
        self.assertEqual([a['reviewValue'] for a in dados['data']], [4, 5])
        self.assertEqual(dados['averageReview'], '4.50')
        self.api_mock.listar.assert_called_once_with('p1')

    def test_avaliar_usa_o_usuario_da_sessao(self):
        response = self.client.post('/api/products/p1/reviews/', {'reviewValue': 5, 'reviewMessage': 'Lovely'}, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.api_mock.criar.call_args[0][0]['userId'], 'u1')

    def test_avaliar_sem_nota(self):
        response = self.client.post('/api/products/p1/reviews/', {'reviewValue': 0, 'reviewMessage': 'Lovely'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {'reviewValue': 'Please select a rating'})

    def test_elegibilidade(self):
        self.api_mock.ja_avaliou.return_value = False
        self.api_mock.pode_avaliar.return_value = Elegibilidade(True, 'You can review this product')

        response = self.client.get('/api/products/p1/reviews/eligibility/')

        self.assertEqual(response.json()['canReview'], True)
        self.api_mock.pode_avaliar.assert_called_once_with('u1', 'p1')


class RelatoriosViewTestCase(ViewsTestBase):

    def setUp(self):
        super().setUp()
        self.login()
        agora = datetime.now(timezone.utc)
        self.pedidos_api = Mock()
        self.pedidos_api.listar.return_value = [
            Pedido(
                id='o1',
                itens=[ItemPedido(produto_id='p1', quantidade=2, preco_unitario=Decimal('10'))],
                valor_total=Decimal('20'), status_pedido='delivered', data_pedido=agora,
            ),
        ]
        self.api_mock.listar.return_value = [fazer_produto()]
        patchers = [
            patch(f'{DI}.get_gerenciar_pedidos_admin_use_case',
                  side_effect=lambda token, store: GerenciarPedidosAdminUseCase(self.pedidos_api, store)),
            patch(f'{DI}.get_gerenciar_produtos_use_case',
                  side_effect=lambda token, store: GerenciarProdutosUseCase(self.api_mock, store)),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_vendas_json(self):
        response = self.client.get('/api/reports/sales/', {'janela': 'last7days'})

        dados = response.json()['data']
        self.assertEqual(dados['totalSales'], '20.00')
        self.assertEqual(dados['totalOrders'], 1)
        self.assertEqual(dados['topProducts'][0]['productId'], 'p1')

    def test_produtos_csv(self):
        response = self.client.get('/api/reports/products/', {'formato': 'csv'})

        self.assertEqual(response['Content-Type'], 'text/csv')
        linhas = response.content.decode().splitlines()
        self.assertEqual(linhas[0], 'Product ID,Title,Category,Price,In Stock,Quantity Sold,Revenue')
        self.assertEqual(linhas[1], 'p1,Clay pot,handcraft,20.00,4,2,20.00')

    def test_janela_invalida(self):
        response = self.client.get('/api/reports/sales/', {'janela': 'forever'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('janela', response.json()['errors'])

    def test_painel(self):
        response = self.client.get('/api/reports/dashboard/')

        dados = response.json()['data']
        self.assertEqual(dados['timeframe'], 'last30days')
        self.assertEqual(dados['ordersByStatus']['delivered'], 1)
        self.assertEqual(dados['lowStockProducts'], 1)


class FormulariosViewTestCase(ViewsTestBase):

    def test_opcoes_dependentes(self):
        response = self.client.get('/api/forms/produto/', {'category': 'footwear'})

        controles = {c['name']: c for c in response.json()['data']}
        self.assertEqual(
            [o['id'] for o in controles['subcategory']['options']],
            ['footwear-casual', 'footwear-formal'],
        )

    def test_formulario_inexistente(self):
        self.assertEqual(self.client.get('/api/forms/nada/').status_code, 404)

    def test_validar_e_limpar_campo(self):
        validado = self.client.post('/api/forms/endereco/validate/', {'values': {'city': '123'}}, format='json')
        erros = validado.json()['errors']

        limpo = self.client.post(
            '/api/forms/endereco/validate/', {'errors': erros, 'field': 'city'}, format='json'
        )

        self.assertIn('city', erros)
        self.assertNotIn('city', limpo.json()['errors'])
        self.assertIn('address', limpo.json()['errors'])
