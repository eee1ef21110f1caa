import json
from decimal import Decimal
from unittest.mock import patch

import requests
from django.core.cache import cache
from django.test import SimpleTestCase, override_settings

from empowerhub.core.entities import Doacao
from empowerhub.core.exceptions import (
    ErroRedeError,
    ErroValidacaoServidorError,
    FalhaRequisicaoError,
    NaoAutorizadoError,
)
from empowerhub.infrastructure.gateways import (
    AutenticacaoGateway,
    AvaliacaoApiGateway,
    DoacaoApiGateway,
    EnderecoApiGateway,
    PedidoApiGateway,
    ProdutoApiGateway,
)
from empowerhub.infrastructure.mappers import AvaliacaoMapper, PedidoMapper, ProdutoMapper
from empowerhub.infrastructure.registro import RegistroMutacoesCache

REQUEST = 'empowerhub.infrastructure.gateways.requests.request'


def resposta(status_code=200, corpo=None):
    """Monta uma requests.Response real com corpo JSON."""
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(corpo if corpo is not None else {}).encode()
    response.url = 'http://api.test/x'
    return response


@override_settings(MARKETPLACE_API_URL='http://api.test/api', MARKETPLACE_API_TIMEOUT=5)
class ApiMarketplaceGatewayTestCase(SimpleTestCase):

    def test_listar_produtos_converte_para_entidades(self):
        """
        Cenário: GET /products devolve documentos com `_id` e números JSON.
        """
        corpo = {'success': True, 'data': [{
            '_id': 'p1', 'title': 'Clay pot', 'description': 'Fired clay pot',
            'category': 'handcraft', 'subcategory': 'handcraft-pottery',
            'price': 19.99, 'salePrice': 0, 'totalStock': 4, 'image': 'x.png',
        }]}

        with patch(REQUEST, return_value=resposta(200, corpo)) as request_mock:
            produtos = ProdutoApiGateway('tok').listar()

        self.assertEqual(produtos[0].id, 'p1')
        self.assertEqual(produtos[0].preco, Decimal('19.99'))
        args, kwargs = request_mock.call_args
        self.assertEqual(args, ('GET', 'http://api.test/api/products'))
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer tok')
        self.assertEqual(kwargs['timeout'], 5)

    def test_atualizar_usa_put_com_id(self):
        with patch(REQUEST, return_value=resposta(200, {'success': True})) as request_mock:
            EnderecoApiGateway('tok').atualizar('a1', {'city': 'Galle'})

        args, kwargs = request_mock.call_args
        self.assertEqual(args, ('PUT', 'http://api.test/api/addresses/a1'))
        self.assertEqual(kwargs['json'], {'city': 'Galle'})

    def test_mutacao_sem_token_nao_sai_da_maquina(self):
        with patch(REQUEST) as request_mock:
            with self.assertRaises(NaoAutorizadoError):
                ProdutoApiGateway(None).deletar('p1')

        request_mock.assert_not_called()

    def test_timeout_vira_erro_de_rede(self):
        with patch(REQUEST, side_effect=requests.exceptions.Timeout()):
            with self.assertRaises(ErroRedeError):
                ProdutoApiGateway('tok').listar()

    def test_401_vira_nao_autorizado(self):
        with patch(REQUEST, return_value=resposta(401, {'success': False, 'message': 'jwt expired'})):
            with self.assertRaises(NaoAutorizadoError) as ctx:
                PedidoApiGateway('tok').listar()

        self.assertEqual(ctx.exception.message, 'jwt expired')

    def test_4xx_com_erros_por_campo(self):
        corpo = {'success': False, 'message': 'Invalid', 'errors': {'pincode': 'Unknown postal code'}}

        with patch(REQUEST, return_value=resposta(422, corpo)):
            with self.assertRaises(ErroValidacaoServidorError) as ctx:
                EnderecoApiGateway('tok').criar({'pincode': '00000'})

        self.assertEqual(ctx.exception.status, 422)
        self.assertEqual(ctx.exception.erros, {'pincode': 'Unknown postal code'})

    def test_500_vira_falha_de_requisicao(self):
        with patch(REQUEST, return_value=resposta(500, {'message': 'Internal error'})):
            with self.assertRaises(FalhaRequisicaoError) as ctx:
                ProdutoApiGateway('tok').criar({})

        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(ctx.exception.message, 'Internal error')

    def test_success_false_com_200(self):
        with patch(REQUEST, return_value=resposta(200, {'success': False, 'message': 'Nope'})):
            with self.assertRaises(FalhaRequisicaoError):
                PedidoApiGateway('tok').atualizar_status('o1', 'confirmed')

    def test_status_do_pedido(self):
        with patch(REQUEST, return_value=resposta(200, {'success': True})) as request_mock:
            PedidoApiGateway('tok').atualizar_status('o1', 'confirmed')

        args, kwargs = request_mock.call_args
        self.assertEqual(args, ('PUT', 'http://api.test/api/orders/o1/status'))
        self.assertEqual(kwargs['json'], {'orderStatus': 'confirmed'})


@override_settings(MARKETPLACE_API_URL='http://api.test/api', MARKETPLACE_API_TIMEOUT=5)
class DoacaoEAutenticacaoTestCase(SimpleTestCase):

    def test_criar_intencao(self):
        corpo = {'success': True, 'clientSecret': 'sec_1', 'paymentIntentId': 'pi_1'}

        with patch(REQUEST, return_value=resposta(200, corpo)) as request_mock:
            intencao = DoacaoApiGateway('tok').criar_intencao('s1', 'b1', Decimal('12.50'))

        self.assertEqual((intencao.id, intencao.client_secret), ('pi_1', 'sec_1'))
        self.assertEqual(request_mock.call_args[1]['json'], {'sellerId': 's1', 'buyerId': 'b1', 'amount': 12.5})

    def test_processar(self):
        doacao = Doacao(vendedor_id='s1', comprador_id='b1', valor=Decimal('5'), intencao_id='pi_1')

        with patch(REQUEST, return_value=resposta(200, {'success': True, 'data': {'_id': 'd1'}})) as request_mock:
            registrada = DoacaoApiGateway('tok').processar(doacao)

        self.assertEqual(registrada.id, 'd1')
        self.assertEqual(registrada.valor, Decimal('5'))
        self.assertEqual(request_mock.call_args[1]['json']['amount'], 5.0)

    def test_login_sem_token_falha(self):
        with patch(REQUEST, return_value=resposta(401, {'success': False, 'message': 'Invalid credentials'})):
            with self.assertRaises(FalhaRequisicaoError) as ctx:
                AutenticacaoGateway().autenticar('a@b.com', 'x')

        self.assertEqual(ctx.exception.message, 'Invalid credentials')

    def test_login_com_corpo_que_nao_e_objeto(self):
        with patch(REQUEST, return_value=resposta(200, ['tok'])):
            with self.assertRaises(FalhaRequisicaoError) as ctx:
                AutenticacaoGateway().autenticar('a@b.com', 'x')

        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, 'Invalid email or password.')

    def test_login(self):
        corpo = {'success': True, 'token': 'tok', 'user': {'id': 'u1', 'role': 'admin'}}

        with patch(REQUEST, return_value=resposta(200, corpo)):
            credenciais = AutenticacaoGateway().autenticar('a@b.com', 'x')

        self.assertEqual(credenciais, {'token': 'tok', 'usuario': {'id': 'u1', 'role': 'admin'}})


class MappersTestCase(SimpleTestCase):

    def test_pedido(self):
        pedido = PedidoMapper.to_entity({
            '_id': 'o1',
            'cartItems': [{'productId': 'p1', 'title': 'Pot', 'price': '10.5', 'quantity': 2}],
            'totalAmount': 21,
            'orderStatus': 'delivered',
            'paymentStatus': 'paid',
            'orderDate': '2024-05-01T10:00:00Z',
        })

        self.assertEqual(pedido.itens[0].subtotal, Decimal('21.0'))
        self.assertEqual(pedido.data_pedido.tzinfo is not None, True)
        self.assertEqual(pedido.quantidade_itens, 2)

    def test_produto_sem_preco_promocional(self):
        produto = ProdutoMapper.to_entity({'_id': 'p1', 'title': 'x', 'price': 10})

        self.assertEqual(produto.preco_promocional, Decimal('0'))
        self.assertFalse(produto.em_promocao)

    def test_data_fora_do_padrao_vira_falha_de_requisicao(self):
        with self.assertRaises(FalhaRequisicaoError) as ctx:
            PedidoMapper.to_entity({'_id': 'o1', 'orderDate': '19/10/2026', 'cartItems': []})

        self.assertEqual(ctx.exception.status, 502)

    def test_avaliacao(self):
        avaliacao = AvaliacaoMapper.to_entity({
            '_id': 'r1', 'productId': 'p1', 'userId': 'u1', 'userName': 'Nimal',
            'reviewMessage': 'Lovely pot', 'reviewValue': 5,
        })

        self.assertEqual((avaliacao.id, avaliacao.nota, avaliacao.mensagem), ('r1', 5, 'Lovely pot'))


@override_settings(MARKETPLACE_API_URL='http://api.test/api', MARKETPLACE_API_TIMEOUT=5)
class PedidosEAvaliacoesGatewayTestCase(SimpleTestCase):

    def test_lista_de_pedidos_com_data_invalida(self):
        """
        Cenário: um documento da lista tem data fora do ISO-8601. A listagem
        falha como resposta inválida do servidor, não como erro interno.
        """
        corpo = {'success': True, 'data': [{'_id': 'o1', 'orderDate': '19/10/2026'}]}

        with patch(REQUEST, return_value=resposta(200, corpo)):
            with self.assertRaises(FalhaRequisicaoError) as ctx:
                PedidoApiGateway('tok').listar()

        self.assertEqual(ctx.exception.status, 502)

    def test_listar_avaliacoes_do_produto(self):
        corpo = {'success': True, 'data': [{'_id': 'r1', 'productId': 'p1', 'reviewValue': 4}]}

        with patch(REQUEST, return_value=resposta(200, corpo)) as request_mock:
            avaliacoes = AvaliacaoApiGateway('tok').listar('p1')

        self.assertEqual(request_mock.call_args[0], ('GET', 'http://api.test/api/reviews/p1'))
        self.assertEqual(avaliacoes[0].nota, 4)

    def test_pode_avaliar_usa_query_string(self):
        corpo = {'canReview': False, 'message': 'Purchase required'}

        with patch(REQUEST, return_value=resposta(200, corpo)) as request_mock:
            elegibilidade = AvaliacaoApiGateway('tok').pode_avaliar('u1', 'p1')

        args, kwargs = request_mock.call_args
        self.assertEqual(args, ('GET', 'http://api.test/api/orders/can-review'))
        self.assertEqual(kwargs['params'], {'userId': 'u1', 'productId': 'p1'})
        self.assertEqual((elegibilidade.pode_avaliar, elegibilidade.mensagem), (False, 'Purchase required'))

    def test_ja_avaliou(self):
        with patch(REQUEST, return_value=resposta(200, {'hasReviewed': True})):
            self.assertTrue(AvaliacaoApiGateway('tok').ja_avaliou('u1', 'p1'))

    def test_criar_avaliacao_recusada(self):
        corpo = {'success': False, 'message': 'You already reviewed this product!'}

        with patch(REQUEST, return_value=resposta(400, corpo)):
            with self.assertRaises(FalhaRequisicaoError) as ctx:
                AvaliacaoApiGateway('tok').criar({'productId': 'p1'})

        self.assertEqual(ctx.exception.message, 'You already reviewed this product!')


class RegistroMutacoesCacheTestCase(SimpleTestCase):

    def setUp(self):
        cache.clear()

    def test_segunda_reserva_da_mesma_entidade_falha(self):
        primeira = RegistroMutacoesCache('u1', timeout=30)
        segunda = RegistroMutacoesCache('u1', timeout=30)

        self.assertTrue(primeira.reservar('produtos', 'p1'))
        self.assertFalse(segunda.reservar('produtos', 'p1'))
        self.assertTrue(segunda.reservar('produtos', 'p2'))
        self.assertTrue(RegistroMutacoesCache('u2', timeout=30).reservar('produtos', 'p1'))

    def test_liberar_permite_nova_reserva(self):
        registro = RegistroMutacoesCache('u1', timeout=30)
        registro.reservar('enderecos', None)

        registro.liberar('enderecos', None)

        self.assertTrue(registro.reservar('enderecos', None))
