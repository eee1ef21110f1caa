import csv
import logging

from django.conf import settings
from django.http import HttpResponse, HttpResponseRedirect
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from empowerhub.core import dependency_injection as di
from empowerhub.core.entities import TipoEntidade
from empowerhub.core.exceptions import (
    DoacaoFalhouError,
    ErroRedeError,
    ErroValidacaoServidorError,
    FalhaRequisicaoError,
    ItemNaoEncontradoError,
    NaoAutorizadoError,
    OperacaoEmAndamentoError,
    StatusInvalidoError,
    ValidacaoError,
)
from empowerhub.core.formularios import FORMULARIOS, para_dict
from empowerhub.core.relatorios import (
    JanelaTempo,
    arredondar_moeda,
    gerar_relatorio_produtos,
    gerar_relatorio_vendas,
    gerar_resumo_painel,
)
from empowerhub.core.store import Store
from empowerhub.core.validacao import (
    REGRAS_AVALIACAO,
    REGRAS_DOACAO,
    REGRAS_ENDERECO,
    REGRAS_PERFIL,
    REGRAS_PORTFOLIO,
    REGRAS_PRODUTO,
    REGRAS_SENHA,
    limpar_erro,
    validar,
)
from .serializers import (
    AvaliacaoSerializer,
    EnderecoSerializer,
    ItemPortfolioSerializer,
    LoginSerializer,
    PedidoSerializer,
    PerfilSerializer,
    ProcessarDoacaoSerializer,
    ProdutoSerializer,
    RelatorioProdutosSerializer,
    RelatorioVendasSerializer,
    ResumoPainelSerializer,
)
from .sessao import SessaoMarketplace

logger = logging.getLogger(__name__)

REGRAS_POR_FORMULARIO = {
    'produto': REGRAS_PRODUTO,
    'endereco': REGRAS_ENDERECO,
    'portfolio': REGRAS_PORTFOLIO,
    'perfil': REGRAS_PERFIL,
    'senha': REGRAS_SENHA,
    'doacao': REGRAS_DOACAO,
    'avaliacao': REGRAS_AVALIACAO,
}


# ====================================================================
# BASE: sessão obrigatória e tradução das exceções do Core.
# ====================================================================

class MarketplaceAPIView(APIView):
    """
    Toda view autenticada herda daqui. Cada requisição ganha o seu próprio
    Store, ligado ao registro de mutações do usuário (envio duplicado vira 409
    mesmo entre requisições). As exceções do Core viram respostas JSON (ou
    redirect no 401).
    """
    requer_sessao = True

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.sessao = SessaoMarketplace(request)
        if self.requer_sessao and not self.sessao.autenticada:
            raise NaoAutorizadoError()
        registro = None
        if self.sessao.autenticada:
            registro = di.get_registro_mutacoes(self.sessao.usuario_id or self.token)
        self.store = Store(registro=registro)

    @property
    def token(self):
        return self.sessao.token

    def handle_exception(self, exc):
        if isinstance(exc, NaoAutorizadoError):
            SessaoMarketplace(self.request).encerrar()
            return HttpResponseRedirect(settings.LOGIN_URL)

        if isinstance(exc, ValidacaoError):
            codigo = exc.status if isinstance(exc, ErroValidacaoServidorError) else status.HTTP_400_BAD_REQUEST
            return Response({'success': False, 'message': exc.message, 'errors': exc.erros}, status=codigo)

        if isinstance(exc, ErroRedeError):
            return Response({'success': False, 'message': exc.message}, status=status.HTTP_502_BAD_GATEWAY)

        if isinstance(exc, FalhaRequisicaoError):
            codigo = exc.status if exc.status >= 400 else status.HTTP_502_BAD_GATEWAY
            return Response({'success': False, 'message': exc.message}, status=codigo)

        erros_de_fluxo = {
            ItemNaoEncontradoError: status.HTTP_404_NOT_FOUND,
            OperacaoEmAndamentoError: status.HTTP_409_CONFLICT,
            StatusInvalidoError: status.HTTP_400_BAD_REQUEST,
            DoacaoFalhouError: status.HTTP_400_BAD_REQUEST,
        }
        for classe, codigo in erros_de_fluxo.items():
            if isinstance(exc, classe):
                return Response({'success': False, 'message': exc.message}, status=codigo)

        return super().handle_exception(exc)


class RecursoListaView(MarketplaceAPIView):
    """GET lista / POST cria. Subclasses dizem qual caso de uso e serializer usar."""
    fabrica = None
    serializer_class = None

    def get_use_case(self):
        return getattr(di, self.fabrica)(self.token, self.store)

    def _lista(self, uc, codigo=status.HTTP_200_OK):
        itens = self.store.itens(uc.tipo)
        return Response({'success': True, 'data': self.serializer_class(itens, many=True).data}, status=codigo)

    def get(self, request):
        uc = self.get_use_case()
        uc.recarregar()
        return self._lista(uc)

    def post(self, request):
        uc = self.get_use_case()
        uc.criar(request.data)
        return self._lista(uc, status.HTTP_201_CREATED)


class RecursoDetalheView(RecursoListaView):
    """PUT atualiza / DELETE exclui."""

    def put(self, request, pk):
        uc = self.get_use_case()
        uc.atualizar(pk, request.data)
        return self._lista(uc)

    def delete(self, request, pk):
        uc = self.get_use_case()
        uc.deletar(pk)
        return self._lista(uc)


# ====================================================================
# 1. PRODUTOS, ENDEREÇOS E PORTFÓLIO
# ====================================================================

class ProdutoListaAPIView(RecursoListaView):
    fabrica = 'get_gerenciar_produtos_use_case'
    serializer_class = ProdutoSerializer


class ProdutoDetalheAPIView(RecursoDetalheView):
    fabrica = 'get_gerenciar_produtos_use_case'
    serializer_class = ProdutoSerializer


class EnderecoListaAPIView(RecursoListaView):
    fabrica = 'get_gerenciar_enderecos_use_case'
    serializer_class = EnderecoSerializer

    def post(self, request):
        uc = self.get_use_case()
        # O limite é contado sobre a lista atual do servidor
        uc.recarregar()
        uc.criar(request.data)
        return self._lista(uc, status.HTTP_201_CREATED)


class EnderecoDetalheAPIView(RecursoDetalheView):
    fabrica = 'get_gerenciar_enderecos_use_case'
    serializer_class = EnderecoSerializer


class PortfolioListaAPIView(RecursoListaView):
    fabrica = 'get_gerenciar_portfolio_use_case'
    serializer_class = ItemPortfolioSerializer


class PortfolioDetalheAPIView(RecursoDetalheView):
    fabrica = 'get_gerenciar_portfolio_use_case'
    serializer_class = ItemPortfolioSerializer


class AvaliacoesAPIView(MarketplaceAPIView):
    """Avaliações de um produto (GET) e nova avaliação do usuário logado (POST)."""

    def _resposta(self, uc, codigo=status.HTTP_200_OK):
        return Response({
            'success': True,
            'data': AvaliacaoSerializer(uc.avaliacoes(), many=True).data,
            'averageReview': str(arredondar_moeda(uc.media())),
        }, status=codigo)

    def get(self, request, pk):
        uc = di.get_gerenciar_avaliacoes_use_case(self.token, self.store, pk)
        uc.recarregar()
        return self._resposta(uc)

    def post(self, request, pk):
        uc = di.get_gerenciar_avaliacoes_use_case(self.token, self.store, pk)
        uc.avaliar(self.sessao.usuario, request.data)
        return self._resposta(uc, status.HTTP_201_CREATED)


class ElegibilidadeAvaliacaoAPIView(MarketplaceAPIView):
    def get(self, request, pk):
        uc = di.get_gerenciar_avaliacoes_use_case(self.token, self.store, pk)
        elegibilidade = uc.verificar_elegibilidade(self.sessao.usuario_id)
        return Response({
            'success': True,
            'canReview': elegibilidade.pode_avaliar,
            'message': elegibilidade.mensagem,
        })


# ====================================================================
# 2. PEDIDOS (ADMIN)
# ====================================================================

class PedidoListaAPIView(MarketplaceAPIView):
    """Lista os pedidos, com filtro opcional `?status=`."""

    def get(self, request):
        uc = di.get_gerenciar_pedidos_admin_use_case(self.token, self.store)
        uc.recarregar()
        pedidos = uc.listar_todos(request.query_params.get('status'))
        return Response({'success': True, 'data': PedidoSerializer(pedidos, many=True).data})


class PedidoDetalheAPIView(MarketplaceAPIView):
    def get(self, request, pk):
        uc = di.get_gerenciar_pedidos_admin_use_case(self.token, self.store)
        uc.recarregar()
        pedido = uc.detalhar_pedido(pk)
        return Response({'success': True, 'data': PedidoSerializer(pedido).data})


class PedidoStatusAPIView(MarketplaceAPIView):
    def put(self, request, pk):
        uc = di.get_gerenciar_pedidos_admin_use_case(self.token, self.store)
        uc.atualizar_status(pk, request.data.get('orderStatus', ''))
        pedidos = self.store.itens(TipoEntidade.PEDIDOS)
        return Response({'success': True, 'data': PedidoSerializer(pedidos, many=True).data})


# ====================================================================
# 3. PERFIL E SENHA
# ====================================================================

class PerfilAPIView(MarketplaceAPIView):
    def get(self, request):
        perfil = di.get_perfil_gateway(self.token).buscar()
        return Response({'success': True, 'user': PerfilSerializer(perfil).data})

    def put(self, request):
        uc = di.get_atualizar_perfil_use_case(self.token, self.store)
        perfil = uc.executar(request.data)
        return Response({'success': True, 'user': PerfilSerializer(perfil).data})


class AlterarSenhaAPIView(MarketplaceAPIView):
    def put(self, request):
        uc = di.get_alterar_senha_use_case(self.token, self.store)
        uc.executar(request.data)
        return Response({'success': True, 'message': 'Password updated successfully.'})


# ====================================================================
# 4. DOAÇÕES
# ====================================================================

class DoacaoIntencaoAPIView(MarketplaceAPIView):
    """Cria a intenção de pagamento; o navegador confirma o cartão com o client_secret."""

    def post(self, request):
        uc = di.get_realizar_doacao_use_case(self.token)
        comprador_id = request.data.get('buyerId') or self.sessao.usuario_id
        intencao = uc.iniciar(request.data.get('sellerId', ''), comprador_id, request.data)
        return Response(
            {'success': True, 'clientSecret': intencao.client_secret, 'paymentIntentId': intencao.id},
            status=status.HTTP_201_CREATED,
        )


class DoacaoProcessarAPIView(MarketplaceAPIView):
    def post(self, request):
        serializer = ProcessarDoacaoSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        uc = di.get_realizar_doacao_use_case(self.token)
        doacao = uc.confirmar(serializer.to_doacao_entity(self.sessao.usuario_id))
        return Response({
            'success': True,
            'message': 'Thank you for your donation!',
            'data': {'id': doacao.id, 'amount': str(arredondar_moeda(doacao.valor))},
        })


# ====================================================================
# 5. RELATÓRIOS
# ====================================================================

class RelatorioBaseView(MarketplaceAPIView):
    janela_padrao = JanelaTempo.ALL

    def _janela(self, request) -> JanelaTempo:
        valor = request.query_params.get('janela', self.janela_padrao.value)
        try:
            return JanelaTempo(valor)
        except ValueError:
            raise ValidacaoError({'janela': f"'{valor}' is not a valid time window."})

    def _carregar(self, com_produtos=True):
        """Recarrega pedidos (e produtos) no Store desta requisição."""
        pedidos_uc = di.get_gerenciar_pedidos_admin_use_case(self.token, self.store)
        pedidos = pedidos_uc.recarregar()
        produtos = ()
        if com_produtos:
            produtos = di.get_gerenciar_produtos_use_case(self.token, self.store).recarregar()
        return pedidos, produtos

    def _csv(self, nome_arquivo, cabecalho, linhas):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{nome_arquivo}"'
        writer = csv.writer(response)
        writer.writerow(cabecalho)
        writer.writerows(linhas)
        return response

    def _quer_csv(self, request) -> bool:
        return request.query_params.get('formato') == 'csv'


class RelatorioVendasAPIView(RelatorioBaseView):
    def get(self, request):
        janela = self._janela(request)
        pedidos, _ = self._carregar(com_produtos=False)
        relatorio = gerar_relatorio_vendas(pedidos, janela)

        if self._quer_csv(request):
            return self._csv(
                f'sales_report_{janela.value}.csv',
                ['Order ID', 'Date', 'Status', 'Payment Status', 'Items', 'Amount'],
                (
                    [linha.id, linha.data.isoformat(), linha.status, linha.status_pagamento,
                     linha.itens, arredondar_moeda(linha.valor)]
                    for linha in relatorio.linhas
                ),
            )
        return Response({'success': True, 'data': RelatorioVendasSerializer(relatorio).data})


class RelatorioProdutosAPIView(RelatorioBaseView):
    def get(self, request):
        janela = self._janela(request)
        pedidos, produtos = self._carregar()
        relatorio = gerar_relatorio_produtos(pedidos, produtos, janela)

        if self._quer_csv(request):
            return self._csv(
                f'products_report_{janela.value}.csv',
                ['Product ID', 'Title', 'Category', 'Price', 'In Stock', 'Quantity Sold', 'Revenue'],
                (
                    [linha.id, linha.titulo, linha.categoria, arredondar_moeda(linha.preco),
                     linha.em_estoque, linha.quantidade_vendida, arredondar_moeda(linha.receita)]
                    for linha in relatorio.linhas
                ),
            )
        return Response({'success': True, 'data': RelatorioProdutosSerializer(relatorio).data})


class PainelAPIView(RelatorioBaseView):
    janela_padrao = JanelaTempo.LAST_30_DAYS

    def get(self, request):
        janela = self._janela(request)
        pedidos, produtos = self._carregar()
        resumo = gerar_resumo_painel(pedidos, produtos, janela)
        return Response({'success': True, 'data': ResumoPainelSerializer(resumo).data})


# ====================================================================
# 6. FORMULÁRIOS (definição dos controles e validação ao vivo)
# ====================================================================

class FormularioAPIView(MarketplaceAPIView):
    """Controles do formulário; selects dependentes usam os valores da query string."""
    requer_sessao = False

    def get(self, request, nome):
        controles = FORMULARIOS.get(nome)
        if controles is None:
            raise ItemNaoEncontradoError(f"Form '{nome}' not found.")
        valores = request.query_params.dict()
        return Response({'success': True, 'data': [para_dict(controle, valores) for controle in controles]})


class ValidarFormularioAPIView(MarketplaceAPIView):
    """
    Validação sem envio. Com `field`, só limpa o erro do campo editado
    (o formulário só é revalidado inteiro no próximo envio).
    """
    requer_sessao = False

    def post(self, request, nome):
        regras = REGRAS_POR_FORMULARIO.get(nome)
        if regras is None:
            raise ItemNaoEncontradoError(f"Form '{nome}' not found.")

        campo = request.data.get('field')
        if campo:
            erros = limpar_erro(request.data.get('errors') or {}, campo)
        else:
            erros = validar(request.data.get('values') or {}, regras).erros
        return Response({'success': not erros, 'errors': erros})


# ====================================================================
# 7. AUTENTICAÇÃO (colaborador externo)
# ====================================================================

class LoginAPIView(MarketplaceAPIView):
    requer_sessao = False

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        credenciais = di.get_autenticacao_gateway().autenticar(
            serializer.validated_data['email'],
            serializer.validated_data['password'],
        )
        self.sessao.iniciar(credenciais['token'], credenciais['usuario'])
        logger.info("Sessão iniciada para %s.", serializer.validated_data['email'])
        return Response({'success': True, 'user': credenciais['usuario']})


class LogoutAPIView(MarketplaceAPIView):
    requer_sessao = False

    def post(self, request):
        self.sessao.encerrar()
        return Response({'success': True})
