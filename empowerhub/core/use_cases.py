# empowerhub/core/use_cases.py
"""
Implementação dos Casos de Uso (Coordenador de Sincronização).

Fluxo de toda mutação:
  1. valida o formulário (falha -> ValidacaoError, nenhuma chamada de rede);
  2. chama a API externa através da Porta;
  3. em caso de sucesso, recarrega a lista inteira no Store;
  4. em caso de falha, propaga o erro estruturado sem tocar na lista local.

Esta camada depende apenas das Entidades, do Validador, do Store e das Portas.
"""
import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from empowerhub.core.entities import (
    Avaliacao, Doacao, Elegibilidade, IntencaoPagamento, Pedido, PerfilUsuario, Produto,
    StatusPedido, TipoEntidade,
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
from empowerhub.core.ports import (
    IAvaliacaoApi,
    IEnderecoApi,
    IGatewayDoacao,
    IPedidoApi,
    IPerfilApi,
    IPortfolioApi,
    IProdutoApi,
    IRecursoApi,
)
from empowerhub.core.store import (
    CarregamentoFalhou,
    CarregamentoIniciado,
    ListaCarregada,
    SessaoEncerrada,
    Store,
)
from empowerhub.core.validacao import (
    REGRAS_AVALIACAO,
    REGRAS_DOACAO,
    REGRAS_ENDERECO,
    REGRAS_PERFIL,
    REGRAS_PORTFOLIO,
    REGRAS_PRODUTO,
    REGRAS_SENHA,
    RegrasFormulario,
    como_decimal,
    validar,
)

logger = logging.getLogger(__name__)


def _validar_ou_falhar(dados: Mapping[str, Any], regras: RegrasFormulario, parcial: bool = False):
    resultado = validar(dados, regras, parcial=parcial)
    if not resultado.is_valid:
        raise ValidacaoError(resultado.erros)


def _filtrar_campos(dados: Mapping[str, Any], regras: Optional[RegrasFormulario]) -> Dict[str, Any]:
    """Mantém apenas os campos conhecidos do formulário."""
    if regras is None:
        return dict(dados)
    return {campo: valor for campo, valor in dados.items() if campo in regras}


# ====================================================================
# 1. COORDENADOR BASE
# ====================================================================

class CoordenadorBase:
    """Recarga de lista e execução de mutações com a guarda de envio duplicado."""

    tipo: TipoEntidade

    def __init__(self, api, store: Store):
        self.api = api
        self.store = store

    def _buscar_lista(self) -> Sequence[Any]:
        return self.api.listar()

    def recarregar(self) -> Sequence[Any]:
        """Busca a lista completa na API e substitui a lista do Store."""
        self.store.despachar(CarregamentoIniciado(self.tipo))
        try:
            itens = self._buscar_lista()
        except NaoAutorizadoError:
            self.store.despachar(SessaoEncerrada())
            raise
        except (ErroRedeError, FalhaRequisicaoError) as e:
            self.store.despachar(CarregamentoFalhou(self.tipo, e.message))
            raise

        self.store.despachar(ListaCarregada(self.tipo, tuple(itens)))
        return self.store.itens(self.tipo)

    def _mutar(self, entidade_id: Optional[str], operacao: Callable[[], Any], descricao: str) -> Any:
        if not self.store.reservar_mutacao(self.tipo, entidade_id):
            raise OperacaoEmAndamentoError(self.tipo.value, entidade_id)

        try:
            resultado = operacao()
        except NaoAutorizadoError:
            self.store.despachar(SessaoEncerrada())
            raise
        finally:
            self.store.liberar_mutacao(self.tipo, entidade_id)

        logger.info("%s em %s (id=%s) concluída.", descricao, self.tipo.value, entidade_id)

        if not self.store.montado:
            logger.debug("Store desmontado; recarga de %s ignorada.", self.tipo.value)
            return resultado

        self.recarregar()
        return resultado


class SincronizarRecursoUseCase(CoordenadorBase):
    """
    Coordenador genérico de um recurso com CRUD completo
    (produtos, endereços, portfólio).
    """

    def __init__(
        self,
        api: IRecursoApi,
        store: Store,
        tipo: TipoEntidade,
        regras: Optional[RegrasFormulario] = None,
    ):
        super().__init__(api, store)
        self.tipo = tipo
        self.regras = regras

    def validar(self, dados: Mapping[str, Any], parcial: bool = False):
        if self.regras is not None:
            _validar_ou_falhar(dados, self.regras, parcial=parcial)

    def criar(self, dados: Mapping[str, Any]) -> Any:
        self.validar(dados)
        payload = _filtrar_campos(dados, self.regras)
        return self._mutar(None, lambda: self.api.criar(payload), "Criação")

    def atualizar(self, entidade_id: str, dados: Mapping[str, Any]) -> Any:
        self.validar(dados, parcial=True)
        payload = _filtrar_campos(dados, self.regras)
        return self._mutar(entidade_id, lambda: self.api.atualizar(entidade_id, payload), "Atualização")

    def deletar(self, entidade_id: str) -> None:
        self._mutar(entidade_id, lambda: self.api.deletar(entidade_id), "Exclusão")


# ====================================================================
# 2. COORDENADORES POR RECURSO
# ====================================================================

class GerenciarProdutosUseCase(SincronizarRecursoUseCase):
    """Produtos do vendedor/admin. O preço promocional precisa ser menor que o preço."""

    # Campos validados em conjunto: alterar um deles revalida o grupo inteiro
    CAMPOS_DEPENDENTES = (
        ("price", "salePrice"),
        ("category", "subcategory"),
    )

    def __init__(self, api: IProdutoApi, store: Store):
        super().__init__(api, store, TipoEntidade.PRODUTOS, REGRAS_PRODUTO)

    def buscar(self, produto_id: str) -> Produto:
        """Produto do Store; se não estiver lá, recarrega a lista uma vez."""
        produto = next((p for p in self.store.itens(self.tipo) if p.id == produto_id), None)
        if produto is None:
            self.recarregar()
            produto = next((p for p in self.store.itens(self.tipo) if p.id == produto_id), None)
        if produto is None:
            raise ItemNaoEncontradoError(f"Product {produto_id} not found.")
        return produto

    def atualizar(self, entidade_id: str, dados: Mapping[str, Any]) -> Any:
        """
        Atualização parcial. Os campos enviados são sobrepostos ao produto
        atual, e as regras entre campos (preço promocional < preço, subcategoria
        da categoria) valem para o resultado da mescla.
        """
        atual = self.buscar(entidade_id)
        mesclado = {**_produto_para_formulario(atual), **dados}

        campos = {campo for campo in dados if campo in self.regras}
        for grupo in self.CAMPOS_DEPENDENTES:
            if campos.intersection(grupo):
                campos.update(grupo)
        _validar_ou_falhar({campo: mesclado.get(campo) for campo in campos}, self.regras, parcial=True)

        payload = _filtrar_campos(dados, self.regras)
        return self._mutar(entidade_id, lambda: self.api.atualizar(entidade_id, payload), "Atualização")


def _produto_para_formulario(produto: Produto) -> Dict[str, Any]:
    return {
        "title": produto.titulo,
        "description": produto.descricao,
        "category": produto.categoria,
        "subcategory": produto.subcategoria,
        "price": produto.preco,
        "salePrice": produto.preco_promocional,
        "totalStock": produto.estoque_total,
        "image": produto.imagem,
    }


class GerenciarEnderecosUseCase(SincronizarRecursoUseCase):
    """Endereços do comprador, limitados a `limite` por usuário."""

    LIMITE_PADRAO = 3

    def __init__(self, api: IEnderecoApi, store: Store, limite: int = LIMITE_PADRAO):
        super().__init__(api, store, TipoEntidade.ENDERECOS, REGRAS_ENDERECO)
        self.limite = limite

    def criar(self, dados: Mapping[str, Any]) -> Any:
        # O limite é checado antes da validação e de qualquer chamada de rede
        if len(self.store.itens(self.tipo)) >= self.limite:
            raise LimiteEnderecosError(self.limite)
        return super().criar(dados)


class GerenciarPortfolioUseCase(SincronizarRecursoUseCase):
    """Itens da vitrine do vendedor."""

    def __init__(self, api: IPortfolioApi, store: Store):
        super().__init__(api, store, TipoEntidade.PORTFOLIO, REGRAS_PORTFOLIO)


class GerenciarPedidosAdminUseCase(CoordenadorBase):
    """Caso de Uso para listagem e atualização de status de pedidos (acesso administrativo)."""

    tipo = TipoEntidade.PEDIDOS
    STATUS_VALIDOS = [status.value for status in StatusPedido]

    def __init__(self, api: IPedidoApi, store: Store):
        super().__init__(api, store)

    def listar_todos(self, status: Optional[str] = None) -> List[Pedido]:
        """Lista os pedidos do Store, com filtro opcional por status."""
        pedidos = list(self.store.itens(self.tipo))
        if status:
            pedidos = [pedido for pedido in pedidos if pedido.status_pedido == status]
        return pedidos

    def detalhar_pedido(self, pedido_id: str) -> Pedido:
        pedido = next((p for p in self.store.itens(self.tipo) if p.id == pedido_id), None)
        if not pedido:
            raise ItemNaoEncontradoError(f"Order {pedido_id} not found.")
        return pedido

    def atualizar_status(self, pedido_id: str, novo_status: str) -> Any:
        if novo_status not in self.STATUS_VALIDOS:
            raise StatusInvalidoError(f"'{novo_status}' is not a valid order status.")
        return self._mutar(
            pedido_id,
            lambda: self.api.atualizar_status(pedido_id, novo_status),
            f"Status '{novo_status}'",
        )


# ====================================================================
# 3. PERFIL E SENHA
# ====================================================================

class AtualizarPerfilUseCase:
    """Edição do perfil do usuário logado."""

    def __init__(self, perfil_api: IPerfilApi, store: Optional[Store] = None):
        self.perfil_api = perfil_api
        self.store = store

    def executar(self, dados: Mapping[str, Any]) -> PerfilUsuario:
        _validar_ou_falhar(dados, REGRAS_PERFIL, parcial=True)
        payload = _filtrar_campos(dados, REGRAS_PERFIL)
        # Campos sem regra de validação, mas aceitos pelo perfil
        for campo in ("interestedCategories", "notifications"):
            if campo in dados:
                payload[campo] = dados[campo]
        try:
            self.perfil_api.atualizar(payload)
            # Sem merge local: o perfil exibido é sempre o do servidor
            return self.perfil_api.buscar()
        except NaoAutorizadoError:
            if self.store is not None:
                self.store.despachar(SessaoEncerrada())
            raise


class AlterarSenhaUseCase:
    def __init__(self, perfil_api: IPerfilApi, store: Optional[Store] = None):
        self.perfil_api = perfil_api
        self.store = store

    def executar(self, dados: Mapping[str, Any]) -> None:
        _validar_ou_falhar(dados, REGRAS_SENHA)
        try:
            self.perfil_api.alterar_senha({
                "currentPassword": dados["currentPassword"],
                "newPassword": dados["newPassword"],
            })
        except NaoAutorizadoError:
            if self.store is not None:
                self.store.despachar(SessaoEncerrada())
            raise


# ====================================================================
# 4. DOAÇÕES
# ====================================================================

class RealizarDoacaoUseCase:
    """
    Doação de um comprador para um vendedor.

    O cartão é confirmado no navegador (elemento hospedado do provedor). Aqui
    só criamos a intenção de pagamento e, depois da confirmação, registramos
    a doação.
    """

    def __init__(self, doacao_gateway: IGatewayDoacao):
        self.doacao_gateway = doacao_gateway

    def iniciar(self, vendedor_id: str, comprador_id: str, dados: Mapping[str, Any]) -> IntencaoPagamento:
        """Valida o valor e cria a intenção de pagamento."""
        _validar_ou_falhar(dados, REGRAS_DOACAO)
        valor = como_decimal(dados["amount"])
        try:
            return self.doacao_gateway.criar_intencao(vendedor_id, comprador_id, valor)
        except NaoAutorizadoError:
            raise
        except FalhaRequisicaoError as e:
            raise DoacaoFalhouError(e.message)

    def confirmar(self, doacao: Doacao) -> Doacao:
        """Registra a doação após o provedor confirmar o pagamento."""
        if not doacao.intencao_id:
            raise DoacaoFalhouError("Payment intent is missing.")
        _validar_ou_falhar({"amount": doacao.valor, "message": doacao.mensagem}, REGRAS_DOACAO)
        try:
            registrada = self.doacao_gateway.processar(doacao)
        except NaoAutorizadoError:
            raise
        except FalhaRequisicaoError as e:
            raise DoacaoFalhouError(e.message)
        logger.info(
            "Doação de %s para o vendedor %s registrada (intenção %s).",
            doacao.valor, doacao.vendedor_id, doacao.intencao_id,
        )
        return registrada


# ====================================================================
# 5. AVALIAÇÕES DE PRODUTO
# ====================================================================

class GerenciarAvaliacoesUseCase(CoordenadorBase):
    """
    Avaliações de um produto. Só avalia quem comprou o produto (pedido
    confirmado ou entregue), uma vez por produto; quem decide é a API.
    """

    tipo = TipoEntidade.AVALIACOES

    def __init__(self, api: IAvaliacaoApi, store: Store, produto_id: str):
        super().__init__(api, store)
        self.produto_id = produto_id

    def _buscar_lista(self) -> Sequence[Avaliacao]:
        return self.api.listar(self.produto_id)

    def avaliacoes(self) -> Sequence[Avaliacao]:
        return self.store.itens(self.tipo)

    def media(self) -> Decimal:
        avaliacoes = self.avaliacoes()
        if not avaliacoes:
            return Decimal("0")
        return Decimal(sum(avaliacao.nota for avaliacao in avaliacoes)) / len(avaliacoes)

    def verificar_elegibilidade(self, usuario_id: Optional[str]) -> Elegibilidade:
        if not usuario_id or not self.produto_id:
            return Elegibilidade(False, "User or product information missing")
        try:
            if self.api.ja_avaliou(usuario_id, self.produto_id):
                return Elegibilidade(False, "You already reviewed this product!")
            return self.api.pode_avaliar(usuario_id, self.produto_id)
        except NaoAutorizadoError:
            self.store.despachar(SessaoEncerrada())
            raise
        except (ErroRedeError, FalhaRequisicaoError) as e:
            logger.warning("Elegibilidade de %s para o produto %s indisponível: %s", usuario_id, self.produto_id, e)
            return Elegibilidade(False, "Could not verify if you can review this product")

    def avaliar(self, usuario: Mapping[str, Any], dados: Mapping[str, Any]) -> Any:
        """Valida a nota e o comentário, envia e recarrega as avaliações do produto."""
        usuario_id = usuario.get("id")
        if not usuario_id:
            raise NaoAutorizadoError("Please login to add a review")
        _validar_ou_falhar(dados, REGRAS_AVALIACAO)
        payload = {
            "productId": self.produto_id,
            "userId": usuario_id,
            "userName": usuario.get("userName", ""),
            "reviewMessage": str(dados["reviewMessage"]).strip(),
            "reviewValue": int(como_decimal(dados["reviewValue"])),
        }
        return self._mutar(self.produto_id, lambda: self.api.criar(payload), "Avaliação")
