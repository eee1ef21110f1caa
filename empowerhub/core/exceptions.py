from typing import Dict, Optional


class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    pass

# ===============================================
# ERROS DE VALIDAÇÃO (por campo)
# ===============================================

class ValidacaoError(BaseErroCore):
    """Erros de validação do formulário, indexados pelo nome do campo."""
    def __init__(self, erros: Dict[str, str], message="Please fix the errors in the form."):
        self.erros = dict(erros)
        self.message = message
        super().__init__(self.message)


class LimiteEnderecosError(ValidacaoError):
    """Erro levantado ao tentar cadastrar mais endereços do que o permitido."""
    def __init__(self, limite: int):
        self.limite = limite
        super().__init__(
            {},
            message=f"You can add a maximum of {limite} addresses.",
        )


class ErroValidacaoServidorError(ValidacaoError):
    """Resposta 4xx da API com erros estruturados por campo."""
    def __init__(self, status: int, erros: Dict[str, str], message="The server rejected the submitted data."):
        self.status = status
        super().__init__(erros, message=message)

# ===============================================
# ERROS DE COMUNICAÇÃO COM A API
# ===============================================

class ErroRedeError(BaseErroCore):
    """Falha de transporte (conexão recusada, timeout) com a API externa."""
    def __init__(self, message="Could not reach the server. Please try again."):
        self.message = message
        super().__init__(self.message)


class FalhaRequisicaoError(BaseErroCore):
    """A API respondeu com erro (status HTTP + mensagem)."""
    def __init__(self, status: int, message="The operation failed."):
        self.status = status
        self.message = message
        super().__init__(f"[{status}] {message}")


class NaoAutorizadoError(FalhaRequisicaoError):
    """Erro 401: a sessão expirou ou o token é inválido."""
    def __init__(self, message="Your session has expired. Please log in again."):
        super().__init__(401, message)

# ===============================================
# ERROS DE FLUXO
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item não está na lista carregada."""
    def __init__(self, message="The requested item was not found."):
        self.message = message
        super().__init__(self.message)


class OperacaoEmAndamentoError(BaseErroCore):
    """Já existe uma mutação em andamento para a mesma entidade."""
    def __init__(self, tipo: str, entidade_id: Optional[str]):
        self.tipo = tipo
        self.entidade_id = entidade_id
        self.message = f"An operation on {tipo} ({entidade_id or 'new'}) is already in progress."
        super().__init__(self.message)


class StatusInvalidoError(BaseErroCore):
    """Erro levantado ao tentar definir um status de pedido inválido."""
    def __init__(self, message="The given status is not a valid order status."):
        self.message = message
        super().__init__(self.message)


class DoacaoFalhouError(BaseErroCore):
    """Erro levantado quando o provedor de pagamento não cria ou não confirma a doação."""
    def __init__(self, message="The donation could not be processed."):
        self.message = message
        super().__init__(self.message)
