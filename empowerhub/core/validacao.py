# empowerhub/core/validacao.py
"""
Validador de formulários.

Cada campo recebe uma lista de regras declarativas (uma dataclass por tipo de
regra). A função `validar` é pura: recebe os valores atuais do formulário e
devolve o mapa campo -> mensagem de erro. Pode ser chamada a cada tecla
digitada sem acumular estado.

Os conjuntos de regras (REGRAS_*) são dados, não código: padrões regionais
(telefone, nome de cidade) ficam nas tabelas e podem ser trocados por campo.
"""
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Union

from empowerhub.core.entities import (
    CategoriaPortfolio,
    CategoriaProduto,
    subcategorias_de,
)


# ====================================================================
# 1. REGRAS (variantes)
# ====================================================================

@dataclass(frozen=True)
class Obrigatorio:
    mensagem: str


@dataclass(frozen=True)
class TamanhoMinimo:
    minimo: int
    mensagem: str


@dataclass(frozen=True)
class TamanhoMaximo:
    maximo: int
    mensagem: str


@dataclass(frozen=True)
class Padrao:
    """Expressão regular aplicada ao valor (sem espaços nas pontas)."""
    regex: str
    mensagem: str
    # Remove todos os espaços antes de testar (ex: CEP "12 345")
    remover_espacos: bool = False


@dataclass(frozen=True)
class ContagemDigitos:
    """Quantidade de dígitos dentro do valor, ignorando os demais caracteres."""
    minimo: int
    maximo: int
    mensagem: str


@dataclass(frozen=True)
class Numerico:
    mensagem: str
    inteiro: bool = False


@dataclass(frozen=True)
class FaixaNumerica:
    mensagem: str
    minimo: Optional[Decimal] = None
    maximo: Optional[Decimal] = None
    minimo_exclusivo: bool = False


@dataclass(frozen=True)
class MenorQueCampo:
    """Regra entre campos: valor < outro campo. Ignorada quando o valor é zero."""
    outro_campo: str
    mensagem: str


@dataclass(frozen=True)
class IgualACampo:
    outro_campo: str
    mensagem: str


@dataclass(frozen=True)
class ListaNaoVazia:
    """Lista com ao menos um item, e nenhum item em branco."""
    mensagem: str


@dataclass(frozen=True)
class Escolha:
    opcoes: FrozenSet[str]
    mensagem: str


@dataclass(frozen=True)
class SubcategoriaValida:
    """A subcategoria precisa pertencer à categoria escolhida no outro campo."""
    campo_categoria: str
    mensagem: str


Regra = Union[
    Obrigatorio, TamanhoMinimo, TamanhoMaximo, Padrao, ContagemDigitos,
    Numerico, FaixaNumerica, MenorQueCampo, IgualACampo, ListaNaoVazia,
    Escolha, SubcategoriaValida,
]

RegrasFormulario = Mapping[str, Sequence[Regra]]


@dataclass(frozen=True)
class ResultadoValidacao:
    erros: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(self.erros.values())


# ====================================================================
# 2. VERIFICADORES
# ====================================================================

def esta_vazio(valor: Any) -> bool:
    """None, texto em branco e lista vazia contam como campo não preenchido."""
    if valor is None:
        return True
    if isinstance(valor, str):
        return not valor.strip()
    if isinstance(valor, (list, tuple, set, frozenset)):
        return len(valor) == 0
    return False


def como_decimal(valor: Any) -> Optional[Decimal]:
    """Converte o valor do formulário para Decimal, ou None se não for numérico."""
    if valor is None or isinstance(valor, bool):
        return None
    try:
        numero = Decimal(str(valor).strip())
    except (InvalidOperation, ValueError):
        return None
    if not numero.is_finite():
        return None
    return numero


def _texto(valor: Any) -> str:
    return str(valor).strip()


def _verificar_tamanho_minimo(regra: TamanhoMinimo, valor, valores) -> bool:
    return len(_texto(valor)) >= regra.minimo


def _verificar_tamanho_maximo(regra: TamanhoMaximo, valor, valores) -> bool:
    return len(_texto(valor)) <= regra.maximo


def _verificar_padrao(regra: Padrao, valor, valores) -> bool:
    texto = _texto(valor)
    if regra.remover_espacos:
        texto = re.sub(r"\s", "", texto)
    return re.search(regra.regex, texto) is not None


def _verificar_contagem_digitos(regra: ContagemDigitos, valor, valores) -> bool:
    digitos = re.sub(r"\D", "", _texto(valor))
    return regra.minimo <= len(digitos) <= regra.maximo


def _verificar_numerico(regra: Numerico, valor, valores) -> bool:
    numero = como_decimal(valor)
    if numero is None:
        return False
    if regra.inteiro:
        return numero == numero.to_integral_value()
    return True


def _verificar_faixa(regra: FaixaNumerica, valor, valores) -> bool:
    numero = como_decimal(valor)
    if numero is None:
        # Numerico é quem reporta valores não numéricos
        return True
    if regra.minimo is not None:
        if regra.minimo_exclusivo and numero <= regra.minimo:
            return False
        if not regra.minimo_exclusivo and numero < regra.minimo:
            return False
    if regra.maximo is not None and numero > regra.maximo:
        return False
    return True


def _verificar_menor_que(regra: MenorQueCampo, valor, valores) -> bool:
    numero = como_decimal(valor)
    referencia = como_decimal(valores.get(regra.outro_campo))
    if numero is None or referencia is None or numero == 0:
        return True
    return numero < referencia


def _verificar_igual(regra: IgualACampo, valor, valores) -> bool:
    return valor == valores.get(regra.outro_campo)


def _verificar_lista(regra: ListaNaoVazia, valor, valores) -> bool:
    if isinstance(valor, str) or not isinstance(valor, (list, tuple)):
        return False
    return len(valor) > 0 and all(isinstance(item, str) and item.strip() for item in valor)


def _verificar_escolha(regra: Escolha, valor, valores) -> bool:
    return _texto(valor) in regra.opcoes


def _verificar_subcategoria(regra: SubcategoriaValida, valor, valores) -> bool:
    categoria = valores.get(regra.campo_categoria)
    if esta_vazio(categoria):
        # Sem categoria, o erro é reportado no próprio campo de categoria
        return True
    return _texto(valor) in subcategorias_de(_texto(categoria))


_VERIFICADORES: Dict[type, Callable[[Any, Any, Mapping[str, Any]], bool]] = {
    TamanhoMinimo: _verificar_tamanho_minimo,
    TamanhoMaximo: _verificar_tamanho_maximo,
    Padrao: _verificar_padrao,
    ContagemDigitos: _verificar_contagem_digitos,
    Numerico: _verificar_numerico,
    FaixaNumerica: _verificar_faixa,
    MenorQueCampo: _verificar_menor_que,
    IgualACampo: _verificar_igual,
    ListaNaoVazia: _verificar_lista,
    Escolha: _verificar_escolha,
    SubcategoriaValida: _verificar_subcategoria,
}


# ====================================================================
# 3. API PÚBLICA
# ====================================================================

def validar(
    valores: Mapping[str, Any],
    regras: RegrasFormulario,
    parcial: bool = False,
) -> ResultadoValidacao:
    """
    Aplica as regras campo a campo; a primeira regra que falhar define a mensagem.

    Campos vazios só são avaliados pela regra Obrigatorio. Com `parcial=True`
    (atualizações parciais), campos ausentes de `valores` não são avaliados.
    """
    erros: Dict[str, str] = {}
    for campo, regras_campo in regras.items():
        if parcial and campo not in valores:
            continue
        valor = valores.get(campo)
        vazio = esta_vazio(valor)
        for regra in regras_campo:
            if isinstance(regra, Obrigatorio):
                if vazio:
                    erros[campo] = regra.mensagem
                    break
                continue
            if vazio:
                continue
            if not _VERIFICADORES[type(regra)](regra, valor, valores):
                erros[campo] = regra.mensagem
                break
    return ResultadoValidacao(erros)


def limpar_erro(erros: Mapping[str, str], campo: str) -> Dict[str, str]:
    """Remove o erro de um único campo (o usuário voltou a editá-lo)."""
    return {nome: mensagem for nome, mensagem in erros.items() if nome != campo}


def mesclar_erros(locais: Mapping[str, str], servidor: Mapping[str, str]) -> Dict[str, str]:
    """Mescla os erros por campo devolvidos pelo servidor sobre os erros locais."""
    mesclado = dict(locais)
    mesclado.update({campo: mensagem for campo, mensagem in servidor.items() if mensagem})
    return mesclado


# ====================================================================
# 4. CONJUNTOS DE REGRAS POR FORMULÁRIO
# ====================================================================

# Padrões regionais (Sri Lanka)
PADRAO_CIDADE = r"^[a-zA-Z\s\-']+$"
PADRAO_TELEFONE_ENDERECO = r"^[+\d\s()\-]+$"
PADRAO_TELEFONE_PERFIL = r"^(?:0\d{9}|\+94\d{9})$"
PADRAO_CEP = r"^\d{5,10}$"
PADRAO_EMAIL = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
PADRAO_NOME_ARTESANATO = r"^[A-Za-z\s\-',.]+$"
PADRAO_URL_IMAGEM = r"(?i)^https?://.+\.(?:jpe?g|png|webp|gif|svg)$"
PADRAO_SENHA_FORTE = r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)"

REGRAS_ENDERECO: Dict[str, List[Regra]] = {
    "address": [
        Obrigatorio("Address is required"),
        TamanhoMinimo(5, "Address must be at least 5 characters"),
        TamanhoMaximo(100, "Address should not exceed 100 characters"),
    ],
    "city": [
        Obrigatorio("City is required"),
        Padrao(PADRAO_CIDADE, "City should contain only letters, spaces, hyphens and apostrophes"),
        TamanhoMaximo(50, "City name should not exceed 50 characters"),
    ],
    "phone": [
        Obrigatorio("Phone number is required"),
        ContagemDigitos(8, 15, "Phone number should be between 8 and 15 digits"),
        Padrao(PADRAO_TELEFONE_ENDERECO, "Phone number contains invalid characters"),
    ],
    "pincode": [
        Obrigatorio("Postal/ZIP code is required"),
        Padrao(PADRAO_CEP, "Please enter a valid postal/ZIP code (5-10 digits)", remover_espacos=True),
    ],
    "notes": [
        TamanhoMaximo(200, "Notes should not exceed 200 characters"),
    ],
}

REGRAS_PRODUTO: Dict[str, List[Regra]] = {
    "title": [
        Obrigatorio("Title is required"),
        TamanhoMaximo(100, "Title should not exceed 100 characters"),
    ],
    "description": [
        Obrigatorio("Description is required"),
        TamanhoMinimo(10, "Description must be at least 10 characters"),
    ],
    "category": [
        Obrigatorio("Category is required"),
        Escolha(frozenset(c.value for c in CategoriaProduto), "Please select a valid category"),
    ],
    "subcategory": [
        Obrigatorio("Subcategory is required"),
        SubcategoriaValida("category", "Subcategory does not belong to the selected category"),
    ],
    "price": [
        Obrigatorio("Price is required"),
        Numerico("Price must be a valid number"),
        FaixaNumerica("Price must be a positive number", minimo=Decimal("0"), minimo_exclusivo=True),
    ],
    "salePrice": [
        Numerico("Sale price must be a valid number"),
        FaixaNumerica("Sale price cannot be negative", minimo=Decimal("0")),
        MenorQueCampo("price", "Sale price must be less than the regular price"),
    ],
    "totalStock": [
        Obrigatorio("Total stock is required"),
        Numerico("Total stock must be a whole number", inteiro=True),
        FaixaNumerica("Total stock cannot be negative", minimo=Decimal("0")),
    ],
    "image": [
        Obrigatorio("Image is required"),
    ],
}

REGRAS_PORTFOLIO: Dict[str, List[Regra]] = {
    "name": [
        Obrigatorio("Product name is required"),
        TamanhoMinimo(3, "Product name must be at least 3 characters"),
        Padrao(PADRAO_NOME_ARTESANATO, "Name can only contain letters, spaces, and basic punctuation"),
    ],
    "category": [
        Obrigatorio("Please select a category"),
        Escolha(frozenset(c.value for c in CategoriaPortfolio), "Please select a valid category"),
    ],
    "craftType": [
        Obrigatorio("Craft type is required"),
        Padrao(PADRAO_NOME_ARTESANATO, "Craft type can only contain letters and spaces"),
    ],
    "price": [
        Obrigatorio("Price is required"),
        Numerico("Price must be a valid number"),
        FaixaNumerica("Price must be greater than zero", minimo=Decimal("0"), minimo_exclusivo=True),
    ],
    "description": [
        Obrigatorio("Description is required"),
        TamanhoMinimo(20, "Description should be at least 20 characters"),
    ],
    "image": [
        Obrigatorio("Image URL is required"),
        Padrao(PADRAO_URL_IMAGEM, "Please enter a valid image URL (jpg, png, webp, gif, svg)"),
    ],
    "materials": [
        Obrigatorio("Add at least one valid material"),
        ListaNaoVazia("Add at least one valid material"),
    ],
    "rating": [
        Obrigatorio("Rating is required"),
        Numerico("Rating must be between 0 and 5"),
        FaixaNumerica("Rating must be between 0 and 5", minimo=Decimal("0"), maximo=Decimal("5")),
    ],
    "reviews": [
        Obrigatorio("Number of reviews is required"),
        Numerico("Reviews must be a non-negative whole number", inteiro=True),
        FaixaNumerica("Reviews must be a non-negative whole number", minimo=Decimal("0")),
    ],
    "sold": [
        Obrigatorio("Units sold is required"),
        Numerico("Units sold must be a non-negative whole number", inteiro=True),
        FaixaNumerica("Units sold must be a non-negative whole number", minimo=Decimal("0")),
    ],
}

REGRAS_PERFIL: Dict[str, List[Regra]] = {
    "userName": [
        Obrigatorio("Name is required"),
        TamanhoMinimo(3, "Name must be at least 3 characters"),
    ],
    "email": [
        Obrigatorio("Email is required"),
        Padrao(PADRAO_EMAIL, "Please enter a valid email address"),
    ],
    "phone": [
        Padrao(PADRAO_TELEFONE_PERFIL, "Please enter a valid Sri Lankan phone number", remover_espacos=True),
    ],
    "bio": [
        TamanhoMaximo(300, "Bio must be less than 300 characters"),
    ],
    "location": [
        TamanhoMaximo(100, "Location should not exceed 100 characters"),
    ],
}

REGRAS_SENHA: Dict[str, List[Regra]] = {
    "currentPassword": [
        Obrigatorio("Current password is required"),
    ],
    "newPassword": [
        Obrigatorio("New password is required"),
        TamanhoMinimo(8, "Password must be at least 8 characters"),
        Padrao(PADRAO_SENHA_FORTE, "Password must include uppercase, lowercase, and numbers"),
    ],
    "confirmPassword": [
        Obrigatorio("Please confirm your new password"),
        IgualACampo("newPassword", "Passwords do not match"),
    ],
}

REGRAS_DOACAO: Dict[str, List[Regra]] = {
    "amount": [
        Obrigatorio("Please enter a valid donation amount"),
        Numerico("Please enter a valid donation amount"),
        FaixaNumerica("Please enter a valid donation amount", minimo=Decimal("0"), minimo_exclusivo=True),
    ],
    "message": [
        TamanhoMaximo(500, "Message should not exceed 500 characters"),
    ],
}

# Nota 0 = nenhuma estrela marcada
REGRAS_AVALIACAO: Dict[str, List[Regra]] = {
    "reviewValue": [
        Obrigatorio("Please select a rating"),
        Numerico("Rating must be a whole number from 1 to 5", inteiro=True),
        FaixaNumerica("Please select a rating", minimo=Decimal("1")),
        FaixaNumerica("Rating must be a whole number from 1 to 5", maximo=Decimal("5")),
    ],
    "reviewMessage": [
        Obrigatorio("Please enter a review message"),
        TamanhoMaximo(1000, "Review should not exceed 1000 characters"),
    ],
}
