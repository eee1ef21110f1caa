# empowerhub/core/formularios.py
"""
Definição dos controles de formulário exibidos pelo frontend.

Cada tipo de controle é uma dataclass própria, com apenas os atributos de que
precisa. O frontend recebe a lista serializada (ver `para_dict`) e monta o
formulário; as regras de validação ficam em `validacao.py`.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from empowerhub.core.entities import CategoriaProduto, subcategorias_de


@dataclass(frozen=True)
class Opcao:
    id: str
    rotulo: str


@dataclass(frozen=True)
class CampoTexto:
    nome: str
    rotulo: str
    placeholder: str = ""
    obrigatorio: bool = False
    ajuda: str = ""


@dataclass(frozen=True)
class CampoAreaTexto:
    nome: str
    rotulo: str
    placeholder: str = ""
    obrigatorio: bool = False
    ajuda: str = ""


@dataclass(frozen=True)
class CampoSelecao:
    nome: str
    rotulo: str
    opcoes: Tuple[Opcao, ...] = ()
    placeholder: str = ""
    obrigatorio: bool = False
    ajuda: str = ""
    # Campo cujo valor define as opções deste (ex: subcategoria depende de categoria)
    depende_de: Optional[str] = None


@dataclass(frozen=True)
class CampoNumero:
    nome: str
    rotulo: str
    minimo: Optional[int] = None
    placeholder: str = ""
    obrigatorio: bool = False
    ajuda: str = ""


Controle = Union[CampoTexto, CampoAreaTexto, CampoSelecao, CampoNumero]

_TIPO_CONTROLE = {
    CampoTexto: "input",
    CampoAreaTexto: "textarea",
    CampoSelecao: "select",
    CampoNumero: "number",
}

_ROTULOS_CATEGORIA = {
    CategoriaProduto.MEN: "Men",
    CategoriaProduto.WOMEN: "Women",
    CategoriaProduto.KIDS: "Kids",
    CategoriaProduto.ACCESSORIES: "Accessories",
    CategoriaProduto.FOOTWEAR: "Footwear",
    CategoriaProduto.AGRICULTURE: "Agriculture",
    CategoriaProduto.HEALTHCARE: "Healthcare",
    CategoriaProduto.HANDCRAFT: "Handcraft",
}


def opcoes_subcategoria(categoria: str) -> Tuple[Opcao, ...]:
    """Opções do select de subcategoria para a categoria escolhida."""
    return tuple(Opcao(id=chave, rotulo=rotulo) for chave, rotulo in subcategorias_de(categoria).items())


FORMULARIO_PRODUTO: Tuple[Controle, ...] = (
    CampoTexto("title", "Title", placeholder="Enter product title", obrigatorio=True,
               ajuda="A descriptive title helps customers find your product"),
    CampoAreaTexto("description", "Description", placeholder="Enter product description", obrigatorio=True,
                   ajuda="Describe your product in detail (at least 10 characters)"),
    CampoSelecao("category", "Category",
                 opcoes=tuple(Opcao(c.value, rotulo) for c, rotulo in _ROTULOS_CATEGORIA.items()),
                 placeholder="Select product category", obrigatorio=True,
                 ajuda="Choose the primary category for your product"),
    CampoSelecao("subcategory", "Subcategory", placeholder="Select product subcategory", obrigatorio=True,
                 ajuda="Choose a specific subcategory for better classification", depende_de="category"),
    CampoNumero("price", "Price", minimo=0, placeholder="Enter product price", obrigatorio=True,
                ajuda="Must be a positive number"),
    CampoNumero("salePrice", "Sale Price", minimo=0, placeholder="Enter sale price (optional)",
                ajuda="If on sale, must be positive and less than regular price"),
    CampoNumero("totalStock", "Total Stock", minimo=0, placeholder="Enter total stock", obrigatorio=True,
                ajuda="Number of items available for sale (minimum 0)"),
    CampoTexto("image", "Image", placeholder="Enter the uploaded image URL", obrigatorio=True,
               ajuda="Upload the product image first, then paste its URL here"),
)

FORMULARIO_ENDERECO: Tuple[Controle, ...] = (
    CampoTexto("address", "Address", placeholder="Enter your address", obrigatorio=True),
    CampoTexto("city", "City", placeholder="Enter your city", obrigatorio=True),
    CampoTexto("pincode", "Pincode", placeholder="Enter your pincode", obrigatorio=True),
    CampoTexto("phone", "Phone", placeholder="Enter your phone number", obrigatorio=True),
    CampoAreaTexto("notes", "Notes", placeholder="Enter any additional notes"),
)

FORMULARIO_AVALIACAO: Tuple[Controle, ...] = (
    CampoNumero("reviewValue", "Rating", minimo=1, obrigatorio=True, ajuda="From 1 to 5 stars"),
    CampoAreaTexto("reviewMessage", "Review", placeholder="Write a review...", obrigatorio=True),
)

FORMULARIOS: Dict[str, Tuple[Controle, ...]] = {
    "produto": FORMULARIO_PRODUTO,
    "endereco": FORMULARIO_ENDERECO,
    "avaliacao": FORMULARIO_AVALIACAO,
}


def para_dict(controle: Controle, valores: Optional[Dict[str, str]] = None) -> Dict:
    """Serializa um controle; selects dependentes recebem as opções do valor atual."""
    dados = {
        "name": controle.nome,
        "label": controle.rotulo,
        "componentType": _TIPO_CONTROLE[type(controle)],
        "placeholder": controle.placeholder,
        "required": controle.obrigatorio,
        "helpText": controle.ajuda,
    }
    if isinstance(controle, CampoSelecao):
        opcoes = controle.opcoes
        if controle.depende_de:
            opcoes = opcoes_subcategoria((valores or {}).get(controle.depende_de, ""))
        dados["options"] = [{"id": o.id, "label": o.rotulo} for o in opcoes]
    if isinstance(controle, CampoNumero) and controle.minimo is not None:
        dados["min"] = controle.minimo
    return dados
