# empowerhub/core/testes_validacao.py

import unittest
from decimal import Decimal

from empowerhub.core.formularios import FORMULARIO_ENDERECO, FORMULARIO_PRODUTO, para_dict
from empowerhub.core.validacao import (
    REGRAS_AVALIACAO,
    REGRAS_DOACAO,
    REGRAS_ENDERECO,
    REGRAS_PERFIL,
    REGRAS_PORTFOLIO,
    REGRAS_PRODUTO,
    REGRAS_SENHA,
    Obrigatorio,
    como_decimal,
    esta_vazio,
    limpar_erro,
    mesclar_erros,
    validar,
)


def produto_valido(**mudancas):
    dados = {
        "title": "Handwoven basket",
        "description": "A sturdy basket woven by hand from palm leaves.",
        "category": "handcraft",
        "subcategory": "handcraft-textiles",
        "price": "1500",
        "salePrice": "",
        "totalStock": "12",
        "image": "https://cdn.example.com/basket.png",
    }
    dados.update(mudancas)
    return dados


def endereco_valido(**mudancas):
    dados = {
        "address": "12 Temple Road",
        "city": "Kandy",
        "phone": "+94 77 123 4567",
        "pincode": "20000",
        "notes": "",
    }
    dados.update(mudancas)
    return dados


class TestValidacaoProduto(unittest.TestCase):

    def test_produto_valido_nao_tem_erros(self):
        resultado = validar(produto_valido(), REGRAS_PRODUTO)

        self.assertTrue(resultado.is_valid)
        self.assertEqual(resultado.erros, {})

    def test_preco_promocional_igual_ou_maior_que_preco_falha(self):
        """
        Cenário: preço promocional maior ou igual ao preço é rejeitado,
        e o erro fica no campo salePrice.
        """
        for promocional in ("100", "150"):
            # ACT
            resultado = validar(produto_valido(price="100", salePrice=promocional), REGRAS_PRODUTO)

            # ASSERT
            self.assertFalse(resultado.is_valid)
            self.assertEqual(
                resultado.erros["salePrice"], "Sale price must be less than the regular price"
            )

    def test_preco_promocional_zero_e_ignorado(self):
        resultado = validar(produto_valido(salePrice="0"), REGRAS_PRODUTO)

        self.assertNotIn("salePrice", resultado.erros)

    def test_preco_promocional_negativo_falha(self):
        resultado = validar(produto_valido(salePrice="-5"), REGRAS_PRODUTO)

        self.assertEqual(resultado.erros["salePrice"], "Sale price cannot be negative")

    def test_preco_deve_ser_positivo(self):
        resultado = validar(produto_valido(price="0"), REGRAS_PRODUTO)

        self.assertEqual(resultado.erros["price"], "Price must be a positive number")

    def test_preco_nao_numerico(self):
        resultado = validar(produto_valido(price="abc"), REGRAS_PRODUTO)

        self.assertEqual(resultado.erros["price"], "Price must be a valid number")

    def test_estoque_precisa_ser_inteiro_nao_negativo(self):
        self.assertEqual(
            validar(produto_valido(totalStock="2.5"), REGRAS_PRODUTO).erros["totalStock"],
            "Total stock must be a whole number",
        )
        self.assertEqual(
            validar(produto_valido(totalStock="-1"), REGRAS_PRODUTO).erros["totalStock"],
            "Total stock cannot be negative",
        )
        self.assertNotIn("totalStock", validar(produto_valido(totalStock=0), REGRAS_PRODUTO).erros)

    def test_subcategoria_de_outra_categoria_falha(self):
        resultado = validar(produto_valido(category="men", subcategory="handcraft-pottery"), REGRAS_PRODUTO)

        self.assertIn("subcategory", resultado.erros)
        self.assertNotIn("category", resultado.erros)

    def test_categoria_desconhecida_falha(self):
        resultado = validar(produto_valido(category="toys"), REGRAS_PRODUTO)

        self.assertEqual(resultado.erros["category"], "Please select a valid category")

    def test_campos_vazios_so_reportam_obrigatorio(self):
        resultado = validar({}, REGRAS_PRODUTO)

        self.assertEqual(resultado.erros["title"], "Title is required")
        self.assertEqual(resultado.erros["price"], "Price is required")
        # salePrice é opcional
        self.assertNotIn("salePrice", resultado.erros)

    def test_validacao_parcial_ignora_campos_ausentes(self):
        resultado = validar({"price": "200"}, REGRAS_PRODUTO, parcial=True)

        self.assertTrue(resultado.is_valid)

    def test_validar_e_pura(self):
        """Cenário: chamar duas vezes com os mesmos valores dá o mesmo resultado."""
        dados = produto_valido(title="")

        self.assertEqual(validar(dados, REGRAS_PRODUTO), validar(dados, REGRAS_PRODUTO))


class TestValidacaoEndereco(unittest.TestCase):

    def test_endereco_valido(self):
        self.assertTrue(validar(endereco_valido(), REGRAS_ENDERECO).is_valid)

    def test_endereco_curto_e_longo(self):
        self.assertEqual(
            validar(endereco_valido(address="abc"), REGRAS_ENDERECO).erros["address"],
            "Address must be at least 5 characters",
        )
        self.assertEqual(
            validar(endereco_valido(address="a" * 101), REGRAS_ENDERECO).erros["address"],
            "Address should not exceed 100 characters",
        )

    def test_cidade_com_digitos_falha(self):
        resultado = validar(endereco_valido(city="Kandy 2"), REGRAS_ENDERECO)

        self.assertIn("city", resultado.erros)

    def test_cidade_aceita_hifen_e_apostrofo(self):
        self.assertTrue(validar(endereco_valido(city="Nuwara-Eliya's"), REGRAS_ENDERECO).is_valid)

    def test_telefone_conta_digitos(self):
        self.assertEqual(
            validar(endereco_valido(phone="123-45"), REGRAS_ENDERECO).erros["phone"],
            "Phone number should be between 8 and 15 digits",
        )
        self.assertEqual(
            validar(endereco_valido(phone="0771234567#"), REGRAS_ENDERECO).erros["phone"],
            "Phone number contains invalid characters",
        )

    def test_cep_ignora_espacos(self):
        self.assertTrue(validar(endereco_valido(pincode="200 00"), REGRAS_ENDERECO).is_valid)
        self.assertIn("pincode", validar(endereco_valido(pincode="2000"), REGRAS_ENDERECO).erros)

    def test_observacoes_limitadas(self):
        resultado = validar(endereco_valido(notes="x" * 201), REGRAS_ENDERECO)

        self.assertEqual(resultado.erros["notes"], "Notes should not exceed 200 characters")


class TestValidacaoDemaisFormularios(unittest.TestCase):

    def test_portfolio(self):
        dados = {
            "name": "Clay pot",
            "category": "topRated",
            "craftType": "Pottery",
            "price": "2500",
            "description": "Traditional clay pot fired in a village kiln.",
            "image": "https://cdn.example.com/pot.jpg",
            "materials": ["clay"],
            "rating": "4.5",
            "reviews": "10",
            "sold": "3",
        }
        self.assertTrue(validar(dados, REGRAS_PORTFOLIO).is_valid)

        dados.update(materials=["", " "], rating="6", image="pot.bmp")
        erros = validar(dados, REGRAS_PORTFOLIO).erros
        self.assertEqual(set(erros), {"materials", "rating", "image"})

    def test_perfil_telefone_regional(self):
        self.assertTrue(validar({"phone": "0771234567"}, REGRAS_PERFIL, parcial=True).is_valid)
        self.assertTrue(validar({"phone": "+94 771234567"}, REGRAS_PERFIL, parcial=True).is_valid)
        self.assertFalse(validar({"phone": "12345"}, REGRAS_PERFIL, parcial=True).is_valid)

    def test_perfil_email_invalido(self):
        resultado = validar({"userName": "Nimal", "email": "nimal@"}, REGRAS_PERFIL)

        self.assertEqual(resultado.erros, {"email": "Please enter a valid email address"})

    def test_senha(self):
        erros = validar(
            {"currentPassword": "x", "newPassword": "fraca", "confirmPassword": "outra"},
            REGRAS_SENHA,
        ).erros

        self.assertEqual(erros["newPassword"], "Password must be at least 8 characters")
        self.assertEqual(erros["confirmPassword"], "Passwords do not match")

        erros = validar(
            {"currentPassword": "x", "newPassword": "semnumeroS", "confirmPassword": "semnumeroS"},
            REGRAS_SENHA,
        ).erros
        self.assertEqual(erros, {"newPassword": "Password must include uppercase, lowercase, and numbers"})

    def test_doacao_valor_positivo(self):
        self.assertFalse(validar({"amount": "0"}, REGRAS_DOACAO).is_valid)
        self.assertFalse(validar({"amount": "abc"}, REGRAS_DOACAO).is_valid)
        self.assertTrue(validar({"amount": Decimal("5.00")}, REGRAS_DOACAO).is_valid)

    def test_avaliacao_exige_nota_de_1_a_5_e_comentario(self):
        """Cenário: nota 0 significa nenhuma estrela marcada."""
        erros = validar({"reviewValue": 0, "reviewMessage": "  "}, REGRAS_AVALIACAO).erros

        self.assertEqual(erros, {
            "reviewValue": "Please select a rating",
            "reviewMessage": "Please enter a review message",
        })
        self.assertIn("reviewValue", validar({"reviewValue": 6, "reviewMessage": "ok"}, REGRAS_AVALIACAO).erros)
        self.assertIn("reviewValue", validar({"reviewValue": "4.5", "reviewMessage": "ok"}, REGRAS_AVALIACAO).erros)
        self.assertTrue(validar({"reviewValue": 5, "reviewMessage": "Lovely pot"}, REGRAS_AVALIACAO).is_valid)


class TestErrosDeCampo(unittest.TestCase):

    def test_reenviar_limpa_so_o_campo_corrigido(self):
        """
        Cenário: o formulário tem dois erros; o usuário corrige um campo e
        reenvia. Exatamente um erro desaparece.
        """
        # ARRANGE
        dados = endereco_valido(address="abc", city="123")
        erros = validar(dados, REGRAS_ENDERECO).erros
        self.assertEqual(set(erros), {"address", "city"})

        # ACT: edição do campo limpa só o erro dele
        erros_em_edicao = limpar_erro(erros, "address")
        dados["address"] = "12 Temple Road"
        erros_reenvio = validar(dados, REGRAS_ENDERECO).erros

        # ASSERT
        self.assertEqual(set(erros_em_edicao), {"city"})
        self.assertEqual(set(erros_reenvio), {"city"})

    def test_mesclar_erros_do_servidor(self):
        mesclado = mesclar_erros({"city": "local"}, {"pincode": "Unknown postal code", "city": ""})

        self.assertEqual(mesclado, {"city": "local", "pincode": "Unknown postal code"})

    def test_auxiliares(self):
        self.assertTrue(esta_vazio("   "))
        self.assertTrue(esta_vazio([]))
        self.assertFalse(esta_vazio(0))
        self.assertIsNone(como_decimal("NaN"))
        self.assertIsNone(como_decimal(True))
        self.assertEqual(como_decimal(" 12.50 "), Decimal("12.50"))


class TestFormularios(unittest.TestCase):

    def test_subcategoria_depende_da_categoria(self):
        subcategoria = next(c for c in FORMULARIO_PRODUTO if c.nome == "subcategory")

        sem_categoria = para_dict(subcategoria)
        com_categoria = para_dict(subcategoria, {"category": "accessories"})

        self.assertEqual(sem_categoria["options"], [])
        self.assertEqual(
            [opcao["id"] for opcao in com_categoria["options"]],
            ["accessories-watches", "accessories-bags"],
        )

    def test_tipos_de_controle(self):
        tipos = {c.nome: para_dict(c)["componentType"] for c in FORMULARIO_PRODUTO}

        self.assertEqual(tipos["description"], "textarea")
        self.assertEqual(tipos["category"], "select")
        self.assertEqual(tipos["price"], "number")
        self.assertEqual(para_dict(FORMULARIO_PRODUTO[4])["min"], 0)
        self.assertNotIn("options", para_dict(FORMULARIO_ENDERECO[0]))

    def test_formulario_de_produto_cobre_os_campos_obrigatorios(self):
        controles = {c.nome: c for c in FORMULARIO_PRODUTO}
        obrigatorios = {
            campo for campo, regras in REGRAS_PRODUTO.items()
            if any(isinstance(regra, Obrigatorio) for regra in regras)
        }

        self.assertTrue(obrigatorios <= set(controles))
        self.assertTrue(controles["image"].obrigatorio)


if __name__ == '__main__':
    unittest.main()
