# recortes/constants.py
"""
Valores aceitos nos campos enumerados de um recorte.

Cada campo mapeia para o código de erro devolvido quando o valor não
pertence ao conjunto.
"""

TIPOS_RECORTE = ("frente", "aba", "lateral")
POSICOES = ("frente", "traseira")
TIPOS_PRODUTO = ("americano", "trucker")
MATERIAIS = ("linho",)
CORES = ("azul marinho", "laranja")

# campo -> (valores aceitos, código de erro, rótulo para a mensagem)
ENUM_FIELDS = {
    "tipoRecorte": (TIPOS_RECORTE, "INVALID_TIPO_RECORTE", "Tipo de recorte inválido"),
    "posicao": (POSICOES, "INVALID_POSICAO", "Posição inválida"),
    "tipoProduto": (TIPOS_PRODUTO, "INVALID_TIPO_PRODUTO", "Tipo de produto inválido"),
    "material": (MATERIAIS, "INVALID_MATERIAL", "Material inválido"),
    "cor": (CORES, "INVALID_COR", "Cor inválida"),
}

REQUIRED_FIELDS = (
    "nome",
    "ordem",
    "sku",
    "tipoRecorte",
    "posicao",
    "tipoProduto",
    "material",
    "cor",
)

SORT_FIELDS = ("ordem", "nome", "createdAt")
SORT_ORDERS = ("asc", "desc")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
