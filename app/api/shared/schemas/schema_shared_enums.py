from enum import Enum


class PedidoStatusEnum(str, Enum):
    PENDENTE = "pending"
    EM_PREPARO = "preparing"
    EMBALANDO = "packing"
    PRONTO_ENTREGA = "ready_for_delivery"
    SAIU_PARA_ENTREGA = "out_for_delivery"
    PRONTO_RETIRADA = "ready_for_pickup"
    CONCLUIDO = "completed"
    CANCELADO = "cancelled"


class TipoEntregaEnum(str, Enum):
    DELIVERY = "delivery"
    RETIRADA = "pickup"
    LOCAL = "dine-in"


class FormaPagamentoEnum(str, Enum):
    PIX = "pix"
    CARTAO = "card"
    DINHEIRO = "cash"


class TipoCartaoEnum(str, Enum):
    CREDITO = "credit"
    DEBITO = "debit"


class PagamentoStatusEnum(str, Enum):
    PENDENTE = "pending"
    APROVADO = "approved"
    RECUSADO = "rejected"
    EXPIRADO = "expired"


class PagamentoGatewayEnum(str, Enum):
    MOCK = "mock"
    MERCADOPAGO = "mercadopago"


class CategoriaIngredienteEnum(str, Enum):
    INGREDIENTE = "ingredient"
    EMBALAGEM = "packaging"
    ACOMPANHAMENTO = "accompaniment"


class TipoUnidadeEnum(str, Enum):
    PESO = "weight"      # estoque em kg
    UNIDADE = "unit"     # estoque em contagem inteira


class TipoCupomEnum(str, Enum):
    PERCENTUAL = "percentage"
    FIXO = "fixed"
