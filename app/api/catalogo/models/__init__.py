from .model_produto import ProdutoModel
from .model_receita import ReceitaIngredienteModel, ReceitaExtraModel

__all__ = [
    "ProdutoModel",
    "ReceitaIngredienteModel",
    "ReceitaExtraModel",
]
