from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from app.api.estoque.contracts.estoque_contract import IEstoqueContract
from app.api.estoque.core.consumo_receita import BaixaCalculada
from app.api.estoque.core.snapshot import IngredienteSnapshot
from app.api.estoque.services.service_estoque import EstoqueService


class EstoqueAdapter(IEstoqueContract):
    def __init__(self, db: Session):
        self.service = EstoqueService(db)

    def snapshot(self) -> Dict[int, IngredienteSnapshot]:
        return self.service.snapshot_estoque()

    def aplicar_consumo(self, baixas: Iterable[BaixaCalculada], pedido_id: Optional[int] = None) -> Dict[int, Decimal]:
        return self.service.aplicar_consumo(baixas, pedido_id=pedido_id)
