from typing import List, Optional

from sqlalchemy import update, or_
from sqlalchemy.orm import Session

from app.api.cupons.models.model_cupom import CupomModel


class CupomRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---------------- CUPOM ----------------
    def get(self, id_: int) -> Optional[CupomModel]:
        return self.db.get(CupomModel, id_)

    def get_by_code(self, codigo: str) -> Optional[CupomModel]:
        return (
            self.db.query(CupomModel)
            .filter(CupomModel.codigo == codigo.strip().upper())
            .first()
        )

    def list(self) -> List[CupomModel]:
        return self.db.query(CupomModel).order_by(CupomModel.codigo).all()

    def create(self, obj: CupomModel) -> CupomModel:
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, obj: CupomModel) -> CupomModel:
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, obj: CupomModel):
        self.db.delete(obj)
        self.db.commit()

    # ---------------- USO ----------------
    def incrementar_uso(self, cupom_id: int) -> bool:
        """
        Incrementa `usos_atuais` somente se ainda houver uso disponível.

        UPDATE condicional: dois checkouts simultâneos disputando o último uso
        não conseguem ambos passar. Não faz commit; roda na transação do pedido.
        """
        resultado = self.db.execute(
            update(CupomModel)
            .where(
                CupomModel.id == cupom_id,
                CupomModel.ativo.is_(True),
                or_(CupomModel.max_usos == -1, CupomModel.usos_atuais < CupomModel.max_usos),
            )
            .values(usos_atuais=CupomModel.usos_atuais + 1)
            .execution_options(synchronize_session="fetch")
        )
        return resultado.rowcount == 1
