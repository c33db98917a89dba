from decimal import Decimal
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.cupons.core.regras_cupom import ResultadoCupom, validar_cupom, MOTIVO_ESGOTADO
from app.api.cupons.models.model_cupom import CupomModel
from app.api.cupons.repositories.repo_cupom import CupomRepository
from app.api.cupons.schemas.schema_cupom import CupomCreate, CupomUpdate, ValidarCupomResponse, CupomPublicoOut
from app.utils.logger import logger


class CuponsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CupomRepository(db)

    # ---------------- CRUD ----------------
    def create(self, data: CupomCreate) -> CupomModel:
        if self.repo.get_by_code(data.codigo):
            raise HTTPException(status.HTTP_409_CONFLICT, f"Já existe um cupom com o código {data.codigo}")
        cupom = CupomModel(**data.model_dump(), usos_atuais=0)
        self.repo.create(cupom)
        logger.info(f"[Cupons] Cupom criado - codigo={cupom.codigo} tipo={cupom.tipo.value} valor={cupom.valor}")
        return cupom

    def update(self, cupom_id: int, data: CupomUpdate) -> CupomModel:
        cupom = self.get(cupom_id)
        for key, value in data.model_dump(exclude_none=True).items():
            setattr(cupom, key, value)
        self.repo.update(cupom)
        return cupom

    def list(self) -> List[CupomModel]:
        return self.repo.list()

    def get(self, cupom_id: int) -> CupomModel:
        cupom = self.repo.get(cupom_id)
        if not cupom:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Cupom não encontrado")
        return cupom

    def delete(self, cupom_id: int):
        self.repo.delete(self.get(cupom_id))

    # ---------------- VALIDAÇÃO ----------------
    def avaliar(self, codigo: str, subtotal: Decimal) -> ResultadoCupom:
        return validar_cupom(self.repo.get_by_code(codigo), subtotal)

    def validar(self, codigo: str, subtotal: Decimal) -> ValidarCupomResponse:
        """Validação consultiva usada no carrinho: não consome uso do cupom."""
        resultado = self.avaliar(codigo, subtotal)
        if not resultado.valido:
            logger.info(f"[Cupons] Cupom recusado - codigo={codigo} motivo={resultado.motivo}")
            return ValidarCupomResponse(valido=False, motivo=resultado.motivo)

        return ValidarCupomResponse(
            valido=True,
            desconto=float(resultado.desconto),
            cupom=CupomPublicoOut.model_validate(resultado.cupom),
        )

    def consumir(self, codigo: str, subtotal: Decimal) -> ResultadoCupom:
        """
        Revalida e incrementa o uso do cupom dentro da transação corrente.
        Chamado apenas na criação do pedido.
        """
        resultado = self.avaliar(codigo, subtotal)
        if not resultado.valido:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, resultado.motivo)

        if not self.repo.incrementar_uso(resultado.cupom.id):
            # outro checkout consumiu o último uso entre a validação e o UPDATE
            raise HTTPException(status.HTTP_400_BAD_REQUEST, MOTIVO_ESGOTADO)

        logger.info(f"[Cupons] Uso registrado - codigo={resultado.cupom.codigo} desconto={resultado.desconto}")
        return resultado
