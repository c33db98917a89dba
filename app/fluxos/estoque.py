from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Set

from app.api.estoque.schemas.schema_estoque import (
    DisponibilidadeResponse,
    IngredienteEstoqueOut,
    IngredienteResumoOut,
)
from app.config import settings
from app.fluxos.agendador import Agendador
from app.fluxos.contracts.loja_contract import ILojaContract
from app.fluxos.exceptions import LojaIndisponivelError
from app.utils.logger import logger

TIMER_ESTOQUE = "estoque"


class MonitorEstoque:
    """
    Mantém o último retrato de disponibilidade do estoque.

    O carrinho consulta `pode_adicionar` antes de aceitar um produto. Se a
    loja não responder, o retrato anterior continua valendo até o próximo tick.
    """

    def __init__(self, loja: ILojaContract, agendador: Optional[Agendador] = None):
        self.loja = loja
        self.agendador = agendador or Agendador()
        self.produtos_indisponiveis: Set[int] = set()
        self.ingredientes_zerados: List[IngredienteResumoOut] = []
        self.ingredientes_baixos: List[IngredienteResumoOut] = []
        self.carregado = False

    async def atualizar(self) -> DisponibilidadeResponse:
        disponibilidade = await self.loja.consultar_disponibilidade()
        self.produtos_indisponiveis = set(disponibilidade.produtos_indisponiveis)
        self.ingredientes_zerados = list(disponibilidade.ingredientes_zerados)
        self.ingredientes_baixos = list(disponibilidade.ingredientes_baixos)
        self.carregado = True
        return disponibilidade

    async def _tick(self) -> None:
        try:
            await self.atualizar()
        except LojaIndisponivelError as e:
            logger.warning(f"[Fluxos] Estoque não atualizado, mantendo retrato anterior: {e.mensagem}")

    def iniciar(self, intervalo: Optional[float] = None) -> None:
        intervalo = settings.INTERVALO_ATUALIZACAO_ESTOQUE_SEGUNDOS if intervalo is None else intervalo
        self.agendador.periodico(TIMER_ESTOQUE, intervalo, self._tick)

    def parar(self) -> None:
        self.agendador.cancelar(TIMER_ESTOQUE)

    def pode_adicionar(self, produto_id: int) -> bool:
        return produto_id not in self.produtos_indisponiveis

    async def repor(self, ingrediente_id: int, quantidade: Decimal, preco: Decimal) -> IngredienteEstoqueOut:
        ingrediente = await self.loja.repor_ingrediente(ingrediente_id, quantidade, preco)
        logger.info(f"[Fluxos] Reposição de {quantidade} em '{ingrediente.nome}' registrada")
        await self._tick()
        return ingrediente
