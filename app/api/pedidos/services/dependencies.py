from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.catalogo.adapters.produto_adapter import ProdutoAdapter
from app.api.catalogo.contracts.produto_contract import IProdutoContract
from app.api.estoque.adapters.estoque_adapter import EstoqueAdapter
from app.api.estoque.contracts.estoque_contract import IEstoqueContract
from app.api.pedidos.services.service_pedido import PedidoService
from app.database.db_connection import get_db


def get_produto_contract(db: Session = Depends(get_db)) -> IProdutoContract:
    return ProdutoAdapter(db)


def get_estoque_contract(db: Session = Depends(get_db)) -> IEstoqueContract:
    return EstoqueAdapter(db)


def get_pedido_service(
    db: Session = Depends(get_db),
    produto_contract: IProdutoContract = Depends(get_produto_contract),
    estoque_contract: IEstoqueContract = Depends(get_estoque_contract),
) -> PedidoService:
    return PedidoService(db, produto_contract=produto_contract, estoque_contract=estoque_contract)
