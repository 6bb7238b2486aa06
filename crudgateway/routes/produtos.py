"""
CRUD Gateway: Produto Route Handlers (MySQL)
=============================================

What:  Schema initialization and CRUD for products.
How:   Handlers receive a session from `get_db_session`, which has already
       checked out a pooled connection and selected the database; the
       connection returns to the pool when the request ends, error or not.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from crudgateway.database import get_db_session
from crudgateway.dependencies import get_produto_service
from crudgateway.logger import log_info
from crudgateway.schemas.common import ErrorResponse, MessageResponse
from crudgateway.schemas.produto import ProdutoCreated, ProdutoIn, ProdutoResponse
from crudgateway.services.produto_service import ProdutoService

router = APIRouter(tags=["CRUD MySQL"])

NOT_FOUND_RESPONSE = {404: {"description": "Produto não encontrado", "model": ErrorResponse}}
ERROR_RESPONSE = {500: {"description": "Erro no MySQL", "model": ErrorResponse}}


@router.post(
    "/init-db",
    response_class=PlainTextResponse,
    responses=ERROR_RESPONSE,
    summary="Criar banco de dados e tabela",
)
async def init_db(
    request: Request,
    service: ProdutoService = Depends(get_produto_service),
) -> str:
    """Safe to call repeatedly; existing database and table are left as they are."""
    await service.init_db(request.app.state.backends.engine, request.app.state.settings.db_name)
    log_info("Banco de dados inicializado", request)
    return "Banco de dados e tabela criados com sucesso."


@router.get(
    "/produtos",
    response_model=List[ProdutoResponse],
    responses=ERROR_RESPONSE,
    summary="Listar produtos",
)
async def listar_produtos(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: ProdutoService = Depends(get_produto_service),
) -> List[ProdutoResponse]:
    produtos = await service.list_all(db)
    log_info("Produtos encontrados", request)
    return produtos


@router.get(
    "/produtos/{produto_id}",
    response_model=ProdutoResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Buscar produto por id",
)
async def buscar_produto(
    produto_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: ProdutoService = Depends(get_produto_service),
) -> ProdutoResponse:
    produto = await service.get(db, produto_id)
    log_info("Produto encontrado", request)
    return produto


@router.post(
    "/produtos",
    status_code=201,
    response_model=ProdutoCreated,
    responses=ERROR_RESPONSE,
    summary="Criar produto",
)
async def criar_produto(
    payload: ProdutoIn,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: ProdutoService = Depends(get_produto_service),
) -> ProdutoCreated:
    produto_id = await service.create(db, payload)
    log_info("Produto criado", request)
    return ProdutoCreated(id=produto_id)


@router.put(
    "/produtos/{produto_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Atualizar produto",
)
async def atualizar_produto(
    produto_id: str,
    payload: ProdutoIn,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: ProdutoService = Depends(get_produto_service),
) -> MessageResponse:
    await service.update(db, produto_id, payload)
    log_info("Produto atualizado", request)
    return MessageResponse(message="Produto atualizado com sucesso")


@router.delete(
    "/produtos/{produto_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Deletar produto",
)
async def deletar_produto(
    produto_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: ProdutoService = Depends(get_produto_service),
) -> MessageResponse:
    await service.delete(db, produto_id)
    log_info("Produto deletado", request)
    return MessageResponse(message="Produto deletado com sucesso")
