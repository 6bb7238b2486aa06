"""
CRUD Gateway: Usuario Route Handlers (MongoDB)
===============================================

What:  Connectivity check and CRUD for user documents.
How:   Each handler calls one UsuarioService method. Not-found and store
       failures are raised and rendered as plain text by the global handlers.
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from crudgateway.dependencies import get_usuario_service
from crudgateway.logger import log_info
from crudgateway.schemas.common import MessageResponse
from crudgateway.schemas.usuario import UsuarioIn, UsuarioResponse
from crudgateway.services.usuario_service import UsuarioService

router = APIRouter(tags=["CRUD MongoDb"])

NOT_FOUND_RESPONSE = {404: {"description": "Usuário não encontrado", "content": {"text/plain": {}}}}
ERROR_RESPONSE = {500: {"description": "Ocorreu um erro interno", "content": {"text/plain": {}}}}


@router.get(
    "/mongodb/testar-conexao",
    response_class=PlainTextResponse,
    responses=ERROR_RESPONSE,
    summary="Testa a conexão com o MongoDB",
    description="Verifica se a aplicação consegue se conectar ao MongoDB.",
)
async def testar_conexao(
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> str:
    """
    Distinguishes "reachable, has data" from "reachable, empty".

    "Unreachable" is never a 200: the check raises and the handler
    answers 500 with a fixed text.
    """
    found = await service.check_connection()
    log_info("Conexão com o MongoDB efetuada com sucesso", request)
    if found:
        return "Conexão com o MongoDB bem-sucedida e usuário encontrado!"
    return "Conexão com o MongoDB bem-sucedida, mas nenhum usuário encontrado."


@router.post(
    "/usuarios",
    status_code=201,
    response_model=UsuarioResponse,
    responses=ERROR_RESPONSE,
    summary="Criar um novo usuário",
)
async def criar_usuario(
    payload: UsuarioIn,
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> UsuarioResponse:
    user = await service.create(payload)
    log_info("Usuário criado", request)
    return user


@router.get(
    "/usuarios",
    response_model=List[UsuarioResponse],
    responses=ERROR_RESPONSE,
    summary="Listar usuários",
)
async def listar_usuarios(
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> List[UsuarioResponse]:
    users = await service.list_all()
    log_info("Usuários encontrados", request)
    return users


@router.get(
    "/usuarios/{user_id}",
    response_model=UsuarioResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Buscar usuário por id",
)
async def buscar_usuario(
    user_id: str,
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> UsuarioResponse:
    user = await service.get(user_id)
    log_info("Usuário encontrado", request)
    return user


@router.put(
    "/usuarios/{user_id}",
    response_model=UsuarioResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Atualizar usuário",
)
async def atualizar_usuario(
    user_id: str,
    payload: UsuarioIn,
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> UsuarioResponse:
    user = await service.update(user_id, payload)
    log_info("Usuário atualizado", request)
    return user


@router.delete(
    "/usuarios/{user_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSE},
    summary="Remover usuário",
)
async def remover_usuario(
    user_id: str,
    request: Request,
    service: UsuarioService = Depends(get_usuario_service),
) -> MessageResponse:
    await service.delete(user_id)
    log_info("Usuário removido", request)
    return MessageResponse(message="Usuário removido com sucesso")
