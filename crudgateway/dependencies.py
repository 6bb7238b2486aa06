"""
CRUD Gateway: Route Dependencies
=================================

What:  FastAPI dependencies resolving services from `app.state.backends`.
How:   Handlers declare `service: UsuarioService = Depends(get_usuario_service)`;
       tests override these with `app.dependency_overrides` or simply inject
       fake backends into `create_app()`.
"""

from fastapi import Request

from crudgateway.backends import Backends
from crudgateway.services.bucket_service import BucketService
from crudgateway.services.produto_service import ProdutoService, produto_service
from crudgateway.services.usuario_service import UsuarioService


def get_backends(request: Request) -> Backends:
    return request.app.state.backends


def get_usuario_service(request: Request) -> UsuarioService:
    return UsuarioService(get_backends(request).users)


def get_bucket_service(request: Request) -> BucketService:
    return BucketService(get_backends(request).s3)


def get_produto_service() -> ProdutoService:
    return produto_service
