"""
CRUD Gateway: Services Layer
=============================

One service per backing store, each a thin adapter around that store's
native client. Services translate library errors into application
exceptions; routes translate results into HTTP responses.

Service Inventory:
    - UsuarioService: MongoDB users collection (pymongo async API)
    - BucketService:  S3 buckets and objects (boto3, run in the threadpool)
    - ProdutoService: MySQL product table (SQLAlchemy asyncio)

Services hold no per-request state; the handles they wrap are built once
by `Backends` and shared by every request.
"""

from crudgateway.services.bucket_service import BucketService
from crudgateway.services.produto_service import ProdutoService
from crudgateway.services.usuario_service import UsuarioService

__all__ = ["BucketService", "ProdutoService", "UsuarioService"]
