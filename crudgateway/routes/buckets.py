"""
CRUD Gateway: Bucket Route Handlers (S3)
=========================================

What:  List buckets, list objects, upload a file, delete an object.
How:   Each handler calls one BucketService method.

Upload Flow:
    1. Client sends multipart/form-data with a `file` field
    2. No file under that name (absent, or a plain text field) → 400
       before any storage call is made
    3. The whole file is read into memory
    4. Stored under its original filename, with its declared content type
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from crudgateway.dependencies import get_bucket_service
from crudgateway.exceptions import MissingFileError
from crudgateway.logger import log_info
from crudgateway.schemas.common import ErrorResponse, MessageResponse, UploadResponse
from crudgateway.services.bucket_service import BucketService

router = APIRouter(prefix="/buckets", tags=["AWS S3"])

ERROR_RESPONSE = {500: {"description": "Erro no S3", "model": ErrorResponse}}

# The form is parsed by hand, so the multipart body is declared here for the docs
UPLOAD_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "file": {
                            "type": "string",
                            "format": "binary",
                            "description": "Arquivo a enviar",
                        }
                    },
                }
            }
        },
    }
}


@router.get(
    "",
    responses=ERROR_RESPONSE,
    summary="Listar buckets",
)
async def listar_buckets(
    request: Request,
    service: BucketService = Depends(get_bucket_service),
) -> List[Dict[str, Any]]:
    buckets = await service.list_buckets()
    log_info("Buckets encontrados", request)
    return buckets


@router.get(
    "/{bucketName}",
    responses=ERROR_RESPONSE,
    summary="Listar objetos de um bucket",
)
async def listar_objetos(
    bucketName: str,
    request: Request,
    service: BucketService = Depends(get_bucket_service),
) -> List[Dict[str, Any]]:
    objects = await service.list_objects(bucketName)
    log_info("Objetos encontrados", request)
    return objects


@router.post(
    "/{bucketName}/upload",
    response_model=UploadResponse,
    responses={
        400: {"description": "Nenhum arquivo enviado", "model": ErrorResponse},
        **ERROR_RESPONSE,
    },
    summary="Enviar arquivo para um bucket",
    openapi_extra=UPLOAD_REQUEST_BODY,
)
async def upload_arquivo(
    bucketName: str,
    request: Request,
    service: BucketService = Depends(get_bucket_service),
) -> UploadResponse:
    # Leaving the block closes every uploaded file in the form
    async with request.form() as form:
        file = form.get("file")
        if not isinstance(file, UploadFile):
            raise MissingFileError()

        content = await file.read()
        data = await service.upload(
            bucket_name=bucketName,
            filename=file.filename or "",
            content=content,
            content_type=file.content_type,
        )

    log_info("Upload efetuado", request)
    return UploadResponse(data=data)


@router.delete(
    "/{bucketName}/file/{fileName}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSE,
    summary="Deletar arquivo de um bucket",
)
async def deletar_arquivo(
    bucketName: str,
    fileName: str,
    request: Request,
    service: BucketService = Depends(get_bucket_service),
) -> MessageResponse:
    await service.delete(bucketName, fileName)
    log_info("Arquivo deletado", request)
    return MessageResponse(message="Arquivo deletado com sucesso")
