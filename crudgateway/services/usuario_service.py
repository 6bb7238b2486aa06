"""
CRUD Gateway: Usuario Service (MongoDB)
========================================

What:  CRUD and a connectivity check over the `usuarios` collection.
How:   Each method issues one pymongo async call. Any PyMongoError becomes a
       DocumentStoreError; a lookup that matches nothing becomes a
       UserNotFoundError.

Identifiers:
    A malformed id (not a 24-hex ObjectId) can never match a stored
    document, so it is reported as not found instead of as a server error.
"""

import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from crudgateway.exceptions import DocumentStoreError, UserNotFoundError
from crudgateway.schemas.usuario import UsuarioIn, UsuarioResponse

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Erro na conexão com o MongoDB"


def _object_id(user_id: str) -> Optional[ObjectId]:
    return ObjectId(user_id) if ObjectId.is_valid(user_id) else None


def _cast_document(payload: UsuarioIn) -> Dict[str, Any]:
    """The write document; a field with no text form fails like a store-side cast."""
    try:
        return payload.to_document()
    except ValueError as exc:
        raise DocumentStoreError(details=str(exc)) from exc


class UsuarioService:
    """
    Adapter over an async pymongo collection.

    Args:
        collection: `AsyncCollection` (or anything with the same async
                    methods) holding user documents.
    """

    def __init__(self, collection):
        self.collection = collection

    async def check_connection(self) -> bool:
        """
        One arbitrary read.

        Returns True when a document exists, False when the store answered
        but is empty. An unreachable store raises.
        """
        try:
            document = await self.collection.find_one()
        except PyMongoError as exc:
            raise DocumentStoreError(
                message=CONNECTION_ERROR_MESSAGE, details=str(exc)
            ) from exc
        return document is not None

    async def create(self, payload: UsuarioIn) -> UsuarioResponse:
        document = _cast_document(payload)
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as exc:
            raise DocumentStoreError(details=str(exc)) from exc
        document["_id"] = result.inserted_id
        return UsuarioResponse.from_document(document)

    async def list_all(self) -> List[UsuarioResponse]:
        try:
            return [
                UsuarioResponse.from_document(document)
                async for document in self.collection.find()
            ]
        except PyMongoError as exc:
            raise DocumentStoreError(details=str(exc)) from exc

    async def get(self, user_id: str) -> UsuarioResponse:
        oid = _object_id(user_id)
        if oid is None:
            raise UserNotFoundError(user_id)
        try:
            document = await self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise DocumentStoreError(details=str(exc)) from exc
        if document is None:
            raise UserNotFoundError(user_id)
        return UsuarioResponse.from_document(document)

    async def update(self, user_id: str, payload: UsuarioIn) -> UsuarioResponse:
        """
        Overwrite the provided fields and return the document as stored afterwards.

        An empty body changes nothing; MongoDB rejects an empty $set, so that
        case degrades to a plain lookup.
        """
        oid = _object_id(user_id)
        if oid is None:
            raise UserNotFoundError(user_id)

        fields = _cast_document(payload)
        if not fields:
            return await self.get(user_id)

        try:
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise DocumentStoreError(details=str(exc)) from exc
        if document is None:
            raise UserNotFoundError(user_id)
        return UsuarioResponse.from_document(document)

    async def delete(self, user_id: str) -> None:
        oid = _object_id(user_id)
        if oid is None:
            raise UserNotFoundError(user_id)
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as exc:
            raise DocumentStoreError(details=str(exc)) from exc
        if result.deleted_count == 0:
            raise UserNotFoundError(user_id)
        logger.debug("Deleted usuario %s", user_id)
