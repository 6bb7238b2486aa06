"""
CRUD Gateway: Produto Service (MySQL)
======================================

What:  Schema initialization and CRUD over the `produto` table.
How:   Every CRUD method receives a session that `get_db_session` has already
       checked out and pointed at the configured database; each runs one
       parameterized statement (SQLAlchemy binds every value) and commits
       its own writes. SQLAlchemyError becomes RelationalStoreError carrying
       the driver's message.
Who:   Called by the /produtos and /init-db route handlers.

Affected rows:
    UPDATE and DELETE report 404 when no row matched. The MySQL dialect
    connects with CLIENT_FOUND_ROWS, so an UPDATE that writes identical
    values still counts its matched row.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.schema import CreateTable

from crudgateway.database import raw_error_text, select_database
from crudgateway.exceptions import ProductNotFoundError, RelationalStoreError
from crudgateway.models.produto import Produto
from crudgateway.schemas.produto import ProdutoIn, ProdutoResponse

logger = logging.getLogger(__name__)


def _row_id(produto_id: str) -> Optional[int]:
    """The integer key named by a path id; None when it cannot name any row."""
    try:
        return int(produto_id)
    except ValueError:
        return None


class ProdutoService:
    """Stateless: the engine and sessions are passed in per call."""

    async def init_db(self, engine: AsyncEngine, db_name: str) -> None:
        """
        Create the database (MySQL only) and the `produto` table if absent.

        Idempotent: both statements carry IF NOT EXISTS, so repeated calls
        succeed. No reflection is involved: the connection has no default
        schema until USE runs.
        """
        try:
            async with engine.begin() as conn:
                if conn.dialect.name == "mysql":
                    quoted = conn.dialect.identifier_preparer.quote_identifier(db_name)
                    await conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
                await select_database(conn, db_name)
                await conn.execute(CreateTable(Produto.__table__, if_not_exists=True))
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc
        logger.info("Schema ready in database %s", db_name)

    async def list_all(self, db: AsyncSession) -> List[ProdutoResponse]:
        try:
            result = await db.execute(select(Produto).order_by(Produto.Id))
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc
        return [ProdutoResponse.model_validate(row) for row in result.scalars().all()]

    async def get(self, db: AsyncSession, produto_id: str) -> ProdutoResponse:
        row_id = _row_id(produto_id)
        if row_id is None:
            raise ProductNotFoundError(produto_id)
        try:
            result = await db.execute(select(Produto).where(Produto.Id == row_id))
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc
        produto = result.scalar_one_or_none()
        if produto is None:
            raise ProductNotFoundError(produto_id)
        return ProdutoResponse.model_validate(produto)

    async def create(self, db: AsyncSession, payload: ProdutoIn) -> int:
        """Insert one row and return its AUTO_INCREMENT id."""
        produto = Produto(Nome=payload.Nome, Descricao=payload.Descricao, Preco=payload.Preco)
        try:
            db.add(produto)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc
        logger.info("Produto created: %s", produto.Id)
        return produto.Id

    async def update(self, db: AsyncSession, produto_id: str, payload: ProdutoIn) -> None:
        """Replace all three fields of one row."""
        row_id = _row_id(produto_id)
        if row_id is None:
            raise ProductNotFoundError(produto_id)
        statement = (
            update(Produto)
            .where(Produto.Id == row_id)
            .values(Nome=payload.Nome, Descricao=payload.Descricao, Preco=payload.Preco)
            .execution_options(synchronize_session=False)
        )
        await self._execute_write(db, statement, produto_id)

    async def delete(self, db: AsyncSession, produto_id: str) -> None:
        row_id = _row_id(produto_id)
        if row_id is None:
            raise ProductNotFoundError(produto_id)
        statement = (
            delete(Produto)
            .where(Produto.Id == row_id)
            .execution_options(synchronize_session=False)
        )
        await self._execute_write(db, statement, produto_id)

    async def _execute_write(self, db: AsyncSession, statement, produto_id: str) -> None:
        try:
            result = await db.execute(statement)
            if result.rowcount == 0:
                await db.rollback()
                raise ProductNotFoundError(produto_id)
            await db.commit()
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc


produto_service = ProdutoService()
