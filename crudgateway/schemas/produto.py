"""
CRUD Gateway: Produto Schemas
==============================

What:  Body and response shapes for the /produtos routes.

Field names are the column names. Nothing is required or typed at this
layer: a missing field reaches MySQL as NULL and the NOT NULL constraint
rejects it, and a value the column cannot hold (a non-numeric price) is
rejected by the store too. Either way the client sees a 500 carrying the
server's message.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class ProdutoIn(BaseModel):
    Nome: Optional[Any] = Field(default=None, description="Nome do produto")
    Descricao: Optional[Any] = Field(default=None, description="Descrição do produto")
    Preco: Optional[Any] = Field(default=None, description="Preço, DECIMAL(10,2)")


class ProdutoResponse(BaseModel):
    """
    A stored product.

    Preco serializes as a decimal string ("9.90"), exactly as the column
    holds it, so no float rounding reaches clients.
    """

    Id: int
    Nome: str
    Descricao: str
    Preco: Decimal

    model_config = {"from_attributes": True}


class ProdutoCreated(BaseModel):
    id: int = Field(description="Identificador gerado pelo AUTO_INCREMENT")
