"""
CRUD Gateway: Usuario Schemas
==============================

What:  Body and response shapes for the /usuarios routes.

The stored schema has two string fields and nothing else. Unknown keys in
a request body are ignored rather than rejected; missing keys are simply
not stored. Numbers and booleans sent for a string field are stored as
their text; values with no text form (objects, arrays) are refused by the
store layer, not by request validation. The store assigns `_id`, returned
as its hex string.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def cast_string(value: Any) -> Optional[str]:
    """
    Text form of a scalar field value.

    Raises:
        ValueError: for lists, objects and anything else that is not a scalar.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    raise ValueError(f"Cast to string failed for value {value!r}")


def _as_text(value: Any) -> Optional[str]:
    try:
        return cast_string(value)
    except ValueError:
        return str(value)


class UsuarioIn(BaseModel):
    """Body of POST and PUT /usuarios. Every field is optional and untyped here."""

    nome: Optional[Any] = Field(default=None, description="Nome do usuário")
    email: Optional[Any] = Field(default=None, description="Email do usuário")

    model_config = {"extra": "ignore"}

    def to_document(self) -> Dict[str, Any]:
        """
        Only the fields the client actually sent, cast to text; PUT replaces just those.

        Raises:
            ValueError: a sent field has no text form.
        """
        return {
            key: cast_string(value)
            for key, value in self.model_dump(exclude_unset=True).items()
        }


class UsuarioResponse(BaseModel):
    id: str = Field(alias="_id", description="Identificador gerado pelo MongoDB")
    nome: Optional[str] = None
    email: Optional[str] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UsuarioResponse":
        """Scalars come back as text; `_id` of any type as its string form."""
        return cls(
            id=str(document.get("_id")),
            nome=_as_text(document.get("nome")),
            email=_as_text(document.get("email")),
        )
