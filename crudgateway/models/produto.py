"""
CRUD Gateway: Produto SQLAlchemy Model
=======================================

What:  ORM model for the `produto` table in MySQL.
How:   Column names keep their capitalized form (Id, Nome, Descricao, Preco)
       because API clients read and write them verbatim.
Who:   ProdutoService, for CRUD and for the CREATE TABLE behind POST /init-db.

There are no migrations: the table is created on demand with
CREATE TABLE IF NOT EXISTS semantics and never altered.
"""

from decimal import Decimal

from sqlalchemy import Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from crudgateway.database import Base


class Produto(Base):
    __tablename__ = "produto"

    # AUTO_INCREMENT on MySQL, ROWID alias on SQLite
    Id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    Nome: Mapped[str] = mapped_column(String(255), nullable=False)
    Descricao: Mapped[str] = mapped_column(String(255), nullable=False)

    # DECIMAL(10,2): fixed-point, returned as Decimal with two places
    Preco: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    def __repr__(self) -> str:
        return f"<Produto(Id={self.Id}, Nome='{self.Nome}', Preco={self.Preco})>"
