"""
CRUD Gateway: Produto Tests (relational store)
===============================================

What:  /init-db and the /produtos routes end to end.
How:   SQLAlchemy asyncio over aiosqlite on a temporary file. The MySQL-only
       steps (CREATE DATABASE, USE) are covered in test_database.py and by
       a mysql-dialect connection double in TestProdutoServiceInitDb.

What we test:
    ✅ /init-db is idempotent, and emits plain IF NOT EXISTS DDL on MySQL
    ✅ Create → get → delete → get (404) scenario
    ✅ Prices round-trip as fixed-point decimal strings
    ✅ Update/delete of a missing or non-numeric id is 404 and changes nothing
    ✅ Store errors surface as 500 {"error": <raw text>}
    ✅ Pooled connections are returned after failures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.dialects import mysql
from sqlalchemy.exc import OperationalError

from crudgateway.exceptions import RelationalStoreError
from crudgateway.models.produto import Produto
from crudgateway.services.produto_service import ProdutoService


@pytest_asyncio.fixture
async def initialized(test_client):
    response = await test_client.post("/init-db")
    assert response.status_code == 200
    return test_client


class TestInitDb:

    @pytest.mark.asyncio
    async def test_init_db_twice_succeeds(self, test_client):
        first = await test_client.post("/init-db")
        second = await test_client.post("/init-db")

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.text == "Banco de dados e tabela criados com sucesso."

    @pytest.mark.asyncio
    async def test_init_db_keeps_existing_rows(self, initialized):
        await initialized.post("/produtos", json={"Nome": "A", "Descricao": "d", "Preco": 1})
        await initialized.post("/init-db")

        response = await initialized.get("/produtos")
        assert len(response.json()) == 1


class TestProdutoRoutes:

    @pytest.mark.asyncio
    async def test_create_get_delete_scenario(self, initialized):
        created = await initialized.post(
            "/produtos", json={"Nome": "Produto A", "Descricao": "desc", "Preco": 9.90}
        )
        assert created.status_code == 201
        assert created.json() == {"id": 1}

        fetched = await initialized.get("/produtos/1")
        assert fetched.status_code == 200
        assert fetched.json() == {"Id": 1, "Nome": "Produto A", "Descricao": "desc", "Preco": "9.90"}

        deleted = await initialized.delete("/produtos/1")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Produto deletado com sucesso"}

        again = await initialized.get("/produtos/1")
        assert again.status_code == 404
        assert again.json() == {"error": "Produto não encontrado"}

    @pytest.mark.asyncio
    async def test_list_products_in_id_order(self, initialized):
        for nome in ("A", "B", "C"):
            await initialized.post("/produtos", json={"Nome": nome, "Descricao": "d", "Preco": "1.5"})

        response = await initialized.get("/produtos")

        assert response.status_code == 200
        assert [p["Nome"] for p in response.json()] == ["A", "B", "C"]
        assert response.json()[0]["Preco"] == "1.50"

    @pytest.mark.asyncio
    async def test_update_product(self, initialized):
        await initialized.post("/produtos", json={"Nome": "A", "Descricao": "d", "Preco": 1})

        response = await initialized.put(
            "/produtos/1", json={"Nome": "B", "Descricao": "nova", "Preco": "2.25"}
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Produto atualizado com sucesso"}
        fetched = (await initialized.get("/produtos/1")).json()
        assert fetched == {"Id": 1, "Nome": "B", "Descricao": "nova", "Preco": "2.25"}

    @pytest.mark.asyncio
    async def test_update_missing_product_is_404_and_leaves_table_unchanged(self, initialized):
        await initialized.post("/produtos", json={"Nome": "A", "Descricao": "d", "Preco": 1})
        before = (await initialized.get("/produtos")).json()

        response = await initialized.put(
            "/produtos/999", json={"Nome": "X", "Descricao": "x", "Preco": 5}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Produto não encontrado"}
        assert (await initialized.get("/produtos")).json() == before

    @pytest.mark.asyncio
    async def test_delete_missing_product_is_404(self, initialized):
        response = await initialized.delete("/produtos/42")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_missing_product_is_404_without_fields(self, initialized):
        response = await initialized.get("/produtos/42")
        assert response.status_code == 404
        assert "Id" not in response.json()

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_404_on_every_route(self, initialized):
        await initialized.post("/produtos", json={"Nome": "A", "Descricao": "d", "Preco": 1})

        fetched = await initialized.get("/produtos/abc")
        updated = await initialized.put(
            "/produtos/abc", json={"Nome": "X", "Descricao": "x", "Preco": 5}
        )
        deleted = await initialized.delete("/produtos/abc")

        for response in (fetched, updated, deleted):
            assert response.status_code == 404
            assert response.json() == {"error": "Produto não encontrado"}
        assert len((await initialized.get("/produtos")).json()) == 1

    @pytest.mark.asyncio
    async def test_non_numeric_price_is_rejected_by_the_store(self, initialized, backends):
        response = await initialized.post(
            "/produtos", json={"Nome": "A", "Descricao": "d", "Preco": "abc"}
        )

        assert response.status_code == 500
        assert "abc" in response.json()["error"]
        assert backends.engine.pool.checkedout() == 0
        assert (await initialized.get("/produtos")).json() == []

    @pytest.mark.asyncio
    async def test_store_constraint_error_is_500_with_raw_message(self, initialized, backends):
        response = await initialized.post("/produtos", json={"Descricao": "sem nome", "Preco": 1})

        assert response.status_code == 500
        assert "NOT NULL" in response.json()["error"]
        assert backends.engine.pool.checkedout() == 0

    @pytest.mark.asyncio
    async def test_missing_table_is_500(self, test_client):
        response = await test_client.get("/produtos")

        assert response.status_code == 500
        assert "no such table" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_connection_returned_to_pool_after_unexpected_error(
        self, app, initialized, backends, monkeypatch
    ):
        async def failing_list_all(self, db):
            await db.execute(select(Produto))
            raise RuntimeError("boom")

        monkeypatch.setattr(ProdutoService, "list_all", failing_list_all)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/produtos")

        assert response.status_code == 500
        assert response.json() == {"error": "Ocorreu um erro interno"}
        assert backends.engine.pool.checkedout() == 0


class TestProdutoServiceInitDb:

    @pytest.mark.asyncio
    async def test_init_db_wraps_driver_error(self):
        engine = MagicMock()
        engine.begin.side_effect = OperationalError(
            "CREATE DATABASE", {}, Exception("(2003, \"Can't connect to MySQL server\")")
        )

        with pytest.raises(RelationalStoreError) as exc_info:
            await ProdutoService().init_db(engine, "mydatabase")

        assert "Can't connect to MySQL server" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_init_db_on_mysql_emits_ddl_without_reflection(self):
        conn = MagicMock()
        conn.dialect = mysql.dialect()
        assert conn.dialect.default_schema_name is None
        conn.execute = AsyncMock()
        engine = MagicMock()
        engine.begin.return_value.__aenter__.return_value = conn

        await ProdutoService().init_db(engine, "mydatabase")

        statements = [
            str(call.args[0].compile(dialect=conn.dialect)).strip()
            for call in conn.execute.await_args_list
        ]
        assert statements[0] == "CREATE DATABASE IF NOT EXISTS `mydatabase`"
        assert statements[1] == "USE `mydatabase`"
        assert statements[2].startswith("CREATE TABLE IF NOT EXISTS produto")
        assert "`Preco` NUMERIC(10, 2) NOT NULL" in statements[2]
        conn.run_sync.assert_not_called()
