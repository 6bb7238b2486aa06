"""
CRUD Gateway: API Routes Package
=================================

Route Inventory:
    - usuarios.py:  /mongodb/testar-conexao, /usuarios[/{id}]      (MongoDB)
    - buckets.py:   /buckets[/{bucketName}[/upload|/file/{name}]]  (S3)
    - produtos.py:  /init-db, /produtos[/{id}]                     (MySQL)
    - health.py:    /health

Routes are thin: extract path/body/file, call one service method, log the
outcome, return. Failures are raised as application exceptions and
formatted by the global handlers in main.py.
"""
