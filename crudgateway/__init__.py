"""
CRUD Gateway
============

HTTP gateway translating CRUD requests into calls on three independent
backing stores.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (one per backing store)  │  ← one native call each
    ├─────────────────────────────────────┤
    │   Backends (client handles)         │  ← engine/pool, Mongo, S3
    └─────────────────────────────────────┘

    MongoDB  → users     (/usuarios, /mongodb/testar-conexao)
    S3       → objects   (/buckets)
    MySQL    → products  (/produtos, /init-db)

No state is shared between requests other than the client handles, and no
request touches more than one store.
"""

__version__ = "1.0.0"
