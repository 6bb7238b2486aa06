"""
CRUD Gateway: Request/Response Schemas
=======================================

Pydantic models defining the HTTP contract, one module per backing store.
They are separate from storage shapes: the ORM model and the raw Mongo
document are converted here, never returned directly.
"""
