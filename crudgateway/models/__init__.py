from crudgateway.models.produto import Produto

__all__ = ["Produto"]
