"""
Service layer: framework-agnostic business operations.

Each service receives the DBStorage handle (and, for identity, the
TokenSigner) through its constructor. Import from the submodules:
``services.identity``, ``services.ledger``, ``services.inventory``,
``services.orders``.
"""
