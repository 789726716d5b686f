"""Infrastructure layer — database engine, schema, and the Store repository.

This layer depends on stdlib and third-party libs (SQLAlchemy, pydantic).
It may build domain models from rows but never imports services,
commands, or output. The service layer bridges domain and storage.
"""
