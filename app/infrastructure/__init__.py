"""
Infrastructure layer for the time tracking service.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy; SQLite by default, PostgreSQL in deployment)
- Authentication (JWT bearer tokens)
- HTTP surface (FastAPI routers and middleware)

The infrastructure layer implements interfaces defined in the domain layer,
following the Dependency Inversion Principle of Clean Architecture.
"""
