"""
Generic CRUD API Template

Generic repository, request handler and route registrar exposing
create/read/update/delete endpoints for any SQLAlchemy entity.
"""

__version__ = "1.0.0"
