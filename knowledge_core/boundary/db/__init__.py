"""
Database boundary: ORM base, models, connection management and CRUD.
"""
