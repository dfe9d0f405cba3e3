"""
SQLite persistence layer.

Modules:
  connection: get_connection() context manager.
  schema    : CREATE TABLE / INDEX DDL and apply_schema().
  migrations: version-tracked incremental migrations.
  repositories/: one repository class per stored record family.
"""
