"""Physical schema - table descriptions and DDL rendering.

Derivation lives in :mod:`inherit_map.schema.deriver`.
"""

from __future__ import annotations

from inherit_map.schema.ddl import render_ddl
from inherit_map.schema.table import ColumnSchema, ForeignKeySchema, TableSchema

__all__ = [
    "TableSchema",
    "ColumnSchema",
    "ForeignKeySchema",
    "render_ddl",
]
