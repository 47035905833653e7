"""Table definitions: row-type name -> ordered column schema.

Definitions files are JSON:

    {
      "tables": {
        "Map": [
          {"name": "ID", "type": "int32"},
          {"name": "Directory", "type": "string"},
          {"name": "Flags", "type": "uint32", "bits": 24},
          {"name": "RowIndex", "type": "int32", "auto_generated": true}
        ]
      }
    }
"""

import json
import os
from typing import Any, Dict, Iterable, List

from wdbx.errors import DefinitionError, MissingSchema
from wdbx.models import ColumnDescriptor, ColumnType


def _normalise(name: str) -> str:
    # "Map.dbc", "map.db2" and "Map" all resolve to the same definition
    base = os.path.basename(name)
    stem, ext = os.path.splitext(base)
    if ext.lower() in (".dbc", ".db2", ".adb"):
        base = stem
    return base.lower()


def column_from_dict(data: Dict[str, Any]) -> ColumnDescriptor:
    """Build a column descriptor from its JSON form."""
    try:
        name = data["name"]
        type_name = data["type"]
    except KeyError as e:
        raise DefinitionError(f"Column definition missing {e.args[0]!r}: {data!r}") from e

    try:
        column_type = ColumnType.parse(type_name)
    except ValueError as e:
        raise DefinitionError(f"Unknown column type '{type_name}' for '{name}'") from e

    try:
        return ColumnDescriptor(
            name=name,
            type=column_type,
            bits=data.get("bits"),
            auto_generated=bool(data.get("auto_generated", False)),
        )
    except ValueError as e:
        raise DefinitionError(str(e)) from e


class DefinitionRegistry:
    """Resolves table names to column schemas."""

    def __init__(self):
        self._tables: Dict[str, List[ColumnDescriptor]] = {}
        self._names: Dict[str, str] = {}

    def register(self, name: str, columns: Iterable[ColumnDescriptor]) -> None:
        key = _normalise(name)
        self._tables[key] = list(columns)
        self._names[key] = name

    def get(self, name: str) -> List[ColumnDescriptor]:
        """Return the columns for name, or raise MissingSchema."""
        columns = self._tables.get(_normalise(name))
        if not columns:
            raise MissingSchema(name)
        return list(columns)

    def names(self) -> List[str]:
        return sorted(self._names.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": {
                self._names[key]: [c.to_dict() for c in columns]
                for key, columns in self._tables.items()
            }
        }


def load_definitions(path: str) -> DefinitionRegistry:
    """Load a JSON definitions file into a registry.

    Raises:
        DefinitionError: the file is not valid JSON or a column is malformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        raise DefinitionError(f"Invalid definitions file {path}: {e}") from e

    tables = data.get("tables") if isinstance(data, dict) else None
    if not isinstance(tables, dict):
        raise DefinitionError(f"Definitions file {path} has no 'tables' object")

    registry = DefinitionRegistry()
    for name, columns in tables.items():
        registry.register(name, [column_from_dict(c) for c in columns])
    return registry
