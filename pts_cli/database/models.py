"""Database data models for schema introspection."""

from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field, fields

from .. import naming
from .type_mappers import TypeMapper, SemanticType


@dataclass
class Column:
    """Represents a database column.

    ``table`` is the owning table's name, not the Table object, so a column
    never keeps its table alive.
    """
    name: str
    table: str = ""
    database: str = ""
    comment: str = ""
    is_nullable: Optional[str] = None
    column_type: Optional[str] = None
    data_type: Optional[str] = None
    column_default: Optional[str] = None
    ordinal_position: Optional[int] = None
    character_maximum_length: Optional[int] = None
    character_octet_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    character_set_name: Optional[str] = None
    collation_name: Optional[str] = None
    column_key: Optional[str] = None
    extra: Optional[str] = None

    # Derived once by derive()
    camel: str = ""
    pascal: str = ""
    underline: str = ""
    semantic_type: Optional[SemanticType] = None
    go_type: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Column":
        """Build a column from a result row keyed by lower-case field names."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in row.items() if key in known}
        if values.get("comment") is None:
            values["comment"] = ""
        return cls(**values)

    @property
    def nullable(self) -> bool:
        """Whether the column accepts NULL; unknown nullability counts as nullable."""
        if self.is_nullable is not None and self.is_nullable.lower() == "no":
            return False
        return True

    @property
    def type_keyword(self) -> str:
        """Lower-cased data type, falling back to the declared type (SQLite)."""
        keyword = (self.data_type or "").lower()
        if not keyword and self.column_type:
            keyword = self.column_type.lower()
        return keyword

    @property
    def is_auto_increment(self) -> bool:
        return self.extra is not None and self.extra.lower() == "auto_increment"

    def derive(self, type_mapper: TypeMapper) -> None:
        """Fill naming variants and the resolved type; no-op once filled."""
        if self.camel:
            return
        self.camel = naming.camel(self.name)
        self.pascal = naming.pascal(self.name)
        self.underline = naming.underline(self.name)
        self.semantic_type = type_mapper.to_semantic_type(self.type_keyword)
        self.go_type = type_mapper.to_language_type(self.semantic_type, self.nullable)


@dataclass
class Table:
    """Represents a database table."""
    name: str
    database: str = ""
    comment: str = ""
    columns: List[Column] = field(default_factory=list)
    definition: str = ""
    auto_increment_column: str = ""
    type_name: str = ""
    type_name_timestamp: str = ""

    def get_column(self, name: str) -> Optional[Column]:
        """Look up a column by its original name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def derive_type_names(self, prefix: str, timestamp: int) -> None:
        """Set the Pascal-case type name (prefix stripped) and its timestamped form."""
        if self.type_name:
            return
        name = self.name
        if prefix and name.startswith(prefix):
            name = name[len(prefix):]
        self.type_name = naming.pascal(name)
        self.type_name_timestamp = f"{self.type_name}{timestamp}"
