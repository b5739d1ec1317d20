"""Column type mapping strategies."""

from abc import ABC, abstractmethod
from enum import Enum


class SemanticType(Enum):
    """Dialect-independent value family of a column."""
    INT8 = "int8"
    INT16 = "int16"
    INT = "int"
    INT64 = "int64"
    FLOAT64 = "float64"
    STRING = "string"
    BOOL = "bool"
    BYTES = "bytes"


# Lower-cased type keywords from MySQL, PostgreSQL and SQLite
KEYWORD_FAMILIES = {
    "tinyint": SemanticType.INT8,
    "smallint": SemanticType.INT16,
    "smallserial": SemanticType.INT16,
    "integer": SemanticType.INT,
    "serial": SemanticType.INT,
    "int": SemanticType.INT,
    "bigint": SemanticType.INT64,
    "bigserial": SemanticType.INT64,
    "decimal": SemanticType.FLOAT64,
    "numeric": SemanticType.FLOAT64,
    "real": SemanticType.FLOAT64,
    "double precision": SemanticType.FLOAT64,
    "double": SemanticType.FLOAT64,
    "float": SemanticType.FLOAT64,
    "char": SemanticType.STRING,
    "character": SemanticType.STRING,
    "character varying": SemanticType.STRING,
    "text": SemanticType.STRING,
    "varchar": SemanticType.STRING,
    "enum": SemanticType.STRING,
    "mediumtext": SemanticType.STRING,
    "longtext": SemanticType.STRING,
    "bool": SemanticType.BOOL,
    "boolean": SemanticType.BOOL,
    "binary": SemanticType.BYTES,
    "varbinary": SemanticType.BYTES,
    "tinyblob": SemanticType.BYTES,
    "mediumblob": SemanticType.BYTES,
    "longblob": SemanticType.BYTES,
    "blob": SemanticType.BYTES,
    "bytea": SemanticType.BYTES,
}


class TypeMapper(ABC):
    """Abstract base class for mapping column types to a target language."""

    def to_semantic_type(self, type_keyword: str) -> SemanticType:
        """Classify a type keyword; unknown keywords are strings."""
        return KEYWORD_FAMILIES.get(type_keyword.lower(), SemanticType.STRING)

    @abstractmethod
    def to_language_type(self, semantic_type: SemanticType, nullable: bool) -> str:
        """Render a semantic type as a target-language type expression."""
        pass

    def resolve(self, type_keyword: str, nullable: bool) -> str:
        """Map a raw type keyword plus nullability to a target-language type."""
        return self.to_language_type(self.to_semantic_type(type_keyword), nullable)


class GoTypeMapper(TypeMapper):
    """Type mapper producing Go types for generated structs."""

    GO_TYPES = {
        SemanticType.INT8: "int8",
        SemanticType.INT16: "int16",
        SemanticType.INT: "int",
        SemanticType.INT64: "int64",
        SemanticType.FLOAT64: "float64",
        SemanticType.STRING: "string",
        SemanticType.BOOL: "bool",
        SemanticType.BYTES: "[]byte",
    }

    def to_language_type(self, semantic_type: SemanticType, nullable: bool) -> str:
        """Convert a semantic type to Go, using a pointer for nullable values.

        A nil ``[]byte`` already signals absence, so byte slices are never
        wrapped.
        """
        go_type = self.GO_TYPES[semantic_type]
        if nullable and semantic_type is not SemanticType.BYTES:
            return "*" + go_type
        return go_type
