from .schema import DEFAULT_SCHEMA, DocumentSchema, apply_schema
from .writer import DocumentPersister

__all__ = ["DEFAULT_SCHEMA", "DocumentSchema", "DocumentPersister", "apply_schema"]
