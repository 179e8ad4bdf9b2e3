"""Application services for orchestrating domain logic."""

from .component_materializer import ComponentMaterializer
from .entity_resolver import EntityResolver
from .retry import call_with_retry

__all__ = ["ComponentMaterializer", "EntityResolver", "call_with_retry"]
