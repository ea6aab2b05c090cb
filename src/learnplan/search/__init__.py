"""Educational resource search."""

from learnplan.search.client import (
    ResourceSearchClient,
    fallback_resources,
    fallback_strategies,
    infer_resource_type,
)

__all__ = [
    "ResourceSearchClient",
    "fallback_resources",
    "fallback_strategies",
    "infer_resource_type",
]
