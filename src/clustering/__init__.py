"""Clustering domain: groups content items into named magazine sections.

The engine is pure and synchronous.  Callers hand it in-memory
``ContentItem`` records and get back ordered ``Section`` objects; it never
reads or writes the content file.
"""

from magazeen.clustering.models import (
    ClusteringMetrics,
    ClusteringOptions,
    ClusteringResult,
    ContentItem,
    Section,
)
from magazeen.clustering.services import (
    cluster_items,
    cluster_with_metrics,
    extract_keywords,
    generate_sections,
    name_section,
    score_similarity,
)

__all__ = [
    "ClusteringMetrics",
    "ClusteringOptions",
    "ClusteringResult",
    "ContentItem",
    "Section",
    "cluster_items",
    "cluster_with_metrics",
    "extract_keywords",
    "generate_sections",
    "name_section",
    "score_similarity",
]
