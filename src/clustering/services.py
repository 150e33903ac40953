"""Topic clustering for magazine sections.

Groups related content items so the assembled magazine reads as a set of
coherent sections instead of a flat list.  Everything here is a pure
function of its inputs: no I/O, no module-level mutable state, nothing
cached between calls.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Callable, Sequence

from magazeen.clustering.models import (
    ClusteringMetrics,
    ClusteringOptions,
    ClusteringResult,
    ContentItem,
    Section,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_SECTION_NAME = "Articles"
EMPTY_SECTION_NAME = "Miscellaneous"
FALLBACK_SECTION_NAME = "General Interest"

MAX_KEYWORDS = 20

# Score weights; the total is clamped to [0, MAX_SCORE].
KEYWORD_WEIGHT = 70.0
CATEGORY_BONUS = 30.0
TAG_BONUS = 5.0
MAX_SCORE = 100.0

# Section naming thresholds, as fractions of the cluster size.
CATEGORY_DOMINANCE = 0.6
KEYWORD_COVERAGE = 0.4
MAX_NAME_KEYWORDS = 3


# ===========================================================================
# Keyword extraction
# ===========================================================================

STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to",
        "for", "of", "with", "is", "are", "was", "were", "been", "be",
        "have", "has", "had", "do", "does", "did", "will", "would",
        "should", "could", "may", "might", "can", "this", "that", "these",
        "those", "i", "you", "he", "she", "it", "we", "they", "what",
        "which", "who", "when", "where", "why", "how", "all", "each",
        "every", "both", "few", "more", "most", "other", "some", "such",
        "no", "nor", "not", "only", "own", "same", "so", "than", "too",
        "very", "just", "as", "about", "from", "into", "through",
        "during", "before", "after", "above", "below", "up", "down",
        "out", "off", "over", "under", "again", "further", "then", "once",
    }
)  # fmt: skip

_MARKUP_RE = re.compile(r"<[^>]*>")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

# Tokens of this length or shorter carry no topical signal.
_MAX_SHORT_TOKEN_LEN = 3


def extract_keywords(text: str | None) -> list[str]:
    """Return up to 20 keywords from marked-up text, most frequent first.

    Markup is stripped textually (anything between ``<`` and ``>``), so
    malformed tags leave stray characters behind instead of failing.
    Ties in frequency go to the keyword that appeared first.

    Args:
        text: Raw title/body text, possibly containing inline HTML.

    Returns:
        Lowercase keywords ranked by ``(-frequency, first occurrence)``.
    """
    if not text:
        return []

    counts: Counter[str] = Counter()
    first_seen: dict[str, int] = {}
    for raw in _MARKUP_RE.sub(" ", text).lower().split():
        word = _NON_ALNUM_RE.sub("", raw)
        if len(word) <= _MAX_SHORT_TOKEN_LEN or word in STOPWORDS:
            continue
        counts[word] += 1
        first_seen.setdefault(word, len(first_seen))

    ranked = sorted(counts, key=lambda word: (-counts[word], first_seen[word]))
    return ranked[:MAX_KEYWORDS]


def _item_text(item: ContentItem) -> str:
    """Combine title and body into the text keywords are drawn from."""
    return f"{item.title or ''} {item.body or ''}"


def _item_keywords(item: ContentItem) -> frozenset[str]:
    return frozenset(extract_keywords(_item_text(item)))


# ===========================================================================
# Similarity
# ===========================================================================


def _combined_score(
    a: ContentItem,
    b: ContentItem,
    keywords_a: frozenset[str],
    keywords_b: frozenset[str],
) -> float:
    score = 0.0

    union = keywords_a | keywords_b
    if union:
        score += len(keywords_a & keywords_b) / len(union) * KEYWORD_WEIGHT

    if a.category and b.category and a.category == b.category:
        score += CATEGORY_BONUS

    score += len(a.tags & b.tags) * TAG_BONUS

    return max(0.0, min(score, MAX_SCORE))


def score_similarity(a: ContentItem | None, b: ContentItem | None) -> float:
    """Score how related two items are, on a 0-100 scale.

    Keyword overlap (Jaccard) contributes up to 70 points, an exact
    category match adds 30 and every shared tag adds 5.  The result is
    symmetric and clamped to ``[0, 100]``; a missing item scores 0.
    """
    if a is None or b is None:
        return 0.0
    return _combined_score(a, b, _item_keywords(a), _item_keywords(b))


# ===========================================================================
# Greedy clustering
# ===========================================================================


def _category_sort_key(item: ContentItem) -> tuple[int, str]:
    """Ordinal sort key; uncategorised items sort after every category."""
    if item.category:
        return (0, item.category)
    return (1, "")


def cluster_items(
    items: Sequence[ContentItem],
    min_similarity: float = 30.0,
) -> list[list[ContentItem]]:
    """Partition items into clusters with a single greedy forward pass.

    Items are stably sorted by category (code point order, uncategorised
    last).  Each unassigned item seeds a cluster; every later unassigned
    item joins it when its mean score against the cluster's current
    members reaches ``min_similarity``.  Members added during the scan
    count for the candidates after them.  A candidate rejected by one
    cluster is never reconsidered for it, so the result depends on
    input order and is not a globally optimal grouping.

    Args:
        items: Items to partition.
        min_similarity: Mean-score threshold on the 0-100 scale.

    Returns:
        Clusters in the order their seeds were reached.  Every input
        item appears in exactly one cluster.
    """
    if not items:
        return []

    ordered = sorted(items, key=_category_sort_key)
    keywords = [_item_keywords(item) for item in ordered]

    def score(i: int, j: int) -> float:
        return _combined_score(ordered[i], ordered[j], keywords[i], keywords[j])

    assigned = [False] * len(ordered)
    clusters: list[list[ContentItem]] = []

    for seed in range(len(ordered)):
        if assigned[seed]:
            continue
        assigned[seed] = True
        members = [seed]

        for candidate in range(seed + 1, len(ordered)):
            if assigned[candidate]:
                continue
            mean = sum(score(candidate, member) for member in members) / len(members)
            if mean >= min_similarity:
                members.append(candidate)
                assigned[candidate] = True

        clusters.append([ordered[i] for i in members])

    logger.debug(
        "Clustered %d item(s) into %d cluster(s) at min_similarity=%s",
        len(ordered),
        len(clusters),
        min_similarity,
    )
    return clusters


# ===========================================================================
# Section naming
# ===========================================================================


def name_section(cluster: Sequence[ContentItem]) -> str:
    """Derive a human-readable heading for a cluster.

    A category shared by at least 60% of the members wins (the default
    ``"General"`` label never does).  Otherwise up to three keywords that
    appear in at least 40% of the members are joined with ``" & "``.
    """
    if not cluster:
        return EMPTY_SECTION_NAME

    size = len(cluster)

    categories: Counter[str] = Counter(
        item.category
        for item in cluster
        if item.category and item.category != DEFAULT_CATEGORY
    )
    if categories:
        category, count = categories.most_common(1)[0]
        if count >= size * CATEGORY_DOMINANCE:
            return category

    pooled: Counter[str] = Counter()
    for item in cluster:
        pooled.update(extract_keywords(_item_text(item)))

    threshold = size * KEYWORD_COVERAGE
    top = [word for word, count in pooled.most_common() if count >= threshold]
    if not top:
        return FALLBACK_SECTION_NAME

    return " & ".join(word.capitalize() for word in top[:MAX_NAME_KEYWORDS])


# ===========================================================================
# Orchestration
# ===========================================================================


def cluster_with_metrics(
    items: Sequence[ContentItem] | None,
    options: ClusteringOptions | None = None,
    *,
    namer: Callable[[Sequence[ContentItem]], str] = name_section,
) -> ClusteringResult:
    """Group items into named sections, largest first.

    With clustering disabled, or no items, the result is a single
    ``"Articles"`` section holding the items in their original order.

    Args:
        items: Items to arrange.
        options: Threshold and on/off switch; defaults apply when omitted.
        namer: Section naming strategy.

    Returns:
        The ordered sections and the metrics for the run.
    """
    options = options or ClusteringOptions()
    items = list(items or [])

    if not options.enable_clustering or not items:
        logger.debug("Clustering skipped (enabled=%s, items=%d)", options.enable_clustering, len(items))
        return ClusteringResult(
            sections=[Section(name=DEFAULT_SECTION_NAME, items=items)],
            metrics=ClusteringMetrics(total_items=len(items)),
        )

    clusters = cluster_items(items, options.min_similarity)
    sections = [Section(name=namer(cluster), items=cluster) for cluster in clusters]
    sections.sort(key=lambda section: -len(section.items))

    metrics = ClusteringMetrics(
        total_items=len(items),
        cluster_count=len(clusters),
        average_cluster_size=len(items) / len(clusters),
        clustered=True,
    )
    return ClusteringResult(sections=sections, metrics=metrics)


def generate_sections(
    items: Sequence[ContentItem] | None,
    options: ClusteringOptions | None = None,
) -> list[Section]:
    """Return the ordered sections for *items*; see :func:`cluster_with_metrics`."""
    return cluster_with_metrics(items, options).sections
