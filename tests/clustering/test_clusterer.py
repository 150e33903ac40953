"""Tests for greedy clustering."""

from magazeen.clustering import ContentItem, cluster_items


def _item(item_id: str, title: str = "", body: str = "", category: str | None = None, tags=()):
    return ContentItem(id=item_id, title=title, body=body, category=category, tags=frozenset(tags))


def _ids(clusters: list[list[ContentItem]]) -> list[list[str]]:
    return [[item.id for item in cluster] for cluster in clusters]


def _scenario_items() -> list[ContentItem]:
    return [
        _item("basics", "Python Basics", "Learn Python fundamentals", "Tech"),
        _item("advanced", "Advanced Python", "Master Python techniques", "Tech"),
        _item("cooking", "Cooking Tips", "Cooking techniques and recipes", "Food"),
    ]


class TestClusterItems:
    def test_empty_input(self):
        assert cluster_items([]) == []

    def test_groups_related_items(self):
        clusters = _ids(cluster_items(_scenario_items(), 30))
        # Food sorts before Tech, so its seed comes first
        assert clusters == [["cooking"], ["basics", "advanced"]]

    def test_every_item_in_exactly_one_cluster(self):
        items = _scenario_items() + [
            _item("misc", "Volcanoes", "Lava and ash"),
            _item("garden", "Gardens", "Tomatoes and basil", "Food"),
        ]
        clusters = cluster_items(items, 30)
        flat = [item.id for cluster in clusters for item in cluster]
        assert sorted(flat) == sorted(item.id for item in items)
        assert all(cluster for cluster in clusters)

    def test_zero_threshold_makes_one_cluster(self):
        clusters = cluster_items(_scenario_items(), 0)
        assert len(clusters) == 1
        assert len(clusters[0]) == 3

    def test_unreachable_threshold_makes_singletons(self):
        clusters = cluster_items(_scenario_items(), 101)
        assert [len(cluster) for cluster in clusters] == [1, 1, 1]

    def test_higher_threshold_never_fewer_clusters(self):
        items = _scenario_items()
        counts = [len(cluster_items(items, threshold)) for threshold in (0, 10, 30, 50, 101)]
        assert counts == sorted(counts)

    def test_mean_against_current_members(self):
        shared_b = [f"t{i}" for i in range(8)]
        shared_c = [f"u{i}" for i in range(8)]
        a = _item("a", tags=shared_b + shared_c)
        b = _item("b", tags=shared_b)
        c = _item("c", tags=shared_c)
        # c scores 40 with a but 0 with b, so its mean drops to 20 once b joins
        assert _ids(cluster_items([a, b, c], 30)) == [["a", "b"], ["c"]]

    def test_rejection_is_not_revisited(self):
        a = _item("a", tags=["x"])
        b = _item("b", tags=[f"t{i}" for i in range(8)])
        c = _item("c", tags=["x"] + [f"t{i}" for i in range(8)])
        # b is rejected by a's cluster before c joins it and is never reconsidered
        assert _ids(cluster_items([a, b, c], 5)) == [["a", "c"], ["b"]]

    def test_uncategorised_sorts_last(self):
        items = [
            _item("none"),
            _item("beta", category="Beta"),
            _item("alpha", category="Alpha"),
        ]
        assert _ids(cluster_items(items, 101)) == [["alpha"], ["beta"], ["none"]]

    def test_category_order_is_ordinal(self):
        items = [_item("lower", category="apple"), _item("upper", category="Zebra")]
        assert _ids(cluster_items(items, 101)) == [["upper"], ["lower"]]

    def test_sort_is_stable_within_category(self):
        items = [_item(f"i{n}", category="Same") for n in range(5)]
        assert _ids(cluster_items(items, 101)) == [[f"i{n}"] for n in range(5)]

    def test_deterministic(self):
        items = _scenario_items()
        assert _ids(cluster_items(items, 30)) == _ids(cluster_items(items, 30))

    def test_does_not_mutate_input(self):
        items = _scenario_items()
        before = [item.model_copy() for item in items]
        cluster_items(items, 30)
        assert items == before
