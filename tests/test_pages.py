from components.data_source_badge import create_data_source_badge
from pages import overview, quarterly


def _ids(component):
    found = set()
    stack = [component]
    while stack:
        node = stack.pop()
        if node is None or isinstance(node, (str, int, float)):
            continue
        if isinstance(node, (list, tuple)):
            stack.extend(node)
            continue
        if getattr(node, "id", None):
            found.add(node.id)
        stack.append(getattr(node, "children", None))
    return found


def test_overview_layout_ids():
    ids = _ids(overview.layout)
    for expected in (
        "welcome-line1",
        "latest-stats-container",
        "historical-stats-container",
        "timeframe-radio",
        "view-mode-radio",
        "balance-flow-chart",
        "return-combo-chart",
    ):
        assert expected in ids


def test_quarterly_layout_ids():
    assert "quarterly-table-container" in _ids(quarterly.layout)


def test_stat_card_edge_colour():
    card = overview.create_stat_card("Total Return", "$1.00", is_positive=False)
    assert card.style["borderLeft"] == "4px solid #dc3545"


def test_badge_flags_issues():
    badge = create_data_source_badge({
        "source_type": "API",
        "source": "api:boe",
        "record_count": 3,
        "used_count": 2,
        "errors": ["Record 1 (Income Paid): unparseable amount 'x'; skipped"],
    })
    pill = badge.children[0]
    assert pill.children == "Live API · 1 Issues"
    assert pill.color == "warning"


def test_badge_empty_dataset():
    badge = create_data_source_badge({"source_type": "File", "record_count": 0, "errors": []})
    assert badge.children[0].children == "No Data"
