"""
Tests for the query key registry.
"""

from dashboard_cache.keys import dashboard_keys, key_for, matches_prefix


def test_keys_are_unique_per_resource_and_parameters():
    """Test that distinct resources and parameters never share a key."""
    keys = [
        dashboard_keys.stats(),
        dashboard_keys.recent_projects(5),
        dashboard_keys.recent_projects(10),
        dashboard_keys.priority_issues(5),
        dashboard_keys.priority_issues(10),
        dashboard_keys.performance_trends(30),
        dashboard_keys.performance_trends(7),
        dashboard_keys.issue_trends(30),
        dashboard_keys.distribution(),
        dashboard_keys.analysis_history_page(20, 1),
        dashboard_keys.analysis_history_page(20, 2),
        dashboard_keys.analysis_history_page(10, 1),
    ]
    assert len(set(keys)) == len(keys)


def test_keys_are_stable():
    """Test that equal parameters build equal keys."""
    assert dashboard_keys.recent_projects(5) == dashboard_keys.recent_projects(5)
    assert dashboard_keys.recent_projects(5) == ("dashboard", "projects", "recent", 5)
    assert dashboard_keys.analysis_history_page(20, 3) == ("dashboard", "analysis-history", 20, 3)


def test_resource_keys_lie_under_their_category():
    """Test prefix containment of the key hierarchy."""
    assert matches_prefix(dashboard_keys.recent_projects(5), dashboard_keys.projects())
    assert matches_prefix(dashboard_keys.priority_issues(10), dashboard_keys.issues())
    assert matches_prefix(dashboard_keys.performance_trends(30), dashboard_keys.trends())
    assert matches_prefix(dashboard_keys.issue_trends(30), dashboard_keys.trends())
    assert matches_prefix(dashboard_keys.analysis_history_page(20, 1), dashboard_keys.analysis_history())


def test_every_key_lies_under_the_namespace():
    for key in [
        dashboard_keys.stats(),
        dashboard_keys.recent_projects(5),
        dashboard_keys.priority_issues(10),
        dashboard_keys.issue_trends(7),
        dashboard_keys.distribution(),
    ]:
        assert matches_prefix(key, dashboard_keys.all)


def test_keys_do_not_cross_categories():
    assert not matches_prefix(dashboard_keys.recent_projects(5), dashboard_keys.issues())
    assert not matches_prefix(dashboard_keys.stats(), dashboard_keys.projects())
    # Issue trends belong to trends, not to issues
    assert not matches_prefix(dashboard_keys.issue_trends(30), dashboard_keys.issues())


def test_empty_prefix_matches_everything():
    assert matches_prefix(key_for("other", 1), ())
    assert matches_prefix(dashboard_keys.stats(), ())


def test_longer_prefix_does_not_match_shorter_key():
    assert not matches_prefix(dashboard_keys.projects(), dashboard_keys.recent_projects(5))
