import pytest

from reportkit.services.reference_resolver import binding_name
from reportkit.services.reference_resolver import resolve_reference


@pytest.fixture
def context(make_bundle):
    bundle = make_bundle(
        records=[{"title": "a"}, {"title": "b"}],
        stats={"total": 2, "by_year": {"2023": 1, "2024": 1}},
        samples={"main": [{"title": "a"}]},
    )
    return {"bundle": bundle, "stats": bundle.stats, "summary_md": "S", "topics": ["x", "y"]}


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("bundle.stats.total", 2),
        ("bundle.stats.by_year.2024", 1),
        ("bundle.samples.main", [{"title": "a"}]),
        ("bundle.records.1.title", "b"),
        ("bundle.records.-1.title", "b"),
        ("bundle.metadata.record_count", 2),
        ("ctx.summary_md", "S"),
        ("ctx.topics.0", "x"),
        ("summary_md", "S"),
    ],
)
def test_resolve_reference(context, reference, expected):
    assert resolve_reference(reference, context) == expected


@pytest.mark.parametrize(
    "reference",
    ["bundle.stats.missing", "bundle.stats.missing.deeper", "bundle.records.9", "ctx.unknown", "unknown", "bundle.source.nope"],
)
def test_unresolvable_reference_is_none(context, reference):
    assert resolve_reference(reference, context) is None


def test_bare_bundle_reference_returns_bundle(context):
    assert resolve_reference("bundle", context) is context["bundle"]


@pytest.mark.parametrize(
    "reference, name",
    [
        ("bundle.samples.main", "samples"),
        ("ctx.summary_md", "summary_md"),
        ("bundle.stats", "stats"),
        ("summary_md", "summary_md"),
        ("bundle.stats.by_year.2024", "by_year"),
    ],
)
def test_binding_name(reference, name):
    assert binding_name(reference) == name
