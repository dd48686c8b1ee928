import pytest

from app.models.db.enums import CategoryStatus, MatchSource
from app.services.category_resolution import contains_word, is_placeholder, resolve_category
from app.services.category_rules import CategoryRule, RuleBook, load_rule_book


def rule(id, name, search_index="All", percentage=0.0, queries=()):
    return CategoryRule(id=id, name=name, search_index=search_index, percentage=percentage, search_queries=tuple(queries))


@pytest.fixture()
def book():
    return RuleBook([
        rule(1, "Electronics", "Electronics", 4.0, ["gadgets", "mobile phones"]),
        rule(2, "Fashion", "Fashion", 5.0, ["clothing"]),
        rule(3, "Watches", "Watches", 3.0),
        rule(4, "Books", "Books", 0.0, ["novels"]),
    ])


def test_led_tv_without_category_resolves_to_electronics(book):
    res = resolve_category("Uncategorized", "Samsung 55 inch Smart LED TV", book)
    assert res.category == "Electronics"
    assert res.commission_rate == pytest.approx(0.04)
    assert res.matched_by is MatchSource.PRODUCT_TERM
    assert res.rule_id == 1


@pytest.mark.parametrize("label", ["electronics", "ELECTRONICS", "  Electronics "])
def test_explicit_name_match_is_case_insensitive(book, label):
    res = resolve_category(label, "Anything", book)
    assert res.category == "Electronics"
    assert res.matched_by is MatchSource.EXPLICIT


def test_explicit_match_on_search_index_and_synonym():
    book = RuleBook([rule(7, "Gadgets & Gizmos", "Electronics", 6.0, ["Mobile Phones"])])
    assert resolve_category("electronics", "x", book).category == "Gadgets & Gizmos"
    res = resolve_category("mobile phones", "x", book)
    assert res.category == "Gadgets & Gizmos"
    assert res.matched_by is MatchSource.EXPLICIT


def test_explicit_category_beats_product_terms(book):
    res = resolve_category("Fashion", "Smart TV printed t-shirt", book)
    assert res.category == "Fashion"
    assert res.commission_rate == pytest.approx(0.05)


def test_smart_map_routes_label_to_rule_by_search_index(book):
    res = resolve_category("Mobiles", "Redmi Note 13", book)
    assert res.category == "Electronics"
    assert res.matched_by is MatchSource.SMART_MAP


def test_word_boundaries_prevent_substring_hits(book):
    res = resolve_category(None, "Sealed Storage Box", book)
    assert res.category == "Uncategorized"
    assert res.commission_rate == pytest.approx(0.02)
    assert res.matched_by is MatchSource.DEFAULT
    assert res.rule_id is None


def test_keyword_sweep_uses_rule_synonyms(book):
    res = resolve_category("", "Bestselling Novels Box Set", book)
    # Books has no positive rate, so its name is kept with the default rate
    assert res.category == "Books"
    assert res.commission_rate == pytest.approx(0.02)
    assert res.matched_by is MatchSource.KEYWORD_SWEEP


def test_zero_rate_match_keeps_searching_for_a_positive_rate(book):
    res = resolve_category("Books", "Kindle Paperwhite tablet", book)
    assert res.category == "Electronics"
    assert res.commission_rate == pytest.approx(0.04)
    assert res.matched_by is MatchSource.PRODUCT_TERM


def test_zero_rate_explicit_match_falls_back_to_default_rate(book):
    res = resolve_category("Books", "The Pragmatic Programmer", book)
    assert res.category == "Books"
    assert res.commission_rate == pytest.approx(0.02)
    assert res.matched_by is MatchSource.EXPLICIT


def test_short_keywords_are_ignored_by_sweep():
    book = RuleBook([rule(1, "Ox", "Industrial", 5.0, ["ox", "oxford shoes"])])
    assert resolve_category(None, "Ox tail soup", book).matched_by is MatchSource.DEFAULT
    res = resolve_category(None, "Oxford Shoes Brown", book)
    assert res.category == "Ox"
    assert res.matched_by is MatchSource.KEYWORD_SWEEP


def test_unknown_input_category_becomes_uncategorized(book):
    res = resolve_category("Bizarre Widgets", "Mystery object", book)
    assert res.category == "Uncategorized"
    assert res.matched_by is MatchSource.DEFAULT


def test_empty_rule_book_defaults():
    res = resolve_category("Electronics", "Samsung LED TV", RuleBook([]))
    assert res.category == "Uncategorized"
    assert res.commission_rate == pytest.approx(0.02)


def test_contains_word_and_placeholders():
    assert contains_word("Smart LED TV", "led tv")
    assert not contains_word("sealed", "led")
    assert not contains_word("axb tool", "a.b")
    assert not contains_word("", "tv")
    assert is_placeholder(None)
    assert is_placeholder("  ")
    assert is_placeholder("unknown")
    assert not is_placeholder("Books")


def test_rule_book_loads_only_active_categories(category_factory, db_session):
    category_factory("Electronics", search_index="Electronics", percentage=4)
    category_factory("Watches", search_index="Watches", percentage=3, status=CategoryStatus.INACTIVE)

    book = load_rule_book(db_session)
    assert [r.name for r in book.list_active()] == ["Electronics"]
    res = resolve_category(None, "Titan analog watch", book)
    assert res.category == "Uncategorized"
