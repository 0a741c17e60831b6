from app.pipeline.query_interpreter import (
    extract_county,
    extract_keywords,
    extract_state,
    interpret_query,
)
from app.schemas.search import SearchFilters


def test_city_population_and_need_from_simple_query():
    hints = interpret_query("family shelter in Plano")

    assert hints.query == "family shelter in Plano"
    assert hints.normalized_query == "family shelter in plano"
    assert hints.city == "Plano"
    assert hints.county is None
    assert hints.state is None
    assert hints.populations == ["families"]
    assert hints.need_types == ["shelter"]
    assert hints.keywords == ["plano"]
    assert hints.has_locality


def test_near_pattern_with_state_abbreviation():
    hints = interpret_query("youth housing near Dallas, TX")

    assert hints.city == "Dallas"
    assert hints.state == "TX"
    assert hints.populations == ["youth"]
    assert hints.need_types == ["housing"]


def test_full_state_name_is_abbreviated():
    hints = interpret_query("food pantry in Austin, Texas")

    assert hints.city == "Austin"
    assert hints.state == "TX"


def test_county_phrase_is_not_mistaken_for_a_city():
    hints = interpret_query("shelter in Dallas County")

    assert hints.county == "Dallas County"
    assert hints.city is None


def test_extract_county_drops_leading_stopwords():
    assert extract_county("beds for veterans in tarrant county") == "Tarrant County"
    assert extract_county("any shelter at all") is None


def test_county_name_keeps_only_the_word_before_the_suffix():
    assert extract_county("food bank harris county") == "Harris County"
    assert extract_county("emergency beds dallas county") == "Dallas County"
    assert extract_county("homeless shelters dallas county") == "Dallas County"
    assert interpret_query("food bank harris county").county == "Harris County"


def test_known_two_word_county_names_survive():
    assert extract_county("shelter in fort bend county") == "Fort Bend County"
    assert extract_county("pantry san patricio county") == "San Patricio County"
    assert extract_county("housing st tammany parish") == "St Tammany Parish"


def test_lowercase_ambiguous_abbreviation_is_ignored():
    assert extract_state("shelter or housing") is None
    assert extract_state("shelter in me") is None


def test_uppercase_abbreviation_is_trusted_and_stripped_from_city():
    hints = interpret_query("shelter in Portland OR")

    assert hints.state == "OR"
    assert hints.city == "Portland"


def test_longest_state_name_wins():
    assert extract_state("programs in west virginia") == "WV"


def test_short_terms_only_match_whole_words():
    hints = interpret_query("women's shelter")

    assert hints.populations == ["women"]


def test_term_prefix_and_plural_matching():
    hints = interpret_query("teens needing beds")

    assert hints.populations == ["youth"]
    assert hints.need_types == ["bed"]


def test_keywords_skip_stopwords_tags_and_duplicates():
    assert extract_keywords("emergency emergency shelter for veterans") == ["emergency"]


def test_explicit_filters_take_precedence():
    filters = SearchFilters(location_city="Frisco", state="TX", populations=["veterans"])

    hints = interpret_query("family shelter in Plano", filters)

    assert hints.city == "Frisco"
    assert hints.state == "TX"
    assert hints.populations == ["veterans", "families"]
    assert hints.need_types == ["shelter"]


def test_explicit_state_beats_a_conflicting_inferred_state():
    hints = interpret_query("shelter in Austin, Texas", SearchFilters(state="CA"))

    assert hints.state == "CA"
    assert hints.city == "Austin"


def test_explicit_county_beats_a_conflicting_inferred_county():
    inferred = interpret_query("shelter in Dallas County")
    hints = interpret_query(
        "shelter in Dallas County", SearchFilters(location_county="Collin County")
    )

    assert inferred.county == "Dallas County"
    assert hints.county == "Collin County"


def test_explicit_lists_are_deduplicated_case_insensitively():
    filters = SearchFilters(need_types=["Shelter", "  "])

    hints = interpret_query("emergency shelter", filters)

    assert hints.need_types == ["Shelter"]


def test_blank_query_degrades_to_empty_hints():
    hints = interpret_query("   ")

    assert hints.query == ""
    assert hints.city is None
    assert hints.keywords == []
    assert not hints.has_locality
