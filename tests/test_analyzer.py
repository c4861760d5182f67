from fractions import Fraction

import pytest

from valuesmd.catalog import Catalog
from valuesmd.core import analyze, motif_shares, normalize_percentages
from valuesmd.errors import DataIntegrityError, EmptyInputError


# --- normalize_percentages ---

def test_normalize_thirds_gives_remainder_to_first_in_order():
    shares = normalize_percentages({"a": Fraction(1), "b": Fraction(1), "c": Fraction(1)}, ["a", "b", "c"])

    assert shares == {"a": 34, "b": 33, "c": 33}


def test_normalize_absorbs_rounding_overshoot_in_largest_share():
    """50 / 37.5 / 12.5 rounds half-up to 101, so the largest share gives one back."""
    shares = normalize_percentages(
        {"x": Fraction(8, 10), "y": Fraction(6, 10), "z": Fraction(2, 10)},
        ["x", "y", "z"],
    )

    assert shares == {"x": 49, "y": 38, "z": 13}


def test_normalize_keeps_zero_buckets():
    shares = normalize_percentages({"a": Fraction(3)}, ["a", "b"])

    assert shares == {"a": 100, "b": 0}


def test_normalize_rejects_zero_total():
    with pytest.raises(ValueError):
        normalize_percentages({"a": Fraction(0)}, ["a"])


def test_normalize_many_equal_buckets_never_goes_negative():
    """Forty equal buckets round to 3 each; the remainder method hands out the 100 points instead."""
    order = [f"f{i:02d}" for i in range(40)]

    shares = normalize_percentages({key: Fraction(1) for key in order}, order)

    assert sum(shares.values()) == 100
    assert all(v >= 0 for v in shares.values())
    assert [shares[k] for k in order] == [3] * 20 + [2] * 20


# --- motif_shares ---

def test_equal_counts_get_equal_shares():
    order = [f"M{i}" for i in range(8)]

    assert set(motif_shares({key: 1 for key in order}, order).values()) == {13}


def test_shares_never_increase_down_the_ranking():
    counts = {"a": 2, "b": 2, "c": 2, "d": 2, "e": 2, "f": 1, "g": 1}

    shares = motif_shares(counts, list(counts))

    assert list(shares.values()) == [17, 17, 17, 17, 17, 8, 8]


# --- analyze ---

def test_all_a_profile(catalog, all_a_responses):
    """Ranking by count, ties broken by catalog declaration order."""
    # Act
    profile = analyze(all_a_responses, catalog)

    # Assert
    assert profile.total_responses == 12
    assert list(profile.motif_counts) == [
        "NUMBERS_FIRST", "UTIL_CALC", "RULES_FIRST", "PERSON_FIRST", "SAFETY_FIRST", "AUTONOMY_RESPECT",
    ]
    assert profile.motif_counts["NUMBERS_FIRST"] == 6
    assert profile.primary_motifs == (
        "NUMBERS_FIRST", "UTIL_CALC", "RULES_FIRST", "PERSON_FIRST", "SAFETY_FIRST",
    )
    assert [m.percentage for m in profile.ranked_motifs] == [50, 17, 8, 8, 8, 8]
    assert profile.decision_stats.consistency == 0.5


def test_counts_are_conserved_and_alignment_sums_to_100(catalog, make_answers):
    responses = make_answers(
        ("DM001", "B"), ("DM002", "C"), ("DM003", "D"), ("DM004", "A"),
        ("DM005", "D"), ("DM007", "B"), ("DM010", "D"),
    )

    profile = analyze(responses, catalog)

    assert sum(profile.motif_counts.values()) == len(responses)
    shares = [m.percentage for m in profile.ranked_motifs]
    assert shares == sorted(shares, reverse=True)
    assert sum(profile.framework_alignment.values()) == 100
    assert list(profile.framework_alignment) == catalog.framework_ids


def test_analysis_is_deterministic(catalog, all_a_responses):
    assert analyze(all_a_responses, catalog) == analyze(list(all_a_responses), catalog)


def test_single_response_profile(small_catalog, make_answers):
    """One answer: that motif is 100% and alignment mirrors its contributions."""
    profile = analyze(make_answers(("D1", "A")), small_catalog)

    assert profile.primary_motifs == ("M1",)
    assert profile.ranked_motifs[0].percentage == 100
    assert profile.framework_alignment == {"f1": 100, "f2": 0}
    assert profile.decision_stats.consistency == 1.0


def test_single_bundled_response_alignment(catalog, make_answers):
    profile = analyze(make_answers(("DM001", "A")), catalog)

    assert profile.framework_alignment == {
        "consequentialist": 49,
        "deontological": 13,
        "virtue_ethics": 0,
        "care_ethics": 0,
        "pragmatic": 38,
    }


def test_tie_break_uses_declaration_order(small_catalog, make_answers):
    # Arrange: M2 is answered first but M1 is declared first
    responses = make_answers(("D1", "B"), ("D2", "A"))

    # Act
    profile = analyze(responses, small_catalog)

    # Assert
    assert profile.primary_motifs == ("M1", "M2")
    assert [m.percentage for m in profile.ranked_motifs] == [50, 50]
    assert profile.framework_alignment == {"f1": 50, "f2": 50}


def test_primary_count_limits_primary_motifs(small_catalog, make_answers):
    profile = analyze(make_answers(("D1", "A"), ("D2", "B"), ("D3", "C")), small_catalog, primary_count=2)

    assert profile.primary_motifs == ("M1", "M2")
    assert len(profile.ranked_motifs) == 3


def test_domains_in_first_seen_order(small_catalog, make_answers):
    profile = analyze(make_answers(("D1", "A"), ("D2", "B"), ("D3", "A")), small_catalog)

    assert profile.domains == {"alpha": ("M1",), "beta": ("M2",)}
    assert profile.ranked_motifs[0].domains == ("alpha",)


def test_relations_are_copied_into_frequencies(small_catalog, make_answers):
    profile = analyze(make_answers(("D1", "A"), ("D3", "C")), small_catalog)
    by_id = {m.motif_id: m for m in profile.ranked_motifs}

    assert by_id["M1"].conflicts_with == ("M2",)
    assert by_id["M3"].synergies_with == ("M1",)


def test_decision_stats_average_metadata(small_catalog, make_answers):
    responses = (
        make_answers(("D1", "A"), response_time=1000, perceived_difficulty=4)
        + make_answers(("D2", "A"), response_time=3000, perceived_difficulty=7)
    )

    stats = analyze(responses, small_catalog).decision_stats

    assert stats.average_response_time == 2000
    assert stats.average_difficulty == 5.5


def test_empty_responses_rejected(catalog):
    with pytest.raises(EmptyInputError):
        analyze([], catalog)


@pytest.mark.parametrize("pairs", [
    [("D1", "A"), ("D9", "A")],
    [("D1", "A"), ("D2", "E")],
    [("D1", "D")],
    [("D1", "A"), ("D1", "B")],
])
def test_integrity_failures_produce_no_profile(small_catalog, make_answers, pairs):
    with pytest.raises(DataIntegrityError):
        analyze(make_answers(*pairs), small_catalog)


def test_reasoning_can_be_skipped(small_catalog, make_answers):
    responses = make_answers(("D1", "A"), reasoning="I believe the data should decide this.")

    assert analyze(responses, small_catalog, include_reasoning=False).reasoning is None
    assert analyze(responses, small_catalog).reasoning.responses_with_reasoning == 1


def test_alignment_over_many_frameworks(make_answers):
    frameworks = [{"framework_id": f"f{i:02d}", "name": f"Framework {i}"} for i in range(40)]
    catalog = Catalog.from_dict({
        "frameworks": frameworks,
        "motifs": [{"motif_id": "M1", "name": "Broad", "category": "c", "description": "d",
                    "frameworks": {f["framework_id"]: 0.5 for f in frameworks}}],
        "dilemmas": [{"dilemma_id": "D1", "title": "t", "scenario": "s",
                      "choices": {"A": "a", "B": "b", "C": "c", "D": "d"}, "motifs": {"A": "M1"}}],
    })

    profile = analyze(make_answers(("D1", "A")), catalog)

    assert sum(profile.framework_alignment.values()) == 100
    assert min(profile.framework_alignment.values()) >= 0
    assert [f.percentage for f in profile.frameworks] == list(profile.framework_alignment.values())


def test_examples_quote_first_answers_in_order(catalog, make_answers):
    responses = (
        make_answers(("DM002", "B"), reasoning="  Privacy is a right.  ")
        + make_answers(("DM001", "A"), ("DM003", "C"), ("DM004", "A"))
    )

    examples = analyze(responses, catalog).examples

    assert [e.dilemma_id for e in examples] == ["DM002", "DM001", "DM003"]
    assert examples[0].title == "AI Assistant Data Privacy"
    assert examples[0].motif_id == "RULES_FIRST"
    assert examples[0].reasoning == "Privacy is a right."
    assert examples[1].reasoning is None


def test_frameworks_carry_catalog_details(catalog, make_answers):
    profile = analyze(make_answers(("DM001", "A")), catalog)
    first = profile.frameworks[0]

    assert [f.framework_id for f in profile.frameworks] == catalog.framework_ids
    assert (first.name, first.tradition, first.percentage) == ("Consequentialism", "Bentham, Mill", 49)
