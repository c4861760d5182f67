import pytest

from valuesmd.catalog import CHOICES, Catalog, Motif, load_catalog
from valuesmd.errors import ConfigurationError


def test_bundled_catalog_is_consistent(catalog):
    """Every dilemma defines A-D and every mapped choice names a known motif."""
    motif_ids = {m.motif_id for m in catalog.motifs}

    assert len(catalog.dilemmas) == 12
    assert catalog.framework_ids == [
        "consequentialist", "deontological", "virtue_ethics", "care_ethics", "pragmatic",
    ]
    for dilemma in catalog.dilemmas:
        assert set(dilemma.choices) == set(CHOICES)
        assert set(dilemma.motifs.values()) <= motif_ids


def test_every_motif_contributes_to_a_framework(catalog):
    for motif in catalog.motifs:
        assert motif.frameworks
        assert all(w > 0 for w in motif.frameworks.values())


def test_motif_order_follows_declaration(catalog):
    assert catalog.motif_order("NUMBERS_FIRST") == 0
    assert catalog.motif_order("AUTONOMY_RESPECT") == len(catalog.motifs) - 1
    with pytest.raises(KeyError):
        catalog.motif_order("NOPE")


def test_relations_are_sets_of_ids(small_catalog):
    assert small_catalog.motif("M3").synergies_with == frozenset({"M1"})
    assert small_catalog.motif("M1").conflicts_with == frozenset({"M2"})


@pytest.mark.parametrize("relation", ["conflicts_with", "synergies_with"])
def test_delimited_relation_strings_are_rejected(relation):
    motif = {"motif_id": "M1", "name": "One", "category": "c", "description": "d",
             "frameworks": {"f1": 1.0}, relation: "M2,M3"}

    with pytest.raises(ValueError, match="not a delimited string"):
        Motif.model_validate(motif)


def test_dilemma_lookup_and_mapping(small_catalog):
    dilemma = small_catalog.dilemma("D1")

    assert dilemma.motif_for("a") == "M1"
    assert dilemma.motif_for("D") is None
    assert small_catalog.dilemma("D9") is None


def _minimal(**overrides):
    data = {
        "frameworks": [{"framework_id": "f1", "name": "First"}],
        "motifs": [{"motif_id": "M1", "name": "One", "category": "c", "description": "d",
                    "frameworks": {"f1": 1.0}}],
        "dilemmas": [{"dilemma_id": "D1", "title": "t", "scenario": "s",
                      "choices": {"A": "a", "B": "b", "C": "c", "D": "d"}, "motifs": {"A": "M1"}}],
    }
    data.update(overrides)
    return data


@pytest.mark.parametrize("overrides, message", [
    ({"motifs": [{"motif_id": "M1", "name": "One", "category": "c", "description": "d",
                  "frameworks": {}}]}, "contributes to no framework"),
    ({"motifs": [{"motif_id": "M1", "name": "One", "category": "c", "description": "d",
                  "frameworks": {"f9": 1.0}}]}, "unknown frameworks"),
    ({"dilemmas": [{"dilemma_id": "D1", "title": "t", "scenario": "s",
                    "choices": {"A": "a", "B": "b", "C": "c", "D": "d"}, "motifs": {"A": "M7"}}]},
     "unknown motifs"),
    ({"dilemmas": [{"dilemma_id": "D1", "title": "t", "scenario": "s",
                    "choices": {"A": "a", "B": "b", "C": "c"}}]}, "exactly choices A-D"),
    ({"frameworks": [{"framework_id": "f1", "name": "First"}, {"framework_id": "f1", "name": "Again"}]},
     "duplicate framework ids"),
])
def test_inconsistent_catalog_is_rejected(overrides, message):
    with pytest.raises(ValueError, match=message):
        Catalog.from_dict(_minimal(**overrides))


def test_load_catalog_reports_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="cannot read catalog"):
        load_catalog(str(tmp_path / "missing.yml"))


def test_load_catalog_reports_invalid_content(tmp_path):
    # Arrange
    path = tmp_path / "catalog.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    # Act / Assert
    with pytest.raises(ConfigurationError, match="mapping at the top level"):
        load_catalog(str(path))


def test_load_catalog_reads_custom_file(tmp_path):
    path = tmp_path / "catalog.yml"
    path.write_text(
        "frameworks:\n"
        "  - {framework_id: f1, name: First}\n"
        "motifs:\n"
        "  - {motif_id: M1, name: One, category: c, description: d, frameworks: {f1: 1.0}}\n"
        "dilemmas:\n"
        "  - dilemma_id: D1\n"
        "    title: t\n"
        "    scenario: s\n"
        "    choices: {A: a, B: b, C: c, D: d}\n"
        "    motifs: {A: M1}\n",
        encoding="utf-8",
    )

    loaded = load_catalog(str(path))

    assert [d.dilemma_id for d in loaded.dilemmas] == ["D1"]
    assert loaded.dilemma("D1").domain == "general"
