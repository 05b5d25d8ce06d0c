import pytest
from nutri_app.data_model import PartialRecommendation
from nutri_app.safety_checks import attach_interaction_flags
from nutri_app.supplement_catalog import load_catalog
from nutri_app.text_extractor import build_extracted_recommendations


@pytest.fixture(scope="module")
def catalog():
    return load_catalog()


def recs_for(catalog, *names):
    return build_extracted_recommendations([PartialRecommendation(name, 1) for name in names], catalog)


def test_calcium_pairs_flagged_both_ways(catalog):
    recs = attach_interaction_flags(recs_for(catalog, "비타민D", "칼슘", "마그네슘"), catalog)
    by_name = {rec.name: rec for rec in recs}

    print("\n💊 Interaction flags:")
    for rec in recs:
        print(f"- {rec.name}: {rec.validation_flags}")

    assert by_name["칼슘"].validation_flags == ["⚠️ 함께 복용 시 주의: 마그네슘, 비타민D"]
    assert by_name["비타민D"].validation_flags == ["⚠️ 함께 복용 시 주의: 칼슘"]
    assert by_name["마그네슘"].validation_flags == ["⚠️ 함께 복용 시 주의: 칼슘"]


def test_no_interactions_no_flags(catalog):
    recs = attach_interaction_flags(recs_for(catalog, "오메가3", "루테인", "프로바이오틱스"), catalog)
    assert all(rec.validation_flags == [] for rec in recs)


def test_items_never_removed_and_flags_not_duplicated(catalog):
    recs = recs_for(catalog, "비타민D", "칼슘")
    attach_interaction_flags(recs, catalog)
    attach_interaction_flags(recs, catalog)
    assert [rec.name for rec in recs] == ["비타민D", "칼슘"]
    assert len(recs[0].validation_flags) == 1
