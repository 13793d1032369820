import pandas as pd
import pytest

from grancanaria_snails.services.rank_service import RankResolverService, GENUS_PLACEHOLDERS


def _parsed(rows):
    return pd.DataFrame(rows, columns=["verbatimScientificName", "scientificName", "rankMarker"])


@pytest.fixture
def resolver():
    return RankResolverService()


def test_marker_joined_by_verbatim_name(resolver):
    df = pd.DataFrame({"verbatimScientificName": ["Hemicycla saulcyi", "Canariella hispidula", "Hemicycla saulcyi"]})
    parsed = _parsed([
        ["Hemicycla saulcyi", "Hemicycla saulcyi", "sp."],
        ["Canariella hispidula", "Canariella hispidula", "sp."],
    ])

    out = resolver.resolve(df, parsed)

    assert len(out) == 3
    assert out["rankMarker"].tolist() == ["sp.", "sp.", "sp."]
    assert out["scientificName"].tolist() == ["Hemicycla saulcyi", "Canariella hispidula", "Hemicycla saulcyi"]


@pytest.mark.parametrize("name", GENUS_PLACEHOLDERS)
def test_genus_placeholders_forced_to_genus(resolver, name):
    df = pd.DataFrame({"verbatimScientificName": [name]})
    parsed = _parsed([[name, name.replace(" spec.", ""), "sp."]])

    out = resolver.resolve(df, parsed)

    assert out.loc[0, "rankMarker"] == "gen."


def test_other_markers_pass_through(resolver):
    df = pd.DataFrame({"verbatimScientificName": ["Napaeus badiosus", "Hemicycla saulcyi inaccessibilis"]})
    parsed = _parsed([
        ["Napaeus badiosus", "Napaeus badiosus", "var."],
        ["Hemicycla saulcyi inaccessibilis", "Hemicycla saulcyi inaccessibilis", "infrasp."],
    ])

    out = resolver.resolve(df, parsed)

    assert out["rankMarker"].tolist() == ["var.", "infrasp."]


def test_names_without_parse_row_get_missing_marker(resolver):
    df = pd.DataFrame({"verbatimScientificName": ["Hemicycla saulcyi", None]})
    parsed = _parsed([["Hemicycla saulcyi", "Hemicycla saulcyi", None]])

    out = resolver.resolve(df, parsed)

    assert out["rankMarker"].isna().all()
