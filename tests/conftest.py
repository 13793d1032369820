import pytest
import pandas as pd
from typing import List

from grancanaria_snails.models.dataset_models import DatasetMetadata, ParsedName


class FakeParserService:
    """Offline stand-in for the GBIF name parser.

    Mimics what the parser returns for the names used in these tests:
    informal qualifiers are reported as INFORMAL, binomials get "sp." and
    trinomials "infrasp.".
    """

    def __init__(self, overrides=None):
        self.calls: List[List[str]] = []
        self.overrides = overrides or {}

    def _parse_one(self, name: str) -> ParsedName:
        if name in self.overrides:
            return ParsedName(scientificName=name, **self.overrides[name])
        words = name.split()
        informal = any(q in words for q in ("aff.", "cf.", "spec."))
        epithets = [w for w in words[1:] if w not in ("aff.", "cf.", "spec.", "var.", "f.")]
        if "var." in words:
            marker = "var."
        elif "f." in words:
            marker = "f."
        elif len(epithets) >= 2:
            marker = "infrasp."
        elif len(epithets) == 1 or "spec." in words:
            marker = "sp."
        else:
            marker = None
        canonical = " ".join([words[0]] + epithets) if words else None
        return ParsedName(
            scientificName=name,
            type="INFORMAL" if informal else "SCIENTIFIC",
            canonicalName=canonical,
            rankMarker=marker,
            parsed=True,
            parsedPartially=informal,
        )

    def parse_names(self, names):
        self.calls.append(list(names))
        return [self._parse_one(n) for n in names]


@pytest.fixture
def fake_parser():
    return FakeParserService()


@pytest.fixture
def offline_parser(monkeypatch):
    """Make the pipeline build FakeParserService instead of the real GBIF client"""
    monkeypatch.setattr("grancanaria_snails.main.GBIFNameParserService", FakeParserService)
    return FakeParserService


@pytest.fixture
def metadata():
    return DatasetMetadata()


@pytest.fixture
def raw_records_df():
    """Spreadsheet rows as the loader returns them"""
    return pd.DataFrame({
        "verbatimScientificName": [
            "Gibbulinella aff. dealbata",
            "Napaeus spec.",
            "Hemicycla saulcyi",
            "Hemicycla saulcyi",
            "Canariella hispidula",
        ],
        "genus": ["Gibbulinella", "Napaeus", "Hemicycla", "Hemicycla", "Canariella"],
        "species": ["dealbata", None, "saulcyi", "saulcyi", "hispidula"],
        "subspecies": [None, None, None, None, None],
        "author": ["(Webb & Berthelot, 1833)", None, "(d'Orbigny, 1839)", "(d'Orbigny, 1839)", "(Lowe, 1852)"],
        "collector": ["M. Ibáñez", "M. Ibáñez", "K. Groh", "K. Groh", "M. Alonso"],
        "determiner": ["D. Hutterer", "D. Hutterer", "K. Groh", "K. Groh", "M. Alonso"],
        "decimalLatitude": [28.123456, 27.95, 28.00004999, 28.1, 27.81],
        "decimalLongitude": [-15.43215, -15.6, -15.5, -15.5, -15.61],
        "disposition": ["in collection", "in collection", "missing", "in collection", "in collection"],
        "etiket_reference": ["E1", "E2", "E3", "E4", "E5"],
        "collection": ["UGent", "UGent", "UGent", "UGent", "UGent"],
        "kingdom": ["Animalia"] * 5,
    })


@pytest.fixture
def source_xlsx(tmp_path, raw_records_df):
    """The raw records written to an Excel workbook, as delivered by the data provider"""
    path = tmp_path / "snails_grancanaria.xlsx"
    raw_records_df.drop(columns=["kingdom"]).to_excel(path, index=False, engine="openpyxl")
    return str(path)
