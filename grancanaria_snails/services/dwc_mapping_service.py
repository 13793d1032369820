from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import pandas as pd
from grancanaria_snails.models.dataset_models import DatasetMetadata
from grancanaria_snails.utils.helper import log

# Spreadsheet column -> Darwin Core term
COLUMN_RENAMES = {
    "verbatimScientificName": "verbatimIdentification",
    "species": "specificEpithet",
    "subspecies": "infraspecificEpithet",
    "author": "scientificNameAuthorship",
    "determiner": "identifiedBy",
    "collector": "recordedBy",
    "date": "eventDate",
    "registration_number": "catalogNumber",
    "number": "individualCount",
    "altitude": "verbatimElevation",
    "remarks": "occurrenceRemarks",
}

# GBIF parser rank marker -> dwc:taxonRank
RANK_VOCABULARY = {
    "sp.": "species",
    "infrasp.": "subspecies",
    "subsp.": "subspecies",
    "var.": "variety",
    "f.": "form",
    "gen.": "genus",
}

CONSTANT_TERMS = [
    "language",
    "license",
    "rightsHolder",
    "datasetID",
    "institutionCode",
    "datasetName",
    "basisOfRecord",
    "country",
    "countryCode",
    "island",
    "geodeticDatum",
    "nomenclaturalCode",
]

# Leading output columns, in order
DWC_OCCURRENCE_TERMS = [
    "language",
    "license",
    "rightsHolder",
    "datasetID",
    "institutionCode",
    "datasetName",
    "basisOfRecord",
    "occurrenceID",
    "catalogNumber",
    "recordedBy",
    "individualCount",
    "disposition",
    "occurrenceRemarks",
    "eventDate",
    "country",
    "countryCode",
    "island",
    "locality",
    "verbatimElevation",
    "decimalLatitude",
    "decimalLongitude",
    "geodeticDatum",
    "identifiedBy",
    "verbatimIdentification",
    "taxonID",
    "scientificName",
    "kingdom",
    "genus",
    "specificEpithet",
    "infraspecificEpithet",
    "taxonRank",
    "scientificNameAuthorship",
    "nomenclaturalCode",
]

# Other Darwin Core terms valid in an Occurrence core. Sheet columns with these
# names pass through after the ordered columns above.
DWC_PASSTHROUGH_TERMS = frozenset([
    # record-level
    "modified", "bibliographicCitation", "references", "institutionID",
    "collectionID", "collectionCode", "ownerInstitutionCode", "informationWithheld",
    "dataGeneralizations", "dynamicProperties", "accessRights",
    # occurrence
    "recordNumber", "organismQuantity", "organismQuantityType", "sex", "lifeStage",
    "reproductiveCondition", "behavior", "establishmentMeans", "degreeOfEstablishment",
    "pathway", "georeferenceVerificationStatus", "occurrenceStatus", "preparations",
    "associatedMedia", "associatedReferences", "associatedSequences", "associatedTaxa",
    "otherCatalogNumbers", "recordedByID",
    # organism
    "organismID", "organismName", "organismRemarks",
    # event
    "eventID", "parentEventID", "fieldNumber", "eventTime", "startDayOfYear",
    "endDayOfYear", "year", "month", "day", "verbatimEventDate", "habitat",
    "samplingProtocol", "sampleSizeValue", "sampleSizeUnit", "samplingEffort",
    "fieldNotes", "eventRemarks",
    # location
    "locationID", "higherGeography", "continent", "waterBody", "islandGroup",
    "stateProvince", "county", "municipality", "verbatimLocality",
    "minimumElevationInMeters", "maximumElevationInMeters", "minimumDepthInMeters",
    "maximumDepthInMeters", "verbatimDepth", "locationAccordingTo", "locationRemarks",
    "coordinateUncertaintyInMeters", "coordinatePrecision", "verbatimCoordinates",
    "verbatimLatitude", "verbatimLongitude", "verbatimCoordinateSystem", "verbatimSRS",
    "georeferencedBy", "georeferencedDate", "georeferenceProtocol", "georeferenceSources",
    "georeferenceRemarks",
    # identification
    "identificationID", "identificationQualifier", "typeStatus", "identifiedByID",
    "dateIdentified", "identificationReferences", "identificationVerificationStatus",
    "identificationRemarks",
    # taxon
    "scientificNameID", "acceptedNameUsage", "higherClassification", "phylum",
    "class", "order", "family", "subfamily", "genericName", "subgenus",
    "infragenericEpithet", "cultivarEpithet", "verbatimTaxonRank", "vernacularName",
    "taxonomicStatus", "taxonRemarks",
])

# Parser and collection-management columns. "type" is the parser name type here,
# not dcterms:type.
INTERNAL_COLUMNS = frozenset([
    "rankMarker", "canonicalName", "parsed", "parsedPartially", "type", "etiket_reference", "collection",
])


def round_half_up(value, places: int = 4) -> Optional[float]:
    """Round to places decimals, halves away from zero (28.12345 -> 28.1235)."""
    if value is None or pd.isna(value):
        return None
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def map_rank(marker) -> str:
    if not isinstance(marker, str):
        return ""
    return RANK_VOCABULARY.get(marker.strip(), "")


class DwCMappingService:
    """Maps resolved occurrence records onto Darwin Core Occurrence terms"""

    def __init__(self, metadata: Optional[DatasetMetadata] = None):
        self.metadata = metadata or DatasetMetadata()

    def _round_coordinates(self, df: pd.DataFrame) -> pd.DataFrame:
        for col in ("decimalLatitude", "decimalLongitude"):
            if col not in df.columns:
                continue
            numeric = pd.to_numeric(df[col], errors="coerce")
            invalid = int((numeric.isna() & df[col].notna()).sum())
            if invalid:
                log(f"{invalid} non-numeric value(s) in {col} left empty", "WARNING")
            df[col] = numeric.map(round_half_up).astype(float)
        return df

    def map_terms(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rename, recode and complete df so that it holds only Darwin Core Occurrence terms.

        The ordered DWC_OCCURRENCE_TERMS come first, followed by any other
        Darwin Core term present in the sheet, in sheet order.
        """
        out = df.rename(columns=COLUMN_RENAMES)

        out["taxonRank"] = out["rankMarker"].map(map_rank) if "rankMarker" in out.columns else ""
        unmapped = sorted({m for m in out.get("rankMarker", pd.Series(dtype=object)).dropna()
                           if map_rank(m) == ""})
        if unmapped:
            log(f"Rank markers without a taxonRank term, left empty: {', '.join(map(str, unmapped))}", "WARNING")

        for term in CONSTANT_TERMS:
            out[term] = getattr(self.metadata, term)
        if "kingdom" not in out.columns:
            out["kingdom"] = self.metadata.kingdom

        if "individualCount" in out.columns:
            counts = pd.to_numeric(out["individualCount"], errors="coerce")
            out["individualCount"] = counts.map(lambda v: round_half_up(v, 0)).astype("Float64").astype("Int64")

        out = self._round_coordinates(out)

        kept = [c for c in DWC_OCCURRENCE_TERMS if c in out.columns]
        kept += [c for c in out.columns
                 if c in DWC_PASSTHROUGH_TERMS and c not in INTERNAL_COLUMNS and c not in kept]
        dropped = [c for c in out.columns if c not in kept]
        if dropped:
            log(f"Dropping {len(dropped)} non Darwin Core column(s): {', '.join(dropped)}")
        return out[kept].reset_index(drop=True)
