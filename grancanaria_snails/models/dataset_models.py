import os
from typing import Optional
from pydantic import BaseModel, ConfigDict


class DatasetMetadata(BaseModel):
    """Dataset-constant metadata injected into every occurrence record"""
    model_config = ConfigDict(frozen=True)

    namespace: str = "checklist_snails_grancanaria"
    language: str = "en"
    license: str = "http://creativecommons.org/publicdomain/zero/1.0/"
    rightsHolder: str = "UGent"
    datasetID: str = "checklist_snails_grancanaria"
    institutionCode: str = "UGent"
    datasetName: str = "Land and freshwater molluscs of Gran Canaria, Canary Islands, Spain"
    basisOfRecord: str = "PreservedSpecimen"
    kingdom: str = "Animalia"
    nomenclaturalCode: str = "ICZN"
    geodeticDatum: str = "WGS84"
    country: str = "Spain"
    countryCode: str = "ES"
    island: str = "Gran Canaria"

    @classmethod
    def from_env(cls) -> "DatasetMetadata":
        """Build metadata, letting environment variables override the defaults"""
        env_fields = {
            "DATASET_NAMESPACE": "namespace",
            "DATASET_ID": "datasetID",
            "DATASET_NAME": "datasetName",
            "DATASET_LICENSE": "license",
            "RIGHTS_HOLDER": "rightsHolder",
            "INSTITUTION_CODE": "institutionCode",
        }
        overrides = {field: os.environ[var] for var, field in env_fields.items() if os.getenv(var)}
        return cls(**overrides)


class ParsedName(BaseModel):
    """One record returned by the GBIF name parser"""
    scientificName: str
    type: Optional[str] = None
    canonicalName: Optional[str] = None
    authorship: Optional[str] = None
    rankMarker: Optional[str] = None
    parsed: bool = False
    parsedPartially: bool = False

    @property
    def fully_parsed(self) -> bool:
        return self.parsed and not self.parsedPartially and self.type == "SCIENTIFIC"
