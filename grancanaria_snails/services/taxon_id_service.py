import hashlib
from typing import Optional
import pandas as pd
from grancanaria_snails.models.dataset_models import DatasetMetadata
from grancanaria_snails.utils.helper import log


class TaxonIDService:
    """Generates stable identifiers scoped by the dataset namespace"""

    def __init__(self, metadata: Optional[DatasetMetadata] = None):
        self.metadata = metadata or DatasetMetadata()

    def taxon_id(self, verbatim_name: str, kingdom: str) -> str:
        digest = hashlib.md5(f"{verbatim_name}{kingdom}".encode("utf-8")).hexdigest()
        return f"{self.metadata.namespace}:taxon:{digest}"

    def add_taxon_ids(self, df: pd.DataFrame) -> pd.DataFrame:
        out = df.copy()
        names = out["verbatimScientificName"].fillna("").astype(str)
        kingdoms = out["kingdom"].fillna("").astype(str)
        out["taxonID"] = [self.taxon_id(n, k) for n, k in zip(names, kingdoms)]
        log(f"Generated taxonIDs for {out['taxonID'].nunique()} distinct taxa")
        return out

    def add_occurrence_ids(self, df: pd.DataFrame) -> pd.DataFrame:
        """Number records in file order unless the sheet already carries occurrenceIDs."""
        out = df.copy()
        generated = [f"{self.metadata.namespace}:occurrence:{i:04d}" for i in range(1, len(out) + 1)]
        if "occurrenceID" in out.columns:
            out["occurrenceID"] = out["occurrenceID"].astype(object).where(out["occurrenceID"].notna(), pd.Series(generated, index=out.index))
        else:
            out["occurrenceID"] = generated
        return out
