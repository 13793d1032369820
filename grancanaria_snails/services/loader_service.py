import os
from typing import Optional, Union
import pandas as pd
from grancanaria_snails.models.dataset_models import DatasetMetadata
from grancanaria_snails.utils.helper import log

REQUIRED_COLUMNS = ["verbatimScientificName", "decimalLatitude", "decimalLongitude"]


class InputValidationError(Exception):
    """Raised when the source spreadsheet does not have the expected structure."""


class ExcelLoaderService:
    """Service for reading the source spreadsheet into a DataFrame"""

    def __init__(self, metadata: Optional[DatasetMetadata] = None):
        self.metadata = metadata or DatasetMetadata()

    def load(self, path: str, sheet_name: Optional[Union[str, int]] = None) -> pd.DataFrame:
        """Read one sheet of an .xlsx workbook and tidy its cells.

        Column names and string cells are stripped of surrounding whitespace and
        empty strings become missing values. A constant kingdom column is added
        when the sheet has none.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Input file not found: {path}")

        df = pd.read_excel(path, sheet_name=0 if sheet_name is None else sheet_name, engine="openpyxl")
        df.columns = [str(c).strip() for c in df.columns]
        df = df.dropna(how="all").reset_index(drop=True)

        for col in df.columns:
            if df[col].dtype == object or pd.api.types.is_string_dtype(df[col].dtype):
                stripped = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)
                df[col] = stripped.mask(stripped == "")

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise InputValidationError(
                f"Input file {path} is missing required column(s): {', '.join(missing)}"
            )

        if "kingdom" not in df.columns:
            df["kingdom"] = self.metadata.kingdom
        else:
            df["kingdom"] = df["kingdom"].fillna(self.metadata.kingdom)

        log(f"Loaded {len(df)} rows, {len(df.columns)} columns from {path}")
        return df
