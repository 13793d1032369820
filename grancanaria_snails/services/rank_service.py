from typing import Iterable, Optional
import pandas as pd
from grancanaria_snails.utils.helper import log

# Placeholder names identified to genus only
GENUS_PLACEHOLDERS = ("Monilearia spec.", "Hemicycla spec.", "Napaeus spec.")
GENUS_RANK_MARKER = "gen."


class RankResolverService:
    """Attaches parsed names and rank markers to the occurrence records"""

    def __init__(self, genus_placeholders: Optional[Iterable[str]] = None):
        self.genus_placeholders = tuple(GENUS_PLACEHOLDERS if genus_placeholders is None else genus_placeholders)

    def resolve(self, df: pd.DataFrame, parsed_names: pd.DataFrame) -> pd.DataFrame:
        """Join scientificName and rankMarker onto df by verbatimScientificName.

        Genus placeholders get the genus marker whatever the parser returned.
        """
        lookup = parsed_names[["verbatimScientificName", "scientificName", "rankMarker"]]
        resolved = df.drop(columns=["scientificName", "rankMarker"], errors="ignore").merge(
            lookup, on="verbatimScientificName", how="left", validate="many_to_one"
        )

        is_placeholder = resolved["verbatimScientificName"].isin(self.genus_placeholders)
        resolved["rankMarker"] = resolved["rankMarker"].astype(object)
        resolved.loc[is_placeholder, "rankMarker"] = GENUS_RANK_MARKER
        log(f"Resolved ranks for {len(resolved)} records ({int(is_placeholder.sum())} genus placeholders)")
        return resolved
