from typing import Dict, List, Optional
import pandas as pd
from grancanaria_snails.models.dataset_models import ParsedName
from grancanaria_snails.services.name_parser_service import GBIFNameParserService
from grancanaria_snails.utils.helper import log

# Names whose informal qualifiers (aff., cf., spec.) keep the parser from
# returning a clean scientific name
NAME_CORRECTIONS: Dict[str, str] = {
    "Gibbulinella aff. dealbata": "Gibbulinella dealbata",
    "Hemicycla aff. saulcyi": "Hemicycla saulcyi",
    "Napaeus cf. badiosus": "Napaeus badiosus",
    "Canariella cf. planaria": "Canariella planaria",
    "Monilearia spec.": "Monilearia",
    "Hemicycla spec.": "Hemicycla",
    "Napaeus spec.": "Napaeus",
}

PARSED_NAME_COLUMNS = [
    "verbatimScientificName",
    "scientificName",
    "canonicalName",
    "rankMarker",
    "parsed",
    "parsedPartially",
    "type",
]


class NameNormalizerService:
    """Cleans verbatim scientific names and collects their parse metadata"""

    def __init__(self, parser_service: Optional[GBIFNameParserService] = None,
                 corrections: Optional[Dict[str, str]] = None):
        self.parser_service = parser_service or GBIFNameParserService()
        self.corrections = NAME_CORRECTIONS if corrections is None else corrections

    def distinct_names(self, df: pd.DataFrame, column: str = "verbatimScientificName") -> List[str]:
        names = df[column].dropna().astype(str).str.strip()
        return sorted(n for n in names.unique() if n)

    def correct_name(self, name: str) -> str:
        return self.corrections.get(name, name)

    def report_parse_failures(self, parsed: List[ParsedName], stage: str = "") -> List[str]:
        """Log names that were not fully parsed so they can be reviewed by hand."""
        failures = [p.scientificName for p in parsed if not p.fully_parsed]
        label = f" ({stage})" if stage else ""
        if failures:
            log(f"{len(failures)} name(s) not fully parsed{label}, review manually: {', '.join(failures)}", "WARNING")
        else:
            log(f"All {len(parsed)} names fully parsed{label}")
        return failures

    def normalize(self, df: pd.DataFrame) -> pd.DataFrame:
        """Parse, correct and re-parse the distinct verbatim names of df.

        Returns one row per distinct verbatim name with the corrected name as
        scientificName and the parse metadata of that corrected name.
        """
        raw_names = self.distinct_names(df)
        first_pass = self.parser_service.parse_names(raw_names)
        self.report_parse_failures(first_pass, "before corrections")
        by_name = {p.scientificName: p for p in first_pass}

        corrected = {raw: self.correct_name(raw) for raw in raw_names}
        changed = sorted({c for raw, c in corrected.items() if c != raw and c not in by_name})
        log(f"Applied {sum(1 for raw, c in corrected.items() if c != raw)} name corrections")
        if changed:
            second_pass = self.parser_service.parse_names(changed)
            by_name.update({p.scientificName: p for p in second_pass})

        final = [by_name[corrected[raw]] for raw in raw_names]
        self.report_parse_failures(final, "after corrections")

        rows = []
        for raw, parsed in zip(raw_names, final):
            rows.append({
                "verbatimScientificName": raw,
                "scientificName": corrected[raw],
                "canonicalName": parsed.canonicalName,
                "rankMarker": parsed.rankMarker,
                "parsed": parsed.parsed,
                "parsedPartially": parsed.parsedPartially,
                "type": parsed.type,
            })
        return pd.DataFrame(rows, columns=PARSED_NAME_COLUMNS)
