import os
from typing import List, Optional
from grancanaria_snails.models.dataset_models import ParsedName
from grancanaria_snails.utils.helper import log, http_post_with_retry


class GBIFNameParserService:
    """Client for the GBIF name parser (https://api.gbif.org/v1/parser/name)"""

    def __init__(self, parser_url: Optional[str] = None, chunk_size: int = 500, timeout: int = 60):
        self.parser_url = parser_url or os.getenv("GBIF_PARSER_URL", "https://api.gbif.org/v1/parser/name")
        self.chunk_size = chunk_size
        self.timeout = timeout

    def parse_names(self, names: List[str]) -> List[ParsedName]:
        """Parse a list of name strings, returning one ParsedName per input in the same order.

        The parser accepts a JSON array of names in a POST body. Long lists are
        sent in chunks of chunk_size.
        """
        if not names:
            return []

        parsed: List[ParsedName] = []
        for start in range(0, len(names), self.chunk_size):
            chunk = list(names[start:start + self.chunk_size])
            resp = http_post_with_retry(self.parser_url, json=chunk, timeout=self.timeout)
            records = resp.json()
            if len(records) != len(chunk):
                raise ValueError(
                    f"GBIF name parser returned {len(records)} records for {len(chunk)} names"
                )
            # The parser echoes the input as scientificName; keep our own string so lookups stay exact
            for name, rec in zip(chunk, records):
                parsed.append(ParsedName(**{**rec, "scientificName": name}))

        log(f"Parsed {len(parsed)} names with the GBIF name parser")
        return parsed
