import argparse
import sys
from typing import List, Optional
import pandas as pd
import requests
from dotenv import load_dotenv

from grancanaria_snails.models.dataset_models import DatasetMetadata
from grancanaria_snails.services.csv_service import CSVService
from grancanaria_snails.services.dwc_mapping_service import DwCMappingService
from grancanaria_snails.services.loader_service import ExcelLoaderService, InputValidationError
from grancanaria_snails.services.name_parser_service import GBIFNameParserService
from grancanaria_snails.services.name_service import NameNormalizerService
from grancanaria_snails.services.rank_service import RankResolverService
from grancanaria_snails.services.taxon_id_service import TaxonIDService
from grancanaria_snails.utils.helper import RetryableHTTPError, log, str_snapshot

DEFAULT_INPUT = "data/raw/snails_grancanaria.xlsx"
DEFAULT_OUTPUT = "data/processed/occurrence.csv"


def run_pipeline(
    input_path: str,
    output_path: str,
    metadata: Optional[DatasetMetadata] = None,
    parser_service: Optional[GBIFNameParserService] = None,
    sheet_name: Optional[str] = None,
) -> pd.DataFrame:
    """Convert the snail spreadsheet at input_path into a Darwin Core Occurrence CSV at output_path."""
    metadata = metadata or DatasetMetadata()

    raw = ExcelLoaderService(metadata).load(input_path, sheet_name)

    normalizer = NameNormalizerService(parser_service or GBIFNameParserService())
    parsed_names = normalizer.normalize(raw)

    resolved = RankResolverService().resolve(raw, parsed_names)

    id_service = TaxonIDService(metadata)
    with_ids = id_service.add_occurrence_ids(id_service.add_taxon_ids(resolved))

    occurrence = DwCMappingService(metadata).map_terms(with_ids)

    CSVService().write_csv(occurrence, output_path)
    log("Output preview:\n" + str_snapshot(occurrence, count_columns=["taxonRank"]))
    return occurrence


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert Gran Canaria land and freshwater snail records to a Darwin Core Occurrence CSV"
    )
    parser.add_argument("--input", default=DEFAULT_INPUT, help=f"Source .xlsx file (default: {DEFAULT_INPUT})")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help=f"Destination CSV (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--sheet", default=None, help="Sheet name to read (default: first sheet)")
    args = parser.parse_args(argv)

    load_dotenv()
    metadata = DatasetMetadata.from_env()

    try:
        run_pipeline(args.input, args.output, metadata, sheet_name=args.sheet)
    except (FileNotFoundError, InputValidationError) as e:
        log(str(e), "ERROR")
        return 1
    except (requests.RequestException, RetryableHTTPError, ValueError) as e:
        log(f"Name parsing failed, no output written: {type(e).__name__}: {e}", "ERROR")
        return 1

    log("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
