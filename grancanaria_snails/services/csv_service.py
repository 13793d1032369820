import io
import os
import stat
import tempfile
import pandas as pd
from grancanaria_snails.utils.helper import log


class CSVService:
    """Service for serializing the Darwin Core table"""

    def dataframe_to_csv_string(self, df: pd.DataFrame) -> str:
        """Convert DataFrame to CSV string"""
        csv_buffer = io.StringIO()
        df.to_csv(csv_buffer, index=False, na_rep="")
        return csv_buffer.getvalue()

    def _output_mode(self, output_path: str) -> int:
        """Mode for the published file: the existing file's, else 0o666 minus the umask."""
        if os.path.exists(output_path):
            return stat.S_IMODE(os.stat(output_path).st_mode)
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask

    def write_csv(self, df: pd.DataFrame, output_path: str) -> str:
        """Write df as UTF-8 CSV, replacing output_path in one step.

        The table is written to a temporary file next to the destination first,
        so a failed run never leaves a half-written file behind.
        """
        out_dir = os.path.dirname(os.path.abspath(output_path))
        os.makedirs(out_dir, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".occurrence_", suffix=".csv", dir=out_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                df.to_csv(f, index=False, na_rep="")
            os.chmod(tmp_path, self._output_mode(output_path))
            os.replace(tmp_path, output_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        log(f"Wrote {len(df)} rows, {len(df.columns)} columns to {output_path}")
        return output_path
