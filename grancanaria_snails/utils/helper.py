from typing import List, Optional
import pandas as pd
import logging
import requests
import os
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
    before_sleep_log,
)

class RetryableHTTPError(Exception):
    """Raised to signal that an HTTP response should be retried (e.g., 429/5xx)."""
    def __init__(self, status_code: int, message: str = ""):
        super().__init__(f"Retryable HTTP {status_code}: {message}")
        self.status_code = status_code

_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()],
    force=True,
)


def log(message: str, level: str = "INFO"):
    """Log to console and, when DISCORD_WEBHOOK is set, to Discord"""
    logger = logging.getLogger("grancanaria_snails")

    if level.upper() == "DEBUG":
        logger.debug(message)
    elif level.upper() == "INFO":
        logger.info(message)
    elif level.upper() == "WARNING":
        logger.warning(message)
    elif level.upper() == "ERROR":
        logger.error(message)
    else:
        logger.info(message)

    webhook_url = os.getenv("DISCORD_WEBHOOK")
    if webhook_url:
        try:
            max_discord = 1800
            content = message if len(message) <= max_discord else (message[:max_discord] + "\n...(truncated for Discord)")
            requests.post(webhook_url, json={"content": content}, timeout=10)
        except Exception:
            pass  # Don't let Discord failures break logging


# ---------- Tenacity-backed HTTP helpers ----------

def _should_retry_status(status_code: int) -> bool:
    # Retry on HTTP 429 (rate limit) and all 5xx
    return status_code == 429 or 500 <= status_code < 600


def _requests_retry_decorator():
    return retry(
        reraise=True,
        stop=stop_after_attempt(5),
        wait=wait_exponential_jitter(initial=1, max=30),
        retry=retry_if_exception_type((
            requests.Timeout,
            requests.ConnectionError,
            RetryableHTTPError,
        )),
        before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    )


@_requests_retry_decorator()
def http_post_with_retry(url: str, **kwargs) -> requests.Response:
    resp = requests.post(url, **kwargs)
    if _should_retry_status(resp.status_code):
        snippet = (resp.text or "")[:200]
        raise RetryableHTTPError(resp.status_code, snippet)
    # 4xx other than 429 are not retried
    resp.raise_for_status()
    return resp


# ---------- Previews ----------

def _snapshot_df(df_obj: pd.DataFrame, max_rows: int = 10, max_columns: int = 10, max_str_len: int = 40) -> pd.DataFrame:
    df = df_obj.astype(object).where(df_obj.notna(), '').astype(str)
    df = df.apply(lambda col: col.map(lambda x: (x[:max_str_len - 3] + '...') if len(x) > max_str_len else x))

    if len(df.columns) > max_columns:
        left = df.iloc[:, :max_columns // 2]
        right = df.iloc[:, -(max_columns // 2):]
        middle = pd.DataFrame({'...': ['...'] * len(df)}, index=df.index)
        df = pd.concat([left, middle, right], axis=1)

    if len(df) > max_rows:
        top = df.head(max_rows // 2)
        bottom = df.tail(max_rows // 2)
        middle = pd.DataFrame({col: ['...'] for col in df.columns})
        df = pd.concat([top, middle, bottom], ignore_index=True)

    return df


def str_snapshot(df: pd.DataFrame, count_columns: Optional[List[str]] = None) -> str:
    """Return a truncated text preview of df, followed by value counts for count_columns."""
    rows, cols = df.shape
    snapshot = _snapshot_df(df).to_string() + f"\n\n[{rows} rows x {cols} columns]"

    for col in count_columns or []:
        if col not in df.columns:
            continue
        values = df[col].astype(object).where(df[col].notna(), '').astype(str)
        counts = values.replace('', '(empty)').value_counts()
        lines = [f"\n{col}: {len(counts)} unique values"]
        lines.extend(f"  {value}: {count}" for value, count in counts.items())
        snapshot += "\n" + "\n".join(lines)

    return snapshot
