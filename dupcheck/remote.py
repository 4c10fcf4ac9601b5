"""Candidate pool from the hosted question table (PostgREST / Supabase REST API)."""

import os
import time
from typing import Any, Dict, List, Optional

import requests

from .logger import get_logger
from .retry import RetryError, exponential_backoff, should_retry_http_status
from .schema import Candidate, candidates_from_rows

QUESTIONS_PATH = "/rest/v1/questions"
SELECT_FIELDS = "id,title,closes_at,status,created_at"
REQUEST_TIMEOUT = 15


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return should_retry_http_status(exc.response.status_code)
    return False


def _log_retry(attempt: int, exc: BaseException, delay: float) -> None:
    get_logger().warning("Candidate pool request failed, retrying", attempt=attempt, delay=delay, error=str(exc))


@exponential_backoff(
    max_retries=2,
    exceptions=(requests.exceptions.RequestException,),
    should_retry=_is_transient,
    on_retry=_log_retry,
    sleep=_sleep,
)
def _get_json(url: str, params: Dict[str, Any], headers: Dict[str, str]) -> Any:
    resp = requests.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def build_request(base_url: str, api_key: str, limit: int) -> Dict[str, Any]:
    """URL, query parameters and headers for the candidate pool request."""
    return {
        "url": base_url.rstrip("/") + QUESTIONS_PATH,
        "params": {
            "select": SELECT_FIELDS,
            "visibility": "eq.public",
            "order": "created_at.desc",
            "limit": limit,
        },
        "headers": {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        },
    }


def fetch_candidate_pool(
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    limit: int = 200,
) -> List[Candidate]:
    """
    Fetch the most recent public questions as the candidate pool.

    Args:
        base_url: Project URL (or read from SUPABASE_URL env var)
        api_key: Service role key (or read from SUPABASE_SERVICE_ROLE_KEY env var)
        limit: Maximum number of questions to fetch

    Returns:
        Candidates ordered newest first; malformed rows are skipped

    Raises:
        ValueError: On missing credentials or any request failure
    """
    url = base_url or os.getenv("SUPABASE_URL")
    key = api_key or os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url:
        raise ValueError("Missing SUPABASE_URL. Set env var or pass base_url.")
    if not key:
        raise ValueError("Missing SUPABASE_SERVICE_ROLE_KEY. Set env var or pass api_key.")

    logger = get_logger()
    logger.record_pool_fetch()
    request = build_request(url, key, limit)

    try:
        data = _get_json(request["url"], request["params"], request["headers"])
    except RetryError as e:
        cause = e.__cause__ or e
        logger.record_pool_failure(type(cause).__name__)
        logger.error("Candidate pool unavailable", url=request["url"], error=str(cause))
        raise ValueError(f"Candidate pool request failed after retries: {cause}") from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.record_pool_failure(f"HTTPError_{status}")
        logger.error("Candidate pool request rejected", url=request["url"], status=status)
        raise ValueError(f"Candidate pool request failed ({status}): {request['url']}") from e
    except requests.exceptions.RequestException as e:
        logger.record_pool_failure("RequestException")
        logger.error("Candidate pool request error", url=request["url"], error=str(e))
        raise ValueError(f"Candidate pool request error: {e}") from e

    if not isinstance(data, list):
        logger.record_pool_failure("UnexpectedPayload")
        raise ValueError("Candidate pool response was not a list of rows")

    candidates = candidates_from_rows(data)
    logger.debug("Fetched candidate pool", rows=len(data), candidates=len(candidates))
    return candidates
