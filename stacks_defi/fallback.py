# fallback.py
# Walk an ordered list of candidate endpoints and keep the first one that yields a usable record.

import logging
from typing import Any, Callable, Iterable, Optional

from .http_client import get_json

logger = logging.getLogger(__name__)


def try_endpoints(
    endpoints: Iterable[str],
    parse: Callable[[Any, str], Optional[dict]],
    timeout: float,
    session=None,
) -> Optional[dict]:
    """
    Try each endpoint strictly in order.

    `parse(payload, endpoint)` maps a decoded JSON body to a raw record, or None
    if the shape isn't one it understands. The first endpoint that answers with
    a 2xx status AND parses to a record wins. Anything that goes wrong on one
    endpoint (network, timeout, HTTP error, bad JSON, parse mismatch) moves us
    to the next one. A failed endpoint is never retried.

    Returns None once every endpoint has been tried.
    """
    for endpoint in endpoints:
        try:
            logger.debug("Trying endpoint %s", endpoint)
            payload = get_json(endpoint, timeout=timeout, session=session)
            record = parse(payload, endpoint)
        except Exception as e:
            logger.info("Endpoint %s failed: %s", endpoint, e)
            continue

        if record is not None:
            logger.info("Endpoint %s succeeded", endpoint)
            return record
        logger.info("Endpoint %s returned an unrecognised payload", endpoint)

    return None
