# http_client.py
# Thin wrapper around requests so every source sends the same headers and a bounded timeout.

import requests

from . import config


def get_json(url: str, timeout: float, session=None, params=None):
    """
    GET `url` and return the decoded JSON body.

    Raises on network errors, timeouts, non-2xx statuses and malformed JSON.
    Callers decide how to degrade.
    """
    http = session or requests
    resp = http.get(url, headers=config.REQUEST_HEADERS, params=params, timeout=timeout)
    resp.raise_for_status()
    return resp.json()
