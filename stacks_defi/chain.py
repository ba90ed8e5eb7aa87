# chain.py
# Read-only contract calls against a Stacks node (Hiro API).

import logging
from typing import Any, Protocol, Sequence

import requests

from . import config
from .clarity import ClarityError, Err, decode_hex, to_hex

logger = logging.getLogger(__name__)


class ReadOnlyCallError(RuntimeError):
    pass


class ReadOnlyClient(Protocol):
    def call_read_only(self, contract_address: str, contract_name: str,
                       function_name: str, args: Sequence[bytes]) -> Any:
        """Return the decoded result, or raise if the call fails or the contract errs."""
        ...


class StacksReadOnlyClient:
    def __init__(self, api_url: str, sender: str, timeout: float = config.CHAIN_READ_TIMEOUT, session=None):
        self.api_url = api_url.rstrip("/")
        self.sender = sender
        self.timeout = timeout
        self.session = session

    def call_read_only(self, contract_address, contract_name, function_name, args):
        url = f"{self.api_url}/v2/contracts/call-read/{contract_address}/{contract_name}/{function_name}"
        body = {"sender": self.sender, "arguments": [to_hex(a) for a in args]}

        http = self.session or requests
        resp = http.post(url, json=body, headers=config.REQUEST_HEADERS, timeout=self.timeout)
        if not resp.ok:
            raise ReadOnlyCallError(f"{function_name}: HTTP {resp.status_code}")

        data = resp.json()
        if not data.get("okay"):
            raise ReadOnlyCallError(f"{function_name}: {data.get('cause', 'call rejected')}")

        value = decode_hex(data.get("result", ""))
        if isinstance(value, Err):
            raise ClarityError(f"{function_name} returned (err {value.value!r})")
        return value
