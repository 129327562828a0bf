from typing import Any, List

import httpx

from endpoints import ANALYTICS
from .client import ClusterClient
from .errors import TransportError
from .models import RawSample


def _json_or_raise(resp: httpx.Response) -> List[Any]:
    try:
        payload = resp.json()
    except ValueError as exc:
        raise TransportError(f"Non-JSON response: {resp.text[:200]}", status_code=resp.status_code, body=resp.text) from exc
    if not isinstance(payload, list):
        raise TransportError(f"Unexpected response: {payload!r}", status_code=resp.status_code, body=resp.text)
    return payload


def get_capacity_history(client: ClusterClient, begin: int, end: int) -> List[RawSample]:
    endpoint = ANALYTICS["capacity_history"]
    params = {"begin-time": int(begin), "end-time": int(end)}
    resp = client.request(endpoint["method"], endpoint["path"], params=params)
    samples = []
    for row in _json_or_raise(resp):
        if not isinstance(row, dict):
            raise TransportError(f"Unexpected sample: {row!r}", status_code=resp.status_code, body=resp.text)
        try:
            samples.append(RawSample.from_api(row))
        except TransportError as exc:
            raise TransportError(str(exc), status_code=resp.status_code, body=resp.text) from exc
    client.logger.debug('Fetched %d capacity samples', len(samples))
    return samples
