from typing import Any, Dict, Optional

try:
    import httpx
except ModuleNotFoundError as exc:  # pragma: no cover - user environment dependency
    raise ModuleNotFoundError(
        "Missing dependency 'httpx'. Install with: pip install httpx"
    ) from exc

from endpoints import DEFAULT_PORT
from .errors import TransportError
from .utils import append_log_line, get_logger, redacted_headers, truncate_text


class ClusterClient:
    def __init__(
        self,
        host: str,
        token: str,
        port: int = DEFAULT_PORT,
        timeout: float = 30.0,
        verify: bool = False,
        http_log_path: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = f"https://{host}:{port}"
        self.timeout = timeout
        self.verify = verify
        self.http_log_path = http_log_path
        self.logger = get_logger('caphistory.client')
        self._headers: Dict[str, str] = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if not verify:
            self.logger.warning('TLS certificate verification disabled for %s', self.base_url)
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=self._headers,
            timeout=self.timeout,
            verify=self.verify,
            transport=transport,
        )

    def _trace(self, line: str) -> None:
        if self.http_log_path:
            append_log_line(self.http_log_path, line)

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        redacted = redacted_headers(self._headers)
        params = kwargs.get("params")
        self.logger.debug('HTTP %s %s params=%s headers=%s', method, url, params, redacted)
        self._trace(f"{method} {url} params={params} headers={redacted}")
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            self._trace(f"{method} {url} failed: {exc}")
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        self._trace(f"{method} {url} status={resp.status_code} response={truncate_text(resp.text or '')}")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"{method} {url} failed: {exc}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc
        return resp

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ClusterClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
