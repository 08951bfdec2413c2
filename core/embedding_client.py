# core/embedding_client.py
import asyncio
from typing import Any, Dict, List, Optional, Protocol
import httpx
from util.errors import ProviderError
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

# One retry on a transient failure, per call.
MAX_ATTEMPTS = 2


class EmbeddingProvider(Protocol):
    model: str

    async def embed(self, text: str) -> List[float]: ...


def _is_transient_status(code: int) -> bool:
    return code >= 500 or code == 429


def _parse_embedding(data: Dict[str, Any]) -> List[float]:
    try:
        items = data.get("data") or []
        vec = items[0]["embedding"]
        out = [float(v) for v in vec]
    except (AttributeError, IndexError, KeyError, TypeError, ValueError):
        raise ProviderError("embedding response did not contain an embedding vector")
    if not out:
        raise ProviderError("embedding response contained an empty vector")
    return out


class OpenAIEmbeddingClient:
    """
    Remote embeddings over HTTP (`POST {base_url}/embeddings`).

    Credentials and model come from the injected constructor arguments.
    Timeouts, transport errors, 429 and 5xx are retried once; anything else
    fails immediately with ProviderError.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        retry_delay: float = 0.25,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._url = base_url.rstrip("/") + "/embeddings"
        self._timeout = httpx.Timeout(timeout, connect=min(timeout, 10.0))
        self._retry_delay = retry_delay
        self._transport = transport

    async def _post_once(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "content-type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                r = await client.post(self._url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"embedding request timed out ({type(e).__name__})", transient=True
            )
        except httpx.TransportError as e:
            raise ProviderError(
                f"embedding request failed ({type(e).__name__})", transient=True
            )

        if r.status_code // 100 != 2:
            raise ProviderError(
                f"embedding provider returned HTTP {r.status_code}",
                transient=_is_transient_status(r.status_code),
            )
        try:
            return r.json()
        except ValueError:
            raise ProviderError("embedding provider returned invalid JSON")

    async def embed(self, text: str) -> List[float]:
        if not self._api_key:
            raise ProviderError("OPENAI_API_KEY is not set")

        payload = {"model": self.model, "input": [text]}
        with timed(logger, "embed.remote", model=self.model, chars=len(text)):
            for attempt in range(1, MAX_ATTEMPTS + 1):
                try:
                    data = await self._post_once(payload)
                    break
                except ProviderError as e:
                    if not e.transient or attempt == MAX_ATTEMPTS:
                        logger.error(
                            "embed.remote.error attempt=%d err=%s", attempt, e.message
                        )
                        raise
                    logger.warning(
                        "embed.remote.retry attempt=%d err=%s", attempt, e.message
                    )
                    if self._retry_delay:
                        await asyncio.sleep(self._retry_delay)

        return _parse_embedding(data)
