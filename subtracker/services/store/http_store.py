"""
HTTP Store Implementation

Talks to the subscriptions API:

    GET    {base}/subscriptions         -> list of records
    POST   {base}/subscriptions         -> create
    PUT    {base}/subscriptions/{id}    -> update
    DELETE {base}/subscriptions/{id}    -> delete

Bodies are camelCase JSON. Records are parsed into Subscription models
here and nowhere else.

TRADEOFFS:
- A fresh AsyncClient per request. The Streamlit front end runs each
  call on its own event loop, and pooled connections are loop-bound.
- Only connection failures and timeouts are retried. A 4xx/5xx answer
  is the store's decision and is surfaced as-is.
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from subtracker.config import StoreSettings, get_settings
from subtracker.models.subscription import Subscription, SubscriptionDraft
from subtracker.services.store.interface import (
    NotFoundError,
    StoreConnectionError,
    StoreError,
    SubscriptionStoreInterface,
)

logger = structlog.get_logger(__name__)

SUBSCRIPTIONS_PATH = "/subscriptions"


class HttpSubscriptionStore(SubscriptionStoreInterface):
    """
    Subscription store backed by the HTTP/JSON API.

    Args:
        settings: Store settings. Loaded from the environment if None.
        transport: Optional httpx transport (tests pass a MockTransport).
        retry_wait: Tenacity wait strategy between attempts.
    """

    def __init__(
        self,
        settings: Optional[StoreSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self._settings = settings or get_settings().store
        self._transport = transport
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)

    @property
    def base_url(self) -> str:
        return self._settings.api_base_url

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(self._settings.timeout_seconds),
            transport=self._transport,
        )

    async def _send(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
    ) -> httpx.Response:
        async with self._new_client() as client:
            try:
                response = await client.request(method, path, json=body)
            except httpx.TimeoutException as e:
                logger.warning("store_request_timeout", method=method, path=path)
                raise StoreConnectionError(f"Request timeout: {method} {path}") from e
            except httpx.TransportError as e:
                logger.warning(
                    "store_request_failed",
                    method=method,
                    path=path,
                    error=str(e),
                )
                raise StoreConnectionError(f"Could not reach store: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {path}", status_code=404)

        if response.status_code >= 400:
            detail = response.text
            try:
                payload = response.json()
                if isinstance(payload, dict):
                    detail = payload.get("error") or payload.get("detail") or str(payload)
            except ValueError:
                pass
            raise StoreError(
                f"Store API error ({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        return response

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
    ) -> Any:
        """
        Send a request with retries and decode the JSON reply.

        Returns None for empty bodies (e.g. 204 No Content).
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=self._retry_wait,
            retry=retry_if_exception_type(StoreConnectionError),
            reraise=True,
        ):
            with attempt:
                response = await self._send(method, path, body)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Store returned invalid JSON for {method} {path}") from e

    def _parse_record(self, payload: Any) -> Optional[Subscription]:
        if not isinstance(payload, dict):
            return None
        try:
            return Subscription.model_validate(payload)
        except ValidationError as e:
            raise StoreError(f"Malformed subscription record: {e}") from e

    async def list_subscriptions(self) -> list[Subscription]:
        payload = await self._request("GET", SUBSCRIPTIONS_PATH)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise StoreError("Expected a list of subscriptions")

        subscriptions = []
        for raw in payload:
            try:
                subscriptions.append(Subscription.model_validate(raw))
            except ValidationError as e:
                # Skip malformed records rather than hiding the whole list
                logger.warning(
                    "store_record_skipped",
                    record_id=raw.get("id") if isinstance(raw, dict) else None,
                    error=str(e),
                )
        logger.debug("store_list", count=len(subscriptions))
        return subscriptions

    async def create_subscription(
        self,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        payload = await self._request("POST", SUBSCRIPTIONS_PATH, draft.to_wire())
        logger.info("store_create", name=draft.name)
        return self._parse_record(payload)

    async def update_subscription(
        self,
        subscription_id: str,
        draft: SubscriptionDraft,
    ) -> Optional[Subscription]:
        path = f"{SUBSCRIPTIONS_PATH}/{subscription_id}"
        payload = await self._request("PUT", path, draft.to_wire())
        logger.info("store_update", subscription_id=subscription_id)
        return self._parse_record(payload)

    async def delete_subscription(self, subscription_id: str) -> bool:
        path = f"{SUBSCRIPTIONS_PATH}/{subscription_id}"
        try:
            await self._request("DELETE", path)
        except NotFoundError:
            return False
        logger.info("store_delete", subscription_id=subscription_id)
        return True
