"""Marketplace API client: availability, market members and check-in over HTTP."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, Dict, List, Optional

import httpx

from marketbook.config.marketplace import MarketplaceClientConfig
from marketbook.core.exceptions import (
    BookingRejected,
    ExternalServiceError,
    NotFoundError,
    ProjectError,
    ValidationError,
)
from marketbook.scheduling.projector import AvailabilityResponse
from marketbook.scheduling.resources import Resource

logger = logging.getLogger(__name__)


class MarketplaceClient:
    """Talks to the marketbook HTTP API (``/api/v1``).

    Usable as the gateway of a BookingSession. Transport failures raise
    ExternalServiceError; a refused check-in raises BookingRejected.
    """

    def __init__(
        self,
        config: Optional[MarketplaceClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or MarketplaceClientConfig.from_env()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers=headers,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("MarketplaceClient: %s %s failed: %s", method, path, exc)
            raise ExternalServiceError(
                "Marketplace service unavailable, please retry", details={"path": path}, cause=exc
            ) from exc

    @staticmethod
    def _error_body(resp: httpx.Response) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError:
            return {"detail": resp.text}
        return body if isinstance(body, dict) else {"detail": body}

    def _raise_for_status(self, resp: httpx.Response, path: str) -> None:
        if resp.status_code < 400:
            return
        body = self._error_body(resp)
        message = str(body.get("detail") or f"HTTP {resp.status_code}")
        details = body.get("details") or {}
        if resp.status_code == 404:
            raise NotFoundError(message, details={"path": path})
        if resp.status_code == 409:
            raise BookingRejected(message, details=details)
        if resp.status_code in (400, 422):
            raise ValidationError(message, details=details)
        logger.warning("MarketplaceClient: %s returned HTTP %d", path, resp.status_code)
        raise ExternalServiceError(message, details={"path": path, "status": resp.status_code})

    async def get_available_slots(
        self,
        order_id: int,
        start_date: Optional[_dt.date] = None,
        end_date: Optional[_dt.date] = None,
        market_member_id: Optional[int] = None,
    ) -> AvailabilityResponse:
        path = f"/orders/{order_id}/available-slots"
        params: Dict[str, Any] = {}
        if start_date is not None:
            params["startDate"] = start_date.isoformat()
        if end_date is not None:
            params["endDate"] = end_date.isoformat()
        if market_member_id is not None:
            params["marketMemberId"] = market_member_id
        resp = await self._request("GET", path, params=params)
        self._raise_for_status(resp, path)
        return AvailabilityResponse.from_dict(resp.json())

    async def get_market_members(self, market_id: int) -> List[Resource]:
        path = f"/markets/{market_id}"
        resp = await self._request("GET", path)
        self._raise_for_status(resp, path)
        return [Resource.from_dict(m) for m in resp.json().get("Members") or []]

    async def check_in(
        self, order_id: int, slots: List[Dict[str, Any]], client_id: Optional[int] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"orderId": order_id, "slots": slots}
        if client_id is not None:
            body["clientId"] = client_id
        resp = await self._request("POST", "/bookings", json=body)
        try:
            self._raise_for_status(resp, "/bookings")
        except ProjectError as exc:
            logger.info("MarketplaceClient: check-in for order %s refused: %s", order_id, exc.message)
            raise
        return resp.json()
