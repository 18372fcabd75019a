"""HTTP client for a REST message backend."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from .messages import Message, MessageStore, NewMessage

logger = logging.getLogger(__name__)


class HttpMessageStore(MessageStore):
    """MessageStore backed by a REST API.

    Endpoints:
        GET  {api_url}/api/v1/projects/{project_id}/messages?limit=N&order=desc
        POST {api_url}/api/v1/projects/{project_id}/messages
        GET  {api_url}/api/v1/projects/{project_id}/messages/{message_id}

    A create carrying an ``id`` the backend already holds is answered with
    409 Conflict; the stored record is then fetched and returned. Other HTTP
    errors propagate as ``httpx.HTTPStatusError``.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _messages_url(self, project_id: str) -> str:
        return f"{self.api_url}/api/v1/projects/{quote(project_id, safe='')}/messages"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            response = await self._client.request(
                method, url, headers=self._get_headers(), **kwargs
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self._get_headers(), **kwargs)
        response.raise_for_status()
        return response

    async def recent_messages(self, project_id: str, limit: int) -> list[Message]:
        response = await self._request(
            "GET",
            self._messages_url(project_id),
            params={"limit": limit, "order": "desc"},
        )
        data = response.json()
        items = data.get("messages", []) if isinstance(data, dict) else data
        return [Message.model_validate(item) for item in items][:limit]

    async def create_message(self, message: NewMessage) -> Message:
        url = self._messages_url(message.project_id)
        body = message.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            response = await self._request("POST", url, json=body)
        except httpx.HTTPStatusError as e:
            if message.id is None or e.response.status_code != httpx.codes.CONFLICT:
                raise
            logger.info("Message %s already exists; returning stored record", message.id)
            response = await self._request("GET", f"{url}/{quote(message.id, safe='')}")
        else:
            logger.debug(
                "Created %s message for project %s", message.type.value, message.project_id
            )
        return Message.model_validate(response.json())
