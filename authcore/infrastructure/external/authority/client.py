"""Async HTTP client for the authority (permissions, role checks, transfers).

All calls use httpx.AsyncClient so they do not block the event loop. Any
transport failure, non-2xx status, undecodable body or non-success envelope
is raised as AuthorityUnreachableException; fail-closed decisions are made
by the callers, not here.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from authcore.application.dtos.transfer import TransferRequest, TransferResult
from authcore.core.config import Settings, get_settings
from authcore.domain.exceptions import AuthorityUnreachableException
from authcore.schemas.authz import CheckRolesRequest, CheckRolesResponse
from authcore.schemas.permission import (
    AuthorityResponse,
    DecodePermissionsRequest,
    DecodePermissionsResponse,
    EncodePermissionsRequest,
    EncodePermissionsResponse,
    PermissionCatalogResponse,
    PermissionEntry,
)
from authcore.schemas.transfer import TransferCreateResponse
from authcore.shared.telemetry.tracing import add_span_attributes, traced

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=AuthorityResponse)


class AuthorityClient:
    """Thin client over the authority's HTTP endpoints.

    Owns its httpx.AsyncClient unless one is injected (tests, shared pools).
    Call aclose() at session teardown.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.settings.authority_base_url,
            timeout=self.settings.authority_timeout_seconds,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    def _headers(self, token: str) -> dict[str, str]:
        return {
            self.settings.authority_token_header: token,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        token: str,
        response_model: type[ResponseT],
        body: dict[str, Any] | None = None,
    ) -> ResponseT:
        """Send one request and parse the envelope into response_model."""
        try:
            resp = await self._http.request(
                method, url, headers=self._headers(token), json=body
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Authority %s transport error: %s", operation, e)
            raise AuthorityUnreachableException(operation, str(e) or type(e).__name__) from e
        if resp.status_code >= 400:
            logger.warning("Authority %s failed with HTTP %s", operation, resp.status_code)
            raise AuthorityUnreachableException(
                operation, f"HTTP {resp.status_code}", status_code=resp.status_code
            )
        try:
            parsed = response_model.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise AuthorityUnreachableException(operation, f"invalid response: {e}") from e
        if not parsed.succeeded:
            raise AuthorityUnreachableException(
                operation, parsed.message or f"status {parsed.status!r}"
            )
        return parsed

    @traced("authority.fetch_permissions")
    async def fetch_permissions(self, token: str) -> list[PermissionEntry]:
        """GET /permissions: the full permission catalog."""
        parsed = await self._request(
            "fetch_permissions", "GET", "/permissions", token, PermissionCatalogResponse
        )
        add_span_attributes(permission_count=len(parsed.permissions))
        return parsed.permissions

    @traced("authority.encode_permissions")
    async def encode_permissions(self, token: str, *, keys: Iterable[str]) -> str:
        """POST /permissions/encode: keys -> encoded permission string."""
        body = EncodePermissionsRequest(keys=list(keys)).model_dump()
        parsed = await self._request(
            "encode_permissions",
            "POST",
            "/permissions/encode",
            token,
            EncodePermissionsResponse,
            body,
        )
        return parsed.permissions

    @traced("authority.decode_permissions")
    async def decode_permissions(
        self, token: str, *, company_id: str, encoded: str
    ) -> list[str]:
        """POST /permissions/decode: encoded string -> permission keys."""
        body = DecodePermissionsRequest(company_id=company_id, encoded=encoded).model_dump(
            by_alias=True
        )
        parsed = await self._request(
            "decode_permissions",
            "POST",
            "/permissions/decode",
            token,
            DecodePermissionsResponse,
            body,
        )
        return parsed.keys

    @traced("authority.check_roles")
    async def check_roles(
        self, token: str, *, company_id: str, required_codes: list[str]
    ) -> bool:
        """POST /authz/check-roles: does the caller hold required_codes in company_id."""
        body = CheckRolesRequest(
            company_id=company_id, required_codes=required_codes
        ).model_dump(by_alias=True)
        parsed = await self._request(
            "check_roles", "POST", "/authz/check-roles", token, CheckRolesResponse, body
        )
        add_span_attributes(granted=parsed.granted)
        return parsed.granted

    @traced("authority.create_transfer")
    async def create_transfer(
        self, token: str, *, request: TransferRequest
    ) -> TransferResult:
        """POST /transfers/create: submit a transfer built from a draft."""
        parsed = await self._request(
            "create_transfer",
            "POST",
            "/transfers/create",
            token,
            TransferCreateResponse,
            request.to_payload(),
        )
        return TransferResult(succeeded=True, message=parsed.message, data=parsed.data)
