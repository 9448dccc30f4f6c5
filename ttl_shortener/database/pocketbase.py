"""PocketBase implementation of the record store."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..exceptions import StoreError
from .base import RecordStoreBase
from .models import UrlRecord, format_timestamp


def quote_filter_value(value: str) -> str:
    """Quote a string literal for a PocketBase filter expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_url_filter(original_urls: Sequence[str]) -> str:
    """Build ``originalUrl="a" || originalUrl="b"`` for the given URLs."""
    return " || ".join(f"originalUrl={quote_filter_value(url)}" for url in original_urls)


class PocketBaseRecordStore(RecordStoreBase):
    """Record store backed by a PocketBase collection, via its REST API."""

    PAGE_SIZE = 500
    SORT = "created,id"

    def __init__(
        self,
        db_config: str,
        collection: str = "urls",
        admin_email: Optional[str] = None,
        admin_password: Optional[str] = None,
        auth_collection: str = "_superusers",
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize PocketBase client.

        Args:
            db_config: PocketBase base URL (e.g. http://127.0.0.1:8090)
            collection: Collection holding the URL records
            admin_email: Identity of the privileged service account
            admin_password: Password of the privileged service account
            auth_collection: Collection the service account authenticates against
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (tests)
            logger: Optional logger instance
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.collection = collection
        self.admin_email = admin_email
        self.admin_password = admin_password
        self.auth_collection = auth_collection
        self._token: Optional[str] = None
        self._client = httpx.AsyncClient(
            base_url=db_config.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    @property
    def _records_path(self) -> str:
        return f"/api/collections/{self.collection}/records"

    async def initialize(self) -> None:
        """Authenticate the privileged service identity.

        Skipped when no credentials are configured (collection rules must then
        allow anonymous access).

        Raises:
            StoreError: If authentication fails
        """
        if not self.admin_email:
            self.logger.warning("No PocketBase credentials configured, using anonymous access")
            return

        self.logger.info(f"Authenticating {self.admin_email} against PocketBase at {self.db_config}")
        payload = await self._request(
            "POST",
            f"/api/collections/{self.auth_collection}/auth-with-password",
            json={"identity": self.admin_email, "password": self.admin_password or ""},
        )
        token = payload.get("token")
        if not token:
            raise StoreError("PocketBase authentication returned no token")

        self._token = token
        self.logger.info("PocketBase authentication succeeded")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        headers = {"Authorization": self._token} if self._token else {}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"PocketBase {method} {path} failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"PocketBase {method} {path} failed: {e}") from e
        except ValueError as e:
            raise StoreError(f"PocketBase {method} {path} returned invalid JSON") from e

    async def list_records(
        self,
        original_urls: Optional[Sequence[str]] = None,
    ) -> List[UrlRecord]:
        params: Dict[str, Any] = {"perPage": self.PAGE_SIZE, "skipTotal": 1, "sort": self.SORT}
        if original_urls is not None:
            if not original_urls:
                return []
            params["filter"] = build_url_filter(original_urls)

        # Walk pages until a short one comes back; the sort keeps pages stable
        records: List[UrlRecord] = []
        page = 1
        while True:
            payload = await self._request("GET", self._records_path, params={**params, "page": page})
            items = payload.get("items") or []
            records.extend(UrlRecord.from_dict(item) for item in items)
            if len(items) < self.PAGE_SIZE:
                break
            page += 1

        self.logger.debug(f"Listed {len(records)} records ({page} page(s))")
        return records

    async def create_record(
        self,
        original_url: str,
        short_code: str,
        created: datetime,
        expiry: Optional[str],
    ) -> UrlRecord:
        body = {
            "originalUrl": original_url,
            "shortCode": short_code,
            "created": format_timestamp(created),
            "expiry": expiry,
        }
        payload = await self._request("POST", self._records_path, json=body)
        return UrlRecord.from_dict(payload)

    async def update_record(
        self,
        record_id: str,
        *,
        short_code: Optional[str] = None,
        created: Optional[datetime] = None,
        expiry: Optional[str] = None,
    ) -> UrlRecord:
        body: Dict[str, Any] = {}
        if short_code is not None:
            body["shortCode"] = short_code
        if created is not None:
            body["created"] = format_timestamp(created)
        if expiry is not None:
            body["expiry"] = expiry

        payload = await self._request("PATCH", f"{self._records_path}/{record_id}", json=body)
        return UrlRecord.from_dict(payload)

    async def health_check(self) -> bool:
        try:
            await self._request("GET", "/api/health")
            return True
        except StoreError as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
