"""
REST Storage Implementation

Talks to the property-management backend:
- POST /properties                       create a property
- PUT  /properties/{id}                  replace a property
- GET  /properties/{id}, GET /properties read back
- POST /properties/{id}/mortgages        attach a mortgage

Transient failures (network errors, 5xx) are retried with exponential
backoff. 404 and 409 are mapped to NotFoundError and DuplicateError and
are never retried.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from property_intake.config import ApiSettings, get_settings
from property_intake.models.property import (
    MortgageDraft,
    PropertyDraft,
    StoredMortgage,
    StoredProperty,
)
from property_intake.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    PropertyStorageInterface,
    StorageConnectionError,
    StorageError,
)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _to_date(value: Any) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def _error_message(response: requests.Response) -> str:
    """Best-effort extraction of the backend's error text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class RestPropertyStorage(PropertyStorageInterface):
    """
    REST implementation of property storage.

    Uses one requests.Session per instance; call close() when done.
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().api
        if not self._settings.is_configured:
            raise StorageConnectionError("PROPERTY_API_BASE_URL is not configured")

        self._base_url = self._settings.base_url
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        if self._settings.token:
            self._session.headers["Authorization"] = f"Bearer {self._settings.token}"

    @retry(
        retry=retry_if_exception_type(StorageConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
    ) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            StorageConnectionError: Network failure or 5xx (retried)
            NotFoundError: 404
            DuplicateError: 409
            StorageError: Any other non-2xx response
        """
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                timeout=self._settings.timeout_seconds,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise StorageConnectionError(f"Could not reach {url}: {e}") from e
        except requests.RequestException as e:
            raise StorageError(f"Request to {url} failed: {e}") from e

        status = response.status_code
        if status == 404:
            raise NotFoundError(f"{method} {path}: not found")
        if status == 409:
            raise DuplicateError(f"{method} {path}: {_error_message(response)}")
        if status >= 500:
            raise StorageConnectionError(f"{method} {path}: backend error {status}")
        if status >= 400:
            raise StorageError(f"{method} {path}: {status} {_error_message(response)}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"{method} {path}: invalid JSON response") from e

    def _property_from_response(self, data: dict) -> StoredProperty:
        """Convert a backend PropertyDto to a StoredProperty."""
        try:
            draft = PropertyDraft(
                name=data["name"],
                address=data.get("address") or None,
                acquisition_date=_to_date(data.get("acquisitionDate")),
                purchase_price=_to_decimal(data.get("purchasePrice")),
                current_value=_to_decimal(data.get("currentValue")),
                notes=data.get("notes") or None,
            )
            return StoredProperty(id=int(data["id"]), draft=draft)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Unexpected property payload: {e}") from e

    def _mortgage_from_response(self, property_id: int, data: dict) -> StoredMortgage:
        """Convert a backend PropertyMortgageDto to a StoredMortgage."""
        try:
            draft = MortgageDraft(
                lender=data["lender"],
                principal=_to_decimal(data["principal"]),
                rate_percent=Decimal(str(data["rateAnnual"])) * 100,
                term_months=int(data["termMonths"]),
                amortization_months=int(data["amortizationMonths"]),
                start_date=_to_date(data["startDate"]),
                payment_frequency=int(data["paymentFrequency"]),
            )
            return StoredMortgage(
                id=int(data["id"]),
                property_id=int(data.get("propertyId", property_id)),
                draft=draft,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Unexpected mortgage payload: {e}") from e

    async def create_property(self, draft: PropertyDraft) -> StoredProperty:
        data = self._request("POST", "/properties", draft.to_payload())
        return self._property_from_response(data)

    async def update_property(
        self,
        property_id: int,
        draft: PropertyDraft,
    ) -> StoredProperty:
        data = self._request("PUT", f"/properties/{property_id}", draft.to_payload())
        return self._property_from_response(data)

    async def get_property(self, property_id: int) -> Optional[StoredProperty]:
        try:
            data = self._request("GET", f"/properties/{property_id}")
        except NotFoundError:
            return None
        return self._property_from_response(data)

    async def list_properties(self) -> list[StoredProperty]:
        data = self._request("GET", "/properties") or []
        return [self._property_from_response(item) for item in data]

    async def create_mortgage(
        self,
        property_id: int,
        draft: MortgageDraft,
    ) -> StoredMortgage:
        data = self._request(
            "POST",
            f"/properties/{property_id}/mortgages",
            draft.to_payload(),
        )
        return self._mortgage_from_response(property_id, data)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
