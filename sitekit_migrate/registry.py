"""Async client for the remote registry that owns migrated entities.

Every endpoint has create-or-conflict semantics: 2xx creates, 400/409 means
the entity is already registered. Anything else raises RemoteFailure.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sitekit_migrate.config import MigrationOptions

logger = logging.getLogger(__name__)

CONFLICT_STATUSES = (400, 409)


class RemoteFailure(Exception):
    """The registry call failed for a reason other than "already exists"."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RegistryStatus(enum.Enum):
    CREATED = "created"
    EXISTS = "exists"


@dataclass
class RegistryResponse:
    status: RegistryStatus
    entity_id: str | None = None


# ── Payloads ────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldOptionPayload(_CamelModel):
    label: str
    value: str


class FormFieldPayload(_CamelModel):
    slug: str
    label: str
    field_type: str = "text"
    placeholder: str | None = None
    is_required: bool = False
    sort_order: int = 0
    width: str = "full"
    options: list[FieldOptionPayload] | None = None


class FormPayload(_CamelModel):
    project_id: str
    slug: str
    name: str
    form_type: str = "contact"
    success_message: str = "Thanks for your submission!"
    submit_button_text: str = "Submit"
    fields: list[FormFieldPayload] = Field(default_factory=list)


class PageMetadataPayload(BaseModel):
    project_id: str
    path: str
    managed_title: str | None = None
    managed_meta_description: str | None = None


class SchemaRegistration(BaseModel):
    page_path: str
    schema_type: str
    schema_data: dict[str, Any] = Field(serialization_alias="schema_json")
    is_implemented: bool = True


class FAQItemPayload(BaseModel):
    id: str
    question: str
    answer: str
    order: int
    is_visible: bool = True


class FAQPayload(BaseModel):
    path: str
    title: str = "Frequently Asked Questions"
    items: list[FAQItemPayload] = Field(default_factory=list)
    include_schema: bool = True
    is_published: bool = False

    @classmethod
    def from_items(cls, path: str, items: list[tuple[str, str]]) -> FAQPayload:
        return cls(
            path=path,
            items=[
                FAQItemPayload(id=f"faq-{i + 1}", question=q, answer=a, order=i)
                for i, (q, a) in enumerate(items)
            ],
            is_published=bool(items),
        )


# ── Client ──────────────────────────────────────────────────


class RegistryClient:
    """Registers forms, page metadata, schemas and FAQs with the remote service."""

    def __init__(self, options: MigrationOptions, client: httpx.AsyncClient | None = None):
        self.options = options
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=options.timeout)

    async def create_form(self, payload: FormPayload) -> RegistryResponse:
        return await self._post(
            "/forms", payload.model_dump(by_alias=True, exclude_none=True), self._bearer()
        )

    async def create_page_metadata(self, payload: PageMetadataPayload) -> RegistryResponse:
        return await self._post("/seo/pages", payload.model_dump(exclude_none=True), self._bearer())

    async def register_schema(self, payload: SchemaRegistration) -> RegistryResponse:
        return await self._post(
            "/api/public/seo/register-schema", payload.model_dump(by_alias=True), self._api_key()
        )

    async def register_faq(self, payload: FAQPayload) -> RegistryResponse:
        return await self._post(
            "/api/public/seo/register-faq", payload.model_dump(), self._api_key()
        )

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _bearer(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.options.api_key}"}

    def _api_key(self) -> dict[str, str]:
        return {"x-api-key": self.options.api_key}

    async def _post(self, endpoint: str, body: dict, headers: dict[str, str]) -> RegistryResponse:
        url = f"{self.options.api_url}{endpoint}"
        try:
            response = await self.client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise RemoteFailure(f"{endpoint}: {e}") from e

        if response.status_code in CONFLICT_STATUSES:
            logger.info("POST %s -> %d (already registered)", endpoint, response.status_code)
            return RegistryResponse(RegistryStatus.EXISTS)
        if not response.is_success:
            raise RemoteFailure(
                f"{endpoint}: {response.status_code} {response.text[:200]}".rstrip(),
                response.status_code,
            )

        logger.info("POST %s -> %d", endpoint, response.status_code)
        entity_id = None
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("id") is not None:
            entity_id = str(data["id"])
        return RegistryResponse(RegistryStatus.CREATED, entity_id)
