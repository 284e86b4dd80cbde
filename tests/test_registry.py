"""Tests for the registry client, using httpx's mock transport."""

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from sitekit_migrate.config import MigrationOptions
from sitekit_migrate.registry import (
    FAQPayload,
    FieldOptionPayload,
    FormFieldPayload,
    FormPayload,
    PageMetadataPayload,
    RegistryClient,
    RegistryStatus,
    RemoteFailure,
    SchemaRegistration,
)

OPTIONS = MigrationOptions(
    project_id="proj-1", api_key="secret", api_url="https://api.test/", root=Path("."),
)


def _call(handler, request_fn):
    """Run request_fn(client) against a mock transport and return its result."""
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            registry = RegistryClient(OPTIONS, http)
            return await request_fn(registry)
    return asyncio.run(run())


def _form() -> FormPayload:
    return FormPayload(
        project_id="proj-1",
        slug="contact",
        name="Contact Form",
        fields=[
            FormFieldPayload(slug="email", label="Email", field_type="email", is_required=True),
            FormFieldPayload(
                slug="topic", label="Topic", field_type="select", sort_order=1,
                options=[FieldOptionPayload(label="Sales", value="sales")],
            ),
        ],
    )


class TestCreateForm:
    def test_created(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "form-42"})

        response = _call(handler, lambda r: r.create_form(_form()))

        assert response.status is RegistryStatus.CREATED
        assert response.entity_id == "form-42"
        assert seen["url"] == "https://api.test/forms"
        assert seen["auth"] == "Bearer secret"
        body = seen["body"]
        assert body["projectId"] == "proj-1"
        assert body["submitButtonText"] == "Submit"
        assert body["fields"][0] == {
            "slug": "email", "label": "Email", "fieldType": "email",
            "isRequired": True, "sortOrder": 0, "width": "full",
        }
        assert body["fields"][1]["options"] == [{"label": "Sales", "value": "sales"}]

    @pytest.mark.parametrize("status", [400, 409])
    def test_conflict_means_exists(self, status):
        response = _call(lambda request: httpx.Response(status), lambda r: r.create_form(_form()))
        assert response.status is RegistryStatus.EXISTS
        assert response.entity_id is None

    def test_server_error_raises(self):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        with pytest.raises(RemoteFailure) as excinfo:
            _call(handler, lambda r: r.create_form(_form()))
        assert excinfo.value.status_code == 503
        assert "maintenance" in str(excinfo.value)

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteFailure) as excinfo:
            _call(handler, lambda r: r.create_form(_form()))
        assert excinfo.value.status_code is None

    def test_success_without_body(self):
        response = _call(lambda request: httpx.Response(204), lambda r: r.create_form(_form()))
        assert response.status is RegistryStatus.CREATED
        assert response.entity_id is None


class TestSeoEndpoints:
    def test_page_metadata(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        payload = PageMetadataPayload(project_id="proj-1", path="/about", managed_title="About")
        _call(handler, lambda r: r.create_page_metadata(payload))
        assert seen["path"] == "/seo/pages"
        assert seen["body"] == {"project_id": "proj-1", "path": "/about", "managed_title": "About"}

    def test_schema_uses_api_key(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["key"] = request.headers.get("x-api-key")
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": 7})

        payload = SchemaRegistration(
            page_path="/", schema_type="Organization", schema_data={"@type": "Organization"},
        )
        response = _call(handler, lambda r: r.register_schema(payload))
        assert response.entity_id == "7"
        assert seen["path"] == "/api/public/seo/register-schema"
        assert seen["key"] == "secret"
        assert seen["auth"] is None
        assert seen["body"]["is_implemented"] is True
        assert seen["body"]["schema_json"] == {"@type": "Organization"}
        assert "schema_data" not in seen["body"]

    def test_schema_field_does_not_shadow_model_methods(self):
        assert "schema_json" not in SchemaRegistration.model_fields
        assert callable(SchemaRegistration.model_json_schema)

    def test_faq(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "faq-1"})

        payload = FAQPayload.from_items("/faq", [("Q1?", "A1"), ("Q2?", "A2")])
        _call(handler, lambda r: r.register_faq(payload))
        assert seen["path"] == "/api/public/seo/register-faq"
        body = seen["body"]
        assert body["is_published"] is True
        assert [(i["id"], i["order"]) for i in body["items"]] == [("faq-1", 0), ("faq-2", 1)]


def test_empty_faq_is_unpublished():
    payload = FAQPayload.from_items("/faq", [])
    assert payload.items == []
    assert not payload.is_published
    assert payload.title == "Frequently Asked Questions"


def test_owned_client_is_closed():
    async def run():
        registry = RegistryClient(OPTIONS)
        async with registry:
            pass
        return registry.client.is_closed
    assert asyncio.run(run())
