"""
Unit tests for the file-backed endpoint store and endpoint models.
"""

import asyncio
import json

import pytest

from api_docs.store import (
    Endpoint,
    EndpointGroup,
    EndpointStore,
    InvalidFileNameError,
    StoreWriteError,
    generate_endpoint_id,
    sanitize_file_name,
)


@pytest.fixture
def apis_dir(tmp_path):
    path = tmp_path / "apis"
    path.mkdir()
    return path


@pytest.fixture
def store(apis_dir):
    return EndpointStore(apis_dir)


@pytest.fixture
def auth_group_document():
    return {
        "group": "인증 Auth",
        "description": "Ünïcode ✓ endpoints",
        "endpoints": [
            {
                "id": "post-auth-login",
                "method": "POST",
                "path": "/auth/login",
                "summary": "Log in",
                "headers": [
                    {"key": "Content-Type", "value": "application/json", "required": True}
                ],
                "params": [
                    {"key": "redirect", "value": "/home", "required": False, "encode": True}
                ],
                "body": {"user": "kim", "scopes": ["read", ["nested", {"deep": None}]]},
                "response": {"status": 200, "example": {"token": "abc", "roles": []}},
            }
        ],
    }


class TestGenerateEndpointId:

    def test_post_with_path_parameter(self):
        assert generate_endpoint_id("POST", "/users/:id") == "post-users-id"

    def test_runs_collapse_and_edges_trim(self):
        assert generate_endpoint_id("GET", "/api//v1/{userId}/orders?") == "get-api-v1-userid-orders"
        assert generate_endpoint_id("", "--/weird__path--") == "weird-path"

    def test_is_deterministic(self):
        assert generate_endpoint_id("Delete", "/a/b") == generate_endpoint_id("DELETE", "/a/b")


class TestEndpointGroupModel:

    def test_endpoint_without_id_gets_derived_id(self):
        endpoint = Endpoint(method="post", path="/users/:id")
        assert endpoint.method == "POST"
        assert endpoint.id == "post-users-id"

    def test_existing_id_is_kept(self):
        endpoint = Endpoint(id="legacy-id", method="GET", path="/renamed")
        assert endpoint.id == "legacy-id"

    def test_upsert_replaces_in_place(self):
        group = EndpointGroup(group="Users", endpoints=[
            Endpoint(method="GET", path="/users"),
            Endpoint(method="POST", path="/users"),
        ])
        group.upsert_endpoint(Endpoint(id="get-users", method="GET", path="/users", summary="List"))

        assert [e.id for e in group.endpoints] == ["get-users", "post-users"]
        assert group.get_endpoint("get-users").summary == "List"

    def test_upsert_appends_new_endpoint(self):
        group = EndpointGroup(group="Users")
        group.upsert_endpoint(Endpoint(method="DELETE", path="/users/:id"))
        assert [e.id for e in group.endpoints] == ["delete-users-id"]

    def test_removing_last_endpoint_leaves_empty_group(self):
        group = EndpointGroup(group="Users", endpoints=[Endpoint(method="GET", path="/users")])
        assert group.remove_endpoint("get-users") is True
        assert group.remove_endpoint("get-users") is False
        assert group.to_document() == {"group": "Users", "endpoints": []}

    def test_unknown_fields_survive(self):
        document = {
            "group": "Misc",
            "x-owner": "platform",
            "endpoints": [{"id": "get-ping", "method": "GET", "path": "/ping", "deprecated": True}],
        }
        assert EndpointGroup.model_validate(document).to_document() == document


class TestEndpointStore:

    def test_sanitize_file_name(self):
        assert sanitize_file_name("../../etc/auth.json") == "auth.json"
        assert sanitize_file_name("..\\..\\auth.json") == "auth.json"
        assert sanitize_file_name("auth.json") == "auth.json"

    @pytest.mark.asyncio
    async def test_round_trip_preserves_document(self, store, apis_dir, auth_group_document):
        written = await store.write_group("auth.json", auth_group_document)

        assert written == "auth.json"
        text = (apis_dir / "auth.json").read_text(encoding="utf-8")
        assert text == json.dumps(auth_group_document, indent=2, ensure_ascii=False)
        assert json.loads(text) == auth_group_document

        group = await store.read_group("auth.json")
        assert group.group == "인증 Auth"
        assert group.endpoints[0].body == auth_group_document["endpoints"][0]["body"]

    @pytest.mark.asyncio
    async def test_write_model_group(self, store, apis_dir):
        group = EndpointGroup(group="Users", endpoints=[Endpoint(method="GET", path="/users")])
        await store.write_group("users.json", group)

        reloaded = await store.read_group("users.json")
        assert reloaded.to_document() == group.to_document()
        assert reloaded.endpoints[0].id == "get-users"

    @pytest.mark.asyncio
    async def test_write_strips_directories(self, store, apis_dir, tmp_path):
        written = await store.write_group("../../escape.json", {"group": "X", "endpoints": []})

        assert written == "escape.json"
        assert (apis_dir / "escape.json").exists()
        assert not (tmp_path / "escape.json").exists()

    @pytest.mark.asyncio
    async def test_write_requires_json_suffix(self, store, apis_dir):
        with pytest.raises(InvalidFileNameError, match="must end with .json"):
            await store.write_group("auth.txt", {"group": "X", "endpoints": []})
        assert list(apis_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure_raises_store_error(self, tmp_path):
        store = EndpointStore(tmp_path / "missing" / "apis")
        with pytest.raises(StoreWriteError):
            await store.write_group("auth.json", {"group": "X", "endpoints": []})

    @pytest.mark.asyncio
    async def test_missing_or_corrupt_group_reads_as_none(self, store, apis_dir):
        assert await store.read_group("nope.json") is None

        (apis_dir / "broken.json").write_text("{not json", encoding="utf-8")
        assert await store.read_group("broken.json") is None

        (apis_dir / "list.json").write_text("[1, 2]", encoding="utf-8")
        assert await store.read_group("list.json") is None

    @pytest.mark.asyncio
    async def test_load_or_create_group(self, store, auth_group_document):
        fresh = await store.load_or_create_group("new.json", "New", "Fresh group")
        assert fresh.to_document() == {"group": "New", "description": "Fresh group", "endpoints": []}

        await store.write_group("auth.json", auth_group_document)
        existing = await store.load_or_create_group("auth.json", "Ignored")
        assert existing.group == "인증 Auth"

    @pytest.mark.asyncio
    async def test_append_index_is_idempotent(self, store, apis_dir):
        assert await store.append_index("auth.json") == ["auth.json"]
        assert await store.append_index("auth.json") == ["auth.json"]
        assert await store.append_index("users.json") == ["auth.json", "users.json"]

        on_disk = json.loads((apis_dir / "index.json").read_text(encoding="utf-8"))
        assert on_disk == ["auth.json", "users.json"]

    @pytest.mark.asyncio
    async def test_append_index_treats_corrupt_index_as_empty(self, store, apis_dir):
        (apis_dir / "index.json").write_text("{broken", encoding="utf-8")
        assert await store.append_index("auth.json") == ["auth.json"]

    @pytest.mark.asyncio
    async def test_append_index_uses_base_name(self, store):
        assert await store.append_index("nested/dir/auth.json") == ["auth.json"]

    @pytest.mark.asyncio
    async def test_append_index_rejects_empty_name(self, store):
        with pytest.raises(InvalidFileNameError):
            await store.append_index("some/dir/")

    @pytest.mark.asyncio
    async def test_concurrent_index_updates_are_serialized(self, store):
        names = [f"group-{i}.json" for i in range(10)]
        await asyncio.gather(*(store.append_index(name) for name in names))

        assert sorted(await store.read_index()) == sorted(names)
