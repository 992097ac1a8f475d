from __future__ import annotations

import json

import httpx
import pytest

from tokend.exceptions import (
    BackendAuthError,
    BackendUnavailableError,
    FetchError,
    SecretNotFoundError,
)
from tokend.providers.identity import InstanceMetadata, WardenClient
from tokend.providers.vault import VaultClient


def vault_client(settings, handler):
    transport = httpx.MockTransport(handler)
    return VaultClient(
        settings.vault,
        client=httpx.AsyncClient(transport=transport, base_url=settings.vault.address),
    )


async def test_read_sends_the_token_header(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"password": "hunter2"}, "lease_duration": 300})

    client = vault_client(settings, handler)
    body = await client.read("secret/app/db", token="tok")

    assert body == {"data": {"password": "hunter2"}, "lease_duration": 300}
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/v1/secret/app/db"
    assert seen[0].headers["X-Vault-Token"] == "tok"
    await client.close()


async def test_write_posts_json(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"plaintext": "aGk="}})

    client = vault_client(settings, handler)
    await client.write("transit/decrypt/key", {"ciphertext": "vault:v1:abc"}, token="tok")

    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"ciphertext": "vault:v1:abc"}


@pytest.mark.parametrize(
    ("status_code", "error"),
    [(401, BackendAuthError), (403, BackendAuthError), (404, SecretNotFoundError), (400, FetchError)],
)
async def test_client_errors_are_not_retried(settings, status_code, error):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(status_code, text="nope")

    client = vault_client(settings, handler)

    with pytest.raises(error, match=f"{status_code}: nope"):
        await client.read("secret/app/db", token="tok")
    assert calls == 1


async def test_server_errors_are_retried(settings):
    responses = [httpx.Response(503, text="sealed"), httpx.Response(200, json={"data": {"ok": True}})]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    client = vault_client(settings, handler)

    assert await client.read("secret/app/db", token="tok") == {"data": {"ok": True}}
    assert responses == []


async def test_server_errors_fail_after_retries(settings):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(500, text="internal")

    client = vault_client(settings, handler)

    with pytest.raises(FetchError, match="500: internal"):
        await client.read("secret/app/db", token="tok")
    assert calls == settings.vault.max_retries + 1


async def test_transport_errors_become_unavailable(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = vault_client(settings, handler)

    with pytest.raises(BackendUnavailableError, match="Unable to reach vault"):
        await client.read("secret/app/db", token="tok")


async def test_non_json_body_is_a_fetch_error(settings):
    client = vault_client(settings, lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(FetchError, match="Failed to decode vault response"):
        await client.read("secret/app/db", token="tok")


async def test_instance_metadata_identity_and_region(settings):
    documents = {
        "document": json.dumps({"region": "eu-west-1", "instanceId": "i-123"}),
        "signature": "SIGNATURE",
        "pkcs7": "PKCS7",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, text=documents[name])

    metadata = InstanceMetadata(
        settings.metadata,
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url=settings.metadata.host
        ),
    )

    assert await metadata.identity() == (documents["document"], "SIGNATURE", "PKCS7")
    assert await metadata.region() == "eu-west-1"


def test_parse_document_rejects_garbage():
    with pytest.raises(FetchError):
        InstanceMetadata.parse_document("not json")
    with pytest.raises(FetchError):
        InstanceMetadata.parse_document("[1, 2]")


async def test_warden_authenticate(settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"token": "T"}, "lease_duration": 60})

    warden = WardenClient(
        settings.warden,
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url=settings.warden.address
        ),
    )

    body = await warden.authenticate({"document": {"region": "x"}, "signature": "s", "pkcs7": "p"})

    assert body["data"] == {"token": "T"}
    assert seen[0].url.path == "/v1/authenticate"
    assert json.loads(seen[0].content)["signature"] == "s"


async def test_warden_errors_carry_status_and_body(settings):
    warden = WardenClient(
        settings.warden,
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="bad document")),
            base_url=settings.warden.address,
        ),
    )

    with pytest.raises(FetchError, match="500: bad document"):
        await warden.authenticate({})
