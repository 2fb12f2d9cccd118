"""Tests for the Ed25519 credential handshake and access key persistence.

A FastAPI fake of the server's `/v1/auth` endpoint verifies real signatures,
so the round trip exercises the wire format end to end.
"""

from __future__ import annotations

import base64
import json
import stat
from pathlib import Path

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import Body, FastAPI
from fastapi.testclient import TestClient

from installer.credentials import (
    ACCESS_KEY_FILE_NAME,
    AccessKeyStore,
    CredentialBootstrapper,
    CredentialBootstrapStatus,
)


def _create_fake_auth_application(received_payloads: list[dict[str, str]], issue_token: bool = True) -> FastAPI:
    """Build a fake auth service that verifies detached Ed25519 signatures.

    Args:
        received_payloads: Sink for request payloads.
        issue_token: Whether a valid signature is answered with a token.

    Returns:
        FastAPI: Fake application.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    application = FastAPI()

    @application.post("/v1/auth")
    def auth(payload: dict[str, str] = Body(...)) -> dict[str, object]:
        received_payloads.append(payload)
        public_key = Ed25519PublicKey.from_public_bytes(base64.b64decode(payload["publicKey"]))
        try:
            public_key.verify(base64.b64decode(payload["signature"]), base64.b64decode(payload["challenge"]))
        except InvalidSignature:
            return {"success": False}
        if not issue_token:
            return {"success": False}
        return {"success": True, "token": "abc"}

    return application


def test_credentials_round_trip_against_verifying_server(tmp_path: Path) -> None:
    """Issue a credential from a server that checks the signature.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the request shape and persisted access key.

    Raises:
        AssertionError: Raised when the handshake or persistence is wrong.
    """

    received_payloads: list[dict[str, str]] = []
    with TestClient(_create_fake_auth_application(received_payloads)) as client:
        bootstrapper = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path / ".happy"))
        result = bootstrapper.bootstrap_issue("http://testserver")

    assert result.status is CredentialBootstrapStatus.ISSUED
    assert result.access_key_path == tmp_path / ".happy" / ACCESS_KEY_FILE_NAME
    assert len(base64.b64decode(received_payloads[0]["publicKey"])) == 32
    assert len(base64.b64decode(received_payloads[0]["challenge"])) == 32

    persisted = json.loads(result.access_key_path.read_text(encoding="utf-8"))
    assert list(persisted) == ["secret", "token"]
    assert persisted["token"] == "abc"
    assert len(base64.b64decode(persisted["secret"])) == 32
    assert stat.S_IMODE(result.access_key_path.stat().st_mode) == 0o600


def test_credentials_each_attempt_uses_a_fresh_keypair_and_challenge(tmp_path: Path) -> None:
    received_payloads: list[dict[str, str]] = []
    with TestClient(_create_fake_auth_application(received_payloads)) as client:
        bootstrapper = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path))
        bootstrapper.bootstrap_issue("http://testserver")
        bootstrapper.bootstrap_issue("http://testserver/")

    assert received_payloads[0]["publicKey"] != received_payloads[1]["publicKey"]
    assert received_payloads[0]["challenge"] != received_payloads[1]["challenge"]


def test_credentials_rejection_writes_nothing(tmp_path: Path) -> None:
    """Report failure and leave no access key when the server rejects the handshake.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the failed result and absent file.

    Raises:
        AssertionError: Raised when a rejected handshake writes a file.
    """

    with TestClient(_create_fake_auth_application([], issue_token=False)) as client:
        result = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path)).bootstrap_issue(
            "http://testserver"
        )

    assert result.status is CredentialBootstrapStatus.FAILED
    assert result.failure_reason is not None and "auth rejected" in result.failure_reason
    assert result.error_code == "INSTALL_CREDENTIAL_BOOTSTRAP_FAILED"
    assert not (tmp_path / ACCESS_KEY_FILE_NAME).exists()


def test_credentials_transport_error_is_reported_not_raised(tmp_path: Path) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        result = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path)).bootstrap_issue(
            "http://localhost:8080"
        )

    assert result.bootstrap_succeeded() is False
    assert result.failure_reason == "auth request failed: ConnectError: connection refused"
    assert list(tmp_path.iterdir()) == []


def test_credentials_non_json_and_blank_token_replies_fail(tmp_path: Path) -> None:
    replies = iter(
        [
            httpx.Response(502, text="<html>Bad Gateway</html>"),
            httpx.Response(200, json={"success": True, "token": ""}),
            httpx.Response(200, json=["success", "token"]),
        ]
    )

    def _handler(request: httpx.Request) -> httpx.Response:
        return next(replies)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        bootstrapper = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path))
        reasons = [bootstrapper.bootstrap_issue("http://localhost:8080").failure_reason for _ in range(3)]

    assert reasons[0] == "auth response is not JSON (HTTP 502)"
    assert reasons[1] is not None and reasons[1].startswith("auth rejected (HTTP 200)")
    assert reasons[2] == "auth response is not a JSON object"
    assert list(tmp_path.iterdir()) == []


def test_credentials_malformed_base_url_is_reported_not_raised(tmp_path: Path) -> None:
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"success": True, "token": "abc"})

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        result = CredentialBootstrapper(client=client, store=AccessKeyStore(directory=tmp_path)).bootstrap_issue(
            "http://example.com:notaport"
        )

    assert result.status is CredentialBootstrapStatus.FAILED
    assert result.failure_reason is not None and result.failure_reason.startswith("auth request failed: InvalidURL")
    assert requests == []
    assert list(tmp_path.iterdir()) == []
