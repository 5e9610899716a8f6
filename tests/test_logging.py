from __future__ import annotations

from saml_provisioner.observability.logging import REDACTED, redact_secrets


def test_secret_fields_are_redacted() -> None:
    event = redact_secrets(
        None,
        "info",
        {"event": "credential.refreshed", "access_token": "eyJ...", "client_secret": "s3cr3t", "expires_in": 3599},
    )

    assert event == {
        "event": "credential.refreshed",
        "access_token": REDACTED,
        "client_secret": REDACTED,
        "expires_in": 3599,
    }
