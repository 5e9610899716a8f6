"""
saml_provisioner.api.__main__

Run the provisioning API: `python -m saml_provisioner.api [--host H] [--port P]`.

Host and port default to `SAMLP_API_HOST` / `SAMLP_API_PORT`.
"""

from __future__ import annotations

import argparse

import uvicorn

from saml_provisioner.api.app import create_app
from saml_provisioner.settings import get_settings


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="saml_provisioner.api")
    parser.add_argument("--host", default=settings.api_host)
    parser.add_argument("--port", type=int, default=settings.api_port)
    args = parser.parse_args(argv)

    uvicorn.run(
        create_app(settings=settings),
        host=args.host,
        port=args.port,
        log_config=None,  # structlog owns stdout
        server_header=False,
    )


if __name__ == "__main__":
    main()
