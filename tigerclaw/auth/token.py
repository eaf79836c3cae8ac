import logging
import os
from enum import Enum
from typing import Optional, Tuple

import requests

from ..errors import CredentialError, InvalidInputError

logger = logging.getLogger(__name__)

CLIENT_ID = "migrationTestClient"
DEV_TOKEN_URL = "http://ui.d-lhr1-docker-026.dev.awin.com/idpbackend/token"


class Environment(str, Enum):
    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, name: str) -> "Environment":
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise InvalidInputError(f"Invalid environment: {name!r}") from None

    @property
    def secret_variable(self) -> str:
        """Name of the env variable holding this environment's client secret."""
        suffix = {
            Environment.LOCAL: "DEV",
            Environment.DEV: "DEV",
            Environment.STAGING: "STAGING",
            Environment.PRODUCTION: "PRODUCTION",
        }[self]
        return f"AWIN_SPRINGFIELD_{suffix}_CLIENT_SECRET"


class TokenConfig:
    def __init__(
        self,
        environment: Environment,
        token_url: Optional[str],
        client_secret: str = "",
        client_id: str = CLIENT_ID,
        timeout: float = 10,
    ) -> None:
        self.environment = environment
        self.token_url = token_url
        self.client_secret = client_secret
        self.client_id = client_id
        self.timeout = timeout

    @classmethod
    def from_env(cls, environment: Environment) -> "TokenConfig":
        # Staging and production have no identity endpoint wired up yet.
        token_url = os.getenv("TIGERCLAW_TOKEN_URL") or {
            Environment.LOCAL: DEV_TOKEN_URL,
            Environment.DEV: DEV_TOKEN_URL,
        }.get(environment)
        return cls(
            environment=environment,
            token_url=token_url,
            client_secret=os.getenv(environment.secret_variable, ""),
        )


class TokenProvider:
    """Fetch a bearer token with the client-credentials grant."""

    def __init__(self, config: TokenConfig) -> None:
        self.config = config

    def fetch_token(self) -> str:
        env = self.config.environment
        if not self.config.client_secret:
            raise CredentialError(
                f"Client secret not found in {env.secret_variable} for environment {env.value}"
            )
        if not self.config.token_url:
            raise CredentialError(f"No token endpoint configured for environment {env.value}")

        logger.info(f"Retrieving token for environment {env.value}")
        try:
            resp = requests.post(
                self.config.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                },
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise CredentialError(f"Token request failed: {e}") from e

        if not resp.ok:
            raise CredentialError(
                f"Failed to retrieve token, status code: {resp.status_code}, "
                f"response body: {resp.text}"
            )
        try:
            token = resp.json()["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise CredentialError(f"Could not extract access token: {e}") from e

        logger.debug(f"Retrieved token for environment {env.value}")
        return token


def get_token_and_environment(name: str) -> Tuple[str, Environment]:
    """Resolve ``name`` to an environment and fetch a token for it."""
    environment = Environment.parse(name)
    token = TokenProvider(TokenConfig.from_env(environment)).fetch_token()
    return token, environment
