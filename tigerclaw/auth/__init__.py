"""Bearer token acquisition for the migration services."""

from .token import Environment, TokenConfig, TokenProvider, get_token_and_environment

__all__ = ["Environment", "TokenConfig", "TokenProvider", "get_token_and_environment"]
