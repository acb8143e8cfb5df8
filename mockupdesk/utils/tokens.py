"""Random tokens for public review links."""
import secrets

TOKEN_BYTES = 48  # 64 url-safe characters


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)
