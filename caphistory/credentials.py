from pathlib import Path
from typing import Optional

from .errors import ConfigurationError


def load_token_from_file(path: str) -> str:
    token_path = Path(path)
    if not token_path.is_file():
        raise ConfigurationError(f"Token file not found: {path}")
    token = token_path.read_text(encoding="utf-8").strip()
    if not token:
        raise ConfigurationError(f"Token file is empty: {path}")
    return token


def resolve_token(token: Optional[str], token_file: Optional[str]) -> str:
    """Return the bearer token from exactly one of ``token`` or ``token_file``."""
    if token and token_file:
        raise ConfigurationError("Specify either --token or --token-file, not both")
    if token:
        return token.strip()
    if token_file:
        return load_token_from_file(token_file)
    raise ConfigurationError("Missing credentials: specify --token or --token-file")
