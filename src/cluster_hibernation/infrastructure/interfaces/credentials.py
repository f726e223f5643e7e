"""Credentials port - secret lookup is owned by the surrounding system."""
from typing import Dict, Mapping, Optional, Protocol, Tuple, runtime_checkable

from cluster_hibernation.domain.core.exceptions import CredentialsError


@runtime_checkable
class CredentialsSource(Protocol):
    """Resolves a secret reference to its key/value data."""

    def get_secret(self, namespace: str, name: str) -> Mapping[str, str]:
        """Return the secret data, raising CredentialsError if it is missing."""
        ...


class StaticCredentialsSource:
    """In-memory credentials source keyed by (namespace, name)."""

    def __init__(self, secrets: Optional[Mapping[Tuple[str, str], Mapping[str, str]]] = None):
        self._secrets: Dict[Tuple[str, str], Dict[str, str]] = {
            key: dict(value) for key, value in (secrets or {}).items()
        }

    def add_secret(self, namespace: str, name: str, data: Mapping[str, str]) -> None:
        self._secrets[(namespace, name)] = dict(data)

    def get_secret(self, namespace: str, name: str) -> Mapping[str, str]:
        try:
            return dict(self._secrets[(namespace, name)])
        except KeyError:
            raise CredentialsError(f"credentials secret {namespace}/{name} not found") from None


def require_secret_key(secret: Mapping[str, str], key: str, secret_name: str) -> str:
    """Return ``secret[key]`` or raise CredentialsError naming the missing key."""
    value = secret.get(key)
    if not value:
        raise CredentialsError(
            f'creds secret {secret_name!r} does not contain "{key}" data', missing_fields=[key]
        )
    return value
