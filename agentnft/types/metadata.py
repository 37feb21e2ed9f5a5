"""Agent metadata models."""

from dataclasses import dataclass, field
from typing import Any

_FIELD_KEYS = {
    "name": "name",
    "version": "version",
    "description": "description",
    "parameters": "parameters",
    "metadata": "metadata",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass
class AgentMetadata:
    """
    Plaintext record stored encrypted for each token data item.

    Serialized with camelCase keys. Keys not modelled here are kept in
    ``extra`` and written back unchanged.
    """

    name: str
    created_at: Any  # epoch millis; left untyped so invalid records survive parsing
    version: str | None = "1.0"
    description: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    updated_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data["name"] = self.name
        if self.version is not None:
            data["version"] = self.version
        if self.description is not None:
            data["description"] = self.description
        if self.parameters:
            data["parameters"] = self.parameters
        if self.metadata:
            data["metadata"] = self.metadata
        data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentMetadata":
        kwargs: dict[str, Any] = {"name": "", "created_at": None, "version": None}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _FIELD_KEYS:
                kwargs[_FIELD_KEYS[key]] = value
            else:
                extra[key] = value
        kwargs["parameters"] = kwargs.get("parameters") or {}
        kwargs["metadata"] = kwargs.get("metadata") or {}
        return cls(**kwargs, extra=extra)


@dataclass
class EncryptedMetadataResult:
    """Result of writing one encrypted metadata record."""

    content_address: str
    sealed_key: str
    encryption_key: bytes
    metadata: AgentMetadata

    def __repr__(self) -> str:
        return (
            f"EncryptedMetadataResult(content_address={self.content_address!r}, "
            f"sealed_key=[REDACTED], encryption_key=[REDACTED], metadata={self.metadata!r})"
        )


@dataclass
class DecryptedMetadata:
    """Decrypted record plus the outcome of its structural check."""

    metadata: AgentMetadata
    is_valid: bool
