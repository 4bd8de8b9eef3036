from typing import ClassVar


class RecoveryError(Exception):
    """Base exception for errors scoped to a single source record.

    Each subclass carries a stable ``code`` for API clients and renders the
    detail string persisted as the record's recovery status.
    """

    code: ClassVar[str] = "RECOVERY_ERROR"
    stage: ClassVar[str] = "error"

    def status_detail(self) -> str:
        return f"{self.stage}: {self}"


class FetchExhausted(RecoveryError):
    """Raised when every configured gateway failed for a content reference."""

    code = "FETCH_EXHAUSTED"
    stage = "fetch"

    def __init__(self, content_ref: str, failures: list[str] | None = None) -> None:
        self.content_ref = content_ref
        self.failures = failures or []
        if self.failures:
            message = f"all gateways failed for {content_ref} ({'; '.join(self.failures)})"
        else:
            message = f"no gateway could serve {content_ref!r}"
        super().__init__(message)


class UnsupportedFormat(RecoveryError):
    """Raised when a payload has no shape the extractor understands."""

    code = "UNSUPPORTED_FORMAT"
    stage = "unsupported format"


class MissingKey(RecoveryError):
    """Raised when an encrypted payload arrives without a decryption key."""

    code = "MISSING_KEY"

    def __init__(self, message: str = "missing key for encrypted payload") -> None:
        super().__init__(message)

    def status_detail(self) -> str:
        return "missing key for encrypted payload"


class DecryptionFailed(RecoveryError):
    """Raised when padding or UTF-8 validation fails after decryption.

    Almost always a wrong key or corrupted ciphertext.
    """

    code = "DECRYPTION_FAILED"
    stage = "decrypt"


class MalformedArtifact(RecoveryError):
    """Raised when one artifact inside a classified payload cannot be decoded."""

    code = "MALFORMED_ARTIFACT"

    def __init__(self, kind: str, reason: str) -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"{kind}: {reason}")

    def status_detail(self) -> str:
        return f"malformed artifact {self.kind}: {self.reason}"


class NoArtifactsFound(RecoveryError):
    """Raised when extraction yields nothing to persist."""

    code = "NO_ARTIFACTS"

    def __init__(self, message: str = "no artifacts found") -> None:
        super().__init__(message)

    def status_detail(self) -> str:
        return "no artifacts found"


class StorageFailure(RecoveryError):
    """Raised when the persistence layer rejects a write for one record."""

    code = "STORAGE_FAILURE"
    stage = "persist"


class ConfigurationError(Exception):
    """Base exception for errors that abort the whole run."""


class NoGatewaysConfigured(ConfigurationError):
    """Raised when the gateway list is empty."""


class StorageUnavailable(ConfigurationError):
    """Raised when the database cannot be reached or its schema cannot be set up."""
