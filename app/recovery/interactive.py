"""Synchronous, single-document decryption for an API layer.

Runs the batch pipeline's fetch, classify, decrypt and extract steps without
persistence. Every failure maps to a stable ``error_code``.
"""

import base64
from dataclasses import asdict, dataclass, field
from typing import Any

from app.crypto.cipher import CompatibleCipher
from app.extraction.extractor import DocumentExtractor
from app.gateway.fetcher import GatewayFetcher
from app.gateway.models import FetchedBlob
from app.logging.logger import Log
from app.recovery.exceptions import RecoveryError
from app.recovery.models import SourceRecord
from app.recovery.pipeline import RecoveryContext
from app.recovery.steps import ClassifyStep, DecryptStep, ExtractStep, FetchStep

INVALID_REQUEST = "INVALID_REQUEST"
INTERACTIVE_DOCUMENT_ID = "interactive"


@dataclass(frozen=True)
class DecryptRequest:
    content_ref: str | None = None
    raw_blob: str | None = None
    decryption_key: str | None = None


@dataclass(frozen=True)
class ArtifactView:
    kind: str
    mime_type: str
    size: int
    file_name: str
    data_base64: str


@dataclass
class DecryptResponse:
    success: bool
    format: str | None = None
    encrypted: bool = False
    endpoint: str | None = None
    artifacts: list[ArtifactView] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_code: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DecryptService:
    """Interactive entry point: one blob in, classified artifacts out.

    A raw blob takes precedence over a content reference.
    """

    def __init__(
        self,
        fetcher: GatewayFetcher,
        cipher: CompatibleCipher | None = None,
        extractor: DocumentExtractor | None = None,
    ) -> None:
        self._fetch_step = FetchStep(fetcher)
        self._classify_step = ClassifyStep()
        self._decrypt_step = DecryptStep(cipher or CompatibleCipher())
        self._extract_step = ExtractStep(extractor or DocumentExtractor())

    def decrypt_document(self, request: DecryptRequest) -> DecryptResponse:
        """Never raises for per-document failures; see ``error_code``."""
        if not request.raw_blob and not (request.content_ref or "").strip():
            return DecryptResponse(
                success=False,
                error_code=INVALID_REQUEST,
                error="Either content_ref or raw_blob must be provided",
            )

        response = DecryptResponse(success=False)
        context = RecoveryContext(
            record=SourceRecord(
                document_id=INTERACTIVE_DOCUMENT_ID,
                content_ref=request.content_ref or "",
                decryption_key=request.decryption_key,
            )
        )
        try:
            self._run(request, context, response)
        except RecoveryError as exc:
            Log.warning(f"Interactive decryption failed ({exc.code}): {exc}")
            response.error_code = exc.code
            response.error = str(exc)
        return response

    def _run(
        self,
        request: DecryptRequest,
        context: RecoveryContext,
        response: DecryptResponse,
    ) -> None:
        if request.raw_blob:
            context.blob = FetchedBlob(
                content_ref="", content=request.raw_blob.encode("utf-8"), endpoint=""
            )
        else:
            context = self._fetch_step.run(context)
            response.endpoint = context.blob.endpoint if context.blob else None

        context = self._classify_step.run(context)
        response.format = context.classified.tag.value if context.classified else None

        context = self._decrypt_step.run(context)
        response.encrypted = context.encrypted

        try:
            context = self._extract_step.run(context)
        finally:
            if context.extraction is not None:
                response.warnings = [
                    error.status_detail() for error in context.extraction.errors
                ]

        artifacts = context.extraction.artifacts if context.extraction else []
        response.artifacts = [
            ArtifactView(
                kind=artifact.kind,
                mime_type=artifact.mime_type,
                size=artifact.size,
                file_name=artifact.file_name,
                data_base64=base64.b64encode(artifact.data).decode("ascii"),
            )
            for artifact in artifacts
        ]
        response.success = True
