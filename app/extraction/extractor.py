import json
from typing import Any, ClassVar

from app.extraction.data_url import decode_data_url, default_file_name, is_data_url
from app.extraction.models import (
    DOCUMENT,
    THUMBNAIL,
    ExtractedArtifact,
    ExtractionResult,
)
from app.formats.models import ClassificationTag, ClassifiedPayload
from app.logging.logger import Log
from app.recovery.exceptions import MalformedArtifact, UnsupportedFormat


class DocumentExtractor:
    """Pulls named artifacts out of a plain (already decrypted) payload."""

    KIND_KEYS: ClassVar[dict[str, tuple[str, ...]]] = {
        THUMBNAIL: ("thumbnail", "thumbnailUrl"),
        DOCUMENT: ("document", "fullDocument", "documentUrl"),
    }

    def extract(self, classified: ClassifiedPayload, document_id: str) -> ExtractionResult:
        """Decode every artifact the payload carries.

        A malformed artifact is recorded in ``result.errors`` and does not stop
        its siblings.

        Raises:
            UnsupportedFormat: for ``Unknown`` or still-encrypted payloads, or
                JSON that is not an object.
        """
        if classified.tag is ClassificationTag.EMBEDDED_DATA_URL:
            return self._extract_data_url(classified.text, document_id)
        if classified.tag is ClassificationTag.JSON_ENVELOPE:
            return self._extract_json(classified.text, document_id)
        if classified.tag is ClassificationTag.CIPHER_ENVELOPE:
            raise UnsupportedFormat("encrypted payload reached extraction without decryption")
        raise UnsupportedFormat(
            "payload is not encrypted, not a data URL, and not valid JSON"
        )

    def _extract_data_url(self, text: str, document_id: str) -> ExtractionResult:
        result = ExtractionResult()
        try:
            decoded = decode_data_url(text, DOCUMENT)
        except MalformedArtifact as exc:
            result.errors.append(exc)
            return result
        # a bare data URL serves as both the document and its thumbnail
        for kind in (DOCUMENT, THUMBNAIL):
            result.artifacts.append(
                ExtractedArtifact(
                    document_id=document_id,
                    kind=kind,
                    data=decoded.data,
                    mime_type=decoded.mime_type,
                    file_name=default_file_name(kind, document_id, decoded.mime_type),
                )
            )
        return result

    def _extract_json(self, text: str, document_id: str) -> ExtractionResult:
        envelope = json.loads(text)
        if not isinstance(envelope, dict):
            raise UnsupportedFormat(
                f"JSON envelope must be an object, got {type(envelope).__name__}"
            )

        result = ExtractionResult()
        for kind, keys in self.KIND_KEYS.items():
            value = self._first_present(envelope, keys)
            if value is None:
                continue
            self._append(result, document_id, kind, value)

        documents = envelope.get("documents")
        if isinstance(documents, list):
            self._extract_documents_array(result, document_id, documents)
        return result

    def _extract_documents_array(
        self,
        result: ExtractionResult,
        document_id: str,
        documents: list[Any],
    ) -> None:
        Log.info(f"Found {len(documents)} entries in documents array for {document_id}")
        for position, entry in enumerate(documents, start=1):
            if not isinstance(entry, dict):
                continue
            value = entry.get("data") or entry.get("url")
            if value is None:
                continue
            kind = self._next_free_kind(result, position)
            name = entry.get("name") if isinstance(entry.get("name"), str) else None
            mime_override = entry.get("type") if isinstance(entry.get("type"), str) else None
            self._append(result, document_id, kind, value, name, mime_override)

    @staticmethod
    def _next_free_kind(result: ExtractionResult, position: int) -> str:
        taken = set(result.kinds)
        for kind in (THUMBNAIL, DOCUMENT):
            if kind not in taken:
                return kind
        return f"{DOCUMENT}_{position}"

    @staticmethod
    def _first_present(envelope: dict[str, Any], keys: tuple[str, ...]) -> Any:
        for key in keys:
            value = envelope.get(key)
            if value:
                return value
        return None

    @staticmethod
    def _append(
        result: ExtractionResult,
        document_id: str,
        kind: str,
        value: Any,
        file_name: str | None = None,
        mime_override: str | None = None,
    ) -> None:
        if not is_data_url(value):
            Log.debug(f"Skipping {kind} for {document_id}: value is not a data URL")
            return
        try:
            decoded = decode_data_url(value, kind)
        except MalformedArtifact as exc:
            Log.warning(f"Malformed {kind} for {document_id}: {exc.reason}")
            result.errors.append(exc)
            return
        mime_type = mime_override or decoded.mime_type
        result.artifacts.append(
            ExtractedArtifact(
                document_id=document_id,
                kind=kind,
                data=decoded.data,
                mime_type=mime_type,
                file_name=file_name or default_file_name(kind, document_id, mime_type),
            )
        )
