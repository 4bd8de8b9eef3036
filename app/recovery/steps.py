from app.crypto.cipher import CompatibleCipher
from app.database.repositories.recovery_store import RecoveryStore
from app.extraction.extractor import DocumentExtractor
from app.formats.classifier import classify_payload, looks_like_wrapped_envelope
from app.formats.models import ClassificationTag
from app.gateway.fetcher import GatewayFetcher
from app.logging.logger import Log
from app.recovery.exceptions import MissingKey, NoArtifactsFound, UnsupportedFormat
from app.recovery.models import RecoveryState
from app.recovery.pipeline import PipelineStep, RecoveryContext


class FetchStep(PipelineStep):
    def __init__(self, fetcher: GatewayFetcher) -> None:
        self._fetcher = fetcher

    def run(self, context: RecoveryContext) -> RecoveryContext:
        context.state = RecoveryState.FETCHING
        Log.info(f"Fetching {context.record.content_ref} for {context.document_id}")
        context.blob = self._fetcher.fetch(context.record.content_ref)
        return context


class ClassifyStep(PipelineStep):
    def run(self, context: RecoveryContext) -> RecoveryContext:
        if context.blob is None:
            raise ValueError("RecoveryContext.blob must be set before classification")
        context.state = RecoveryState.CLASSIFYING
        try:
            text = context.blob.text()
        except UnicodeDecodeError as exc:
            raise UnsupportedFormat("fetched blob is not UTF-8 text") from exc

        context.classified = classify_payload(text)
        Log.info(f"Classified {context.document_id} as {context.classified.tag.value}")
        if context.classified.tag is ClassificationTag.UNKNOWN and looks_like_wrapped_envelope(
            text
        ):
            Log.warning(
                f"Blob for {context.document_id} looks like a base64-wrapped encrypted "
                "envelope; not unwrapping, flag for manual review"
            )
            raise UnsupportedFormat("base64-wrapped encrypted envelope (manual review)")
        return context


class DecryptStep(PipelineStep):
    def __init__(self, cipher: CompatibleCipher) -> None:
        self._cipher = cipher

    def run(self, context: RecoveryContext) -> RecoveryContext:
        if context.classified is None:
            raise ValueError("RecoveryContext.classified must be set before decryption")
        if context.classified.tag is not ClassificationTag.CIPHER_ENVELOPE:
            return context
        if not context.record.decryption_key:
            raise MissingKey()

        context.state = RecoveryState.DECRYPTING
        context.encrypted = True
        plaintext = self._cipher.decrypt(context.classified.text, context.record.decryption_key)
        context.classified = classify_payload(plaintext, decrypted=True)
        Log.info(
            f"Decrypted {context.document_id}: plaintext is {context.classified.tag.value}"
        )
        if context.classified.tag is ClassificationTag.CIPHER_ENVELOPE:
            Log.warning(
                f"Decrypted payload for {context.document_id} is itself encrypted; "
                "flag for manual review"
            )
            raise UnsupportedFormat("nested encrypted envelope (manual review)")
        return context


class ExtractStep(PipelineStep):
    def __init__(self, extractor: DocumentExtractor) -> None:
        self._extractor = extractor

    def run(self, context: RecoveryContext) -> RecoveryContext:
        if context.classified is None:
            raise ValueError("RecoveryContext.classified must be set before extraction")
        context.state = RecoveryState.EXTRACTING
        result = self._extractor.extract(context.classified, context.document_id)
        context.extraction = result
        for error in result.errors:
            Log.warning(f"Skipped artifact for {context.document_id}: {error.status_detail()}")
        if not result.artifacts:
            raise NoArtifactsFound()
        Log.info(f"Extracted {', '.join(result.kinds)} from {context.document_id}")
        return context


class PersistStep(PipelineStep):
    def __init__(self, store: RecoveryStore, default_uploaded_by: str) -> None:
        self._store = store
        self._default_uploaded_by = default_uploaded_by

    def run(self, context: RecoveryContext) -> RecoveryContext:
        if context.extraction is None:
            raise ValueError("RecoveryContext.extraction must be set before persist")
        context.state = RecoveryState.PERSISTING
        uploaded_by = context.record.uploaded_by or self._default_uploaded_by
        context.stored_ids = self._store.save_artifacts(
            context.document_id,
            context.extraction.artifacts,
            uploaded_by,
        )
        context.stored_kinds = context.extraction.kinds
        for artifact in context.extraction.artifacts:
            Log.info(
                f"Stored {artifact.kind} for {context.document_id} ({artifact.size} bytes)"
            )
        return context
