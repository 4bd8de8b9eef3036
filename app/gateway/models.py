from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedBlob:
    """Raw body served by one gateway for a content reference."""

    content_ref: str
    content: bytes
    endpoint: str

    @property
    def url(self) -> str:
        return f"{self.endpoint}{self.content_ref}"

    def text(self) -> str:
        """Decode the body as UTF-8.

        Raises:
            UnicodeDecodeError: if the body is not valid UTF-8.
        """
        return self.content.decode("utf-8")
