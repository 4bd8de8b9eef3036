import pytest

from app.extraction.data_url import decode_data_url, default_file_name, is_data_url
from app.recovery.exceptions import MalformedArtifact


class TestIsDataUrl:
    def test_data_url(self) -> None:
        assert is_data_url("data:image/png;base64,AAAA") is True

    def test_http_url(self) -> None:
        assert is_data_url("https://example.com/doc.png") is False

    def test_non_string(self) -> None:
        assert is_data_url({"data": "x"}) is False
        assert is_data_url(None) is False


class TestDecodeDataUrl:
    def test_base64_body(self) -> None:
        decoded = decode_data_url("data:image/png;base64,iVBORw0KGgo=", "thumbnail")

        assert decoded.mime_type == "image/png"
        assert decoded.data == bytes.fromhex("89504e470d0a1a0a")

    def test_base64_body_with_line_breaks(self) -> None:
        decoded = decode_data_url("data:image/png;base64,AAEC\nAwQ=", "document")
        assert decoded.data == bytes([0, 1, 2, 3, 4])

    def test_percent_encoded_body(self) -> None:
        decoded = decode_data_url("data:text/plain,hello%20world", "document")

        assert decoded.mime_type == "text/plain"
        assert decoded.data == b"hello world"

    def test_missing_mime_type_defaults(self) -> None:
        decoded = decode_data_url("data:;base64,AAEC", "document")
        assert decoded.mime_type == "application/octet-stream"

    def test_only_first_comma_splits(self) -> None:
        decoded = decode_data_url("data:text/plain,a,b", "document")
        assert decoded.data == b"a,b"

    def test_missing_comma_raises(self) -> None:
        with pytest.raises(MalformedArtifact, match="no comma") as exc_info:
            decode_data_url("data:image/png;base64", "thumbnail")

        assert exc_info.value.kind == "thumbnail"

    def test_invalid_base64_raises(self) -> None:
        with pytest.raises(MalformedArtifact, match="not valid base64") as exc_info:
            decode_data_url("data:image/png;base64,@@@@", "document")

        assert exc_info.value.status_detail().startswith("malformed artifact document: ")

    def test_empty_body_raises(self) -> None:
        with pytest.raises(MalformedArtifact, match="empty"):
            decode_data_url("data:image/png;base64,", "document")


class TestDefaultFileName:
    def test_png(self) -> None:
        assert default_file_name("thumbnail", "N-1", "image/png") == "thumbnail-N-1.png"

    def test_pdf(self) -> None:
        assert default_file_name("document", "N-1", "application/pdf") == "document-N-1.pdf"

    def test_unknown_type_falls_back_to_bin(self) -> None:
        assert default_file_name("document", "N-1", "application/x-made-up") == "document-N-1.bin"
