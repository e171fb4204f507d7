from dataclasses import dataclass
from typing import Iterable, Iterator


@dataclass(frozen=True)
class DocumentFormat:
    name: str
    media_type: str
    extension: str
    # Optional engine filter hint, e.g. "txt:Text (encoded):UTF8" for soffice
    convert_target: str | None = None

    @property
    def target(self) -> str:
        return self.convert_target or self.extension


def normalize_media_type(media_type: str) -> str:
    """Strip parameters and case from a MIME string: 'Text/Plain; charset=x' -> 'text/plain'."""
    return media_type.split(";", 1)[0].strip().lower()


class FormatRegistry:
    """Lookup table from MIME type (and extension) to DocumentFormat."""

    def __init__(self, formats: Iterable[DocumentFormat] = ()) -> None:
        self._by_media_type: dict[str, DocumentFormat] = {}
        self._by_extension: dict[str, DocumentFormat] = {}
        for fmt in formats:
            self.add(fmt)

    def add(self, fmt: DocumentFormat) -> None:
        self._by_media_type[normalize_media_type(fmt.media_type)] = fmt
        self._by_extension.setdefault(fmt.extension.lower(), fmt)

    def by_media_type(self, media_type: str) -> DocumentFormat | None:
        return self._by_media_type.get(normalize_media_type(media_type))

    def by_extension(self, extension: str) -> DocumentFormat | None:
        return self._by_extension.get(extension.lower().lstrip("."))

    def __iter__(self) -> Iterator[DocumentFormat]:
        return iter(self._by_media_type.values())

    def __len__(self) -> int:
        return len(self._by_media_type)


DEFAULT_FORMATS = (
    DocumentFormat("Portable Document Format", "application/pdf", "pdf"),
    DocumentFormat("HTML", "text/html", "html"),
    DocumentFormat("OpenDocument Text", "application/vnd.oasis.opendocument.text", "odt"),
    DocumentFormat("Microsoft Word", "application/msword", "doc"),
    DocumentFormat(
        "Microsoft Word 2007 XML",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "docx",
    ),
    DocumentFormat("Rich Text Format", "text/rtf", "rtf"),
    DocumentFormat("Plain Text", "text/plain", "txt", "txt:Text (encoded):UTF8"),
    DocumentFormat("OpenDocument Spreadsheet", "application/vnd.oasis.opendocument.spreadsheet", "ods"),
    DocumentFormat("Microsoft Excel", "application/vnd.ms-excel", "xls"),
    DocumentFormat(
        "Microsoft Excel 2007 XML",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "xlsx",
    ),
    DocumentFormat("Comma Separated Values", "text/csv", "csv", "csv:Text - txt - csv (StarCalc)"),
    DocumentFormat("OpenDocument Presentation", "application/vnd.oasis.opendocument.presentation", "odp"),
    DocumentFormat("Microsoft PowerPoint", "application/vnd.ms-powerpoint", "ppt"),
    DocumentFormat(
        "Microsoft PowerPoint 2007 XML",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "pptx",
    ),
    DocumentFormat("OpenDocument Drawing", "application/vnd.oasis.opendocument.graphics", "odg"),
    DocumentFormat("Scalable Vector Graphics", "image/svg+xml", "svg"),
    DocumentFormat("Portable Network Graphics", "image/png", "png"),
    DocumentFormat("Markdown", "text/markdown", "md"),
)


def default_registry() -> FormatRegistry:
    return FormatRegistry(DEFAULT_FORMATS)
