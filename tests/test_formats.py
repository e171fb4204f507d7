from doc_converter.conversion.formats import (
    DocumentFormat,
    FormatRegistry,
    default_registry,
    normalize_media_type,
)


def test_default_registry_resolves_common_office_formats():
    registry = default_registry()
    assert registry.by_media_type("application/pdf").extension == "pdf"
    assert registry.by_media_type("text/plain").extension == "txt"
    docx = registry.by_media_type(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert docx.extension == "docx"


def test_lookup_ignores_parameters_and_case():
    registry = default_registry()
    assert registry.by_media_type("Text/Plain; charset=utf-8").media_type == "text/plain"
    assert normalize_media_type(" APPLICATION/PDF ") == "application/pdf"


def test_unknown_media_type_is_not_found():
    assert default_registry().by_media_type("application/unknown-format") is None


def test_lookup_by_extension():
    registry = default_registry()
    assert registry.by_extension(".PPTX").media_type.endswith("presentationml.presentation")
    assert registry.by_extension("exe") is None


def test_target_falls_back_to_extension():
    registry = default_registry()
    assert registry.by_media_type("application/pdf").target == "pdf"
    assert registry.by_media_type("text/plain").target == "txt:Text (encoded):UTF8"


def test_custom_registry():
    fmt = DocumentFormat("Epub", "application/epub+zip", "epub")
    registry = FormatRegistry([fmt])
    assert len(registry) == 1
    assert list(registry) == [fmt]
    assert registry.by_media_type("application/epub+zip") is fmt
