import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Mapping

from .formats import DocumentFormat, normalize_media_type
from .interfaces import ConverterGateway

logger = logging.getLogger(__name__)


class LibreOfficeConverter(ConverterGateway):
    """Converts office documents by shelling out to a headless ``soffice``.

    Each call gets its own scratch directory and LibreOffice user profile,
    so concurrent conversions do not fight over a shared profile lock.
    """

    def __init__(self, soffice_path: str = "soffice", *, timeout_sec: float = 300) -> None:
        self._soffice = soffice_path
        self._timeout = timeout_sec

    def build_command(self, input_path: Path, output_format: DocumentFormat, work_dir: Path) -> list[str]:
        profile_uri = (work_dir / "profile").as_uri()
        return [
            self._soffice,
            f"-env:UserInstallation={profile_uri}",
            "--headless",
            "--norestore",
            "--convert-to",
            output_format.target,
            "--outdir",
            str(work_dir / "out"),
            str(input_path),
        ]

    def convert(
        self,
        input_path: Path,
        input_format: DocumentFormat,
        output_path: Path,
        output_format: DocumentFormat,
    ) -> None:
        with tempfile.TemporaryDirectory(prefix="soffice-") as tmp_dir:
            work_dir = Path(tmp_dir)
            command = self.build_command(input_path, output_format, work_dir)
            logger.debug("Running %s", command)
            try:
                completed = subprocess.run(
                    command, capture_output=True, text=True, timeout=self._timeout, check=False
                )
            except FileNotFoundError as e:
                raise RuntimeError(f"LibreOffice binary not found: {self._soffice}") from e
            except subprocess.TimeoutExpired as e:
                raise RuntimeError(f"LibreOffice did not finish within {self._timeout} seconds") from e

            diagnostics = (completed.stderr or completed.stdout or "").strip()
            if completed.returncode != 0:
                raise RuntimeError(f"LibreOffice exited with status {completed.returncode}: {diagnostics}")

            # soffice names its output after the input file's stem
            produced = work_dir / "out" / f"{input_path.stem}.{output_format.extension}"
            if not produced.exists():
                raise RuntimeError(
                    f"LibreOffice produced no {output_format.extension} output for "
                    f"{input_format.extension} input: {diagnostics or 'no diagnostics'}"
                )
            shutil.move(str(produced), str(output_path))


class DoclingConverter(ConverterGateway):
    """Markdown export through docling, for outputs LibreOffice cannot write."""

    def convert(
        self,
        input_path: Path,
        input_format: DocumentFormat,
        output_path: Path,
        output_format: DocumentFormat,
    ) -> None:
        if output_format.extension != "md":
            raise RuntimeError(f"docling cannot produce {output_format.media_type}")

        from docling.document_converter import DocumentConverter  # type: ignore

        result = DocumentConverter().convert(str(input_path))
        doc = getattr(result, "document", result)
        # markdown methods vary across docling versions
        for m in ("export_to_markdown", "to_markdown", "as_markdown"):
            fn = getattr(doc, m, None)
            if callable(fn):
                markdown = fn()
                break
        else:
            raise RuntimeError("Doc object does not provide a markdown export method")

        with output_path.open("w", encoding="utf-8") as f:
            f.write(markdown)


class RoutingConverter(ConverterGateway):
    """Dispatches each conversion to an engine chosen by output MIME type."""

    def __init__(self, default: ConverterGateway, routes: Mapping[str, ConverterGateway] | None = None) -> None:
        self._default = default
        self._routes = {normalize_media_type(k): v for k, v in (routes or {}).items()}

    def engine_for(self, output_format: DocumentFormat) -> ConverterGateway:
        return self._routes.get(normalize_media_type(output_format.media_type), self._default)

    def convert(
        self,
        input_path: Path,
        input_format: DocumentFormat,
        output_path: Path,
        output_format: DocumentFormat,
    ) -> None:
        self.engine_for(output_format).convert(input_path, input_format, output_path, output_format)
