"""CAF document exports package."""

from .json_export import generate_caf_export
from .pdf_export import PDF_FORMATS, generate_caf_pdf, pdf_filename

__all__ = ["PDF_FORMATS", "generate_caf_export", "generate_caf_pdf", "pdf_filename"]
