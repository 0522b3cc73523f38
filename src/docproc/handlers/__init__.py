"""Job pipelines, one per job type."""

from .pdf_preprocess import handle_pdf_preprocess
from .pdf_export import handle_pdf_export
from .pdf_security import handle_pdf_password_encrypt, handle_pdf_remove_metadata
from .docx_compare import handle_docx_simple_compare, handle_docx_consolidate
from .uploads import handle_docx_upload, handle_create_temp_file

__all__ = [
    "handle_pdf_preprocess",
    "handle_pdf_export",
    "handle_pdf_password_encrypt",
    "handle_pdf_remove_metadata",
    "handle_docx_simple_compare",
    "handle_docx_consolidate",
    "handle_docx_upload",
    "handle_create_temp_file",
]
