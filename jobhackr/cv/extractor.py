import re
from pathlib import Path

import fitz  # PyMuPDF

SUPPORTED_SUFFIXES = {".pdf", ".txt"}


def extract_text_from_pdf(file_path: Path) -> str:
    """Extract text from a PDF file.

    Args:
        file_path: Path to the PDF file.

    Returns:
        Extracted text with normalized whitespace.

    Raises:
        FileNotFoundError: If the PDF file doesn't exist.
        ValueError: If the file is not a PDF.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {path}")

    if path.suffix.lower() != ".pdf":
        raise ValueError(f"File is not a PDF: {path}")

    with fitz.open(path) as doc:
        raw_text = "\n".join(page.get_text() for page in doc)

    return clean_cv_text(raw_text)


def extract_cv_text(file_path: Path) -> str:
    """Extract text from a CV stored as PDF or plain text.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file type is not supported.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"CV file not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported CV file type '{suffix}': expected one of .pdf, .txt")

    if suffix == ".pdf":
        return extract_text_from_pdf(path)
    return clean_cv_text(path.read_text(encoding="utf-8", errors="replace"))


def clean_cv_text(text: str) -> str:
    """Normalize whitespace in extracted text."""
    text = re.sub(r"\r\n?", "\n", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
