#!/usr/bin/env python3
"""
PDF text extraction with more than one strategy.
"""

import logging
import re
import shutil
import subprocess
from typing import List, Optional

import pdfplumber

from .exceptions import DocumentReadError

logger = logging.getLogger(__name__)

CID_PATTERN = re.compile(r"\(cid:\d+\)")


class PDFTextExtractor:
    """Extracts the text lines of a PDF, trying pdfplumber first and pdftotext second."""

    def __init__(self):
        self.extraction_methods = [
            self._extract_with_pdfplumber,
            self._extract_with_pdftotext,
        ]

    def extract_lines(self, pdf_path: str) -> List[str]:
        """
        Extract the non-empty text lines of a PDF.

        A method that opens the file but finds no text hands over to the next
        one; the PDF only reads as empty when every method agrees.

        Args:
            pdf_path: Path to the PDF file

        Returns:
            Cleaned lines, in reading order

        Raises:
            DocumentReadError: when no method could open the file
        """
        opened = False
        for method in self.extraction_methods:
            try:
                text = method(pdf_path)
            except Exception as e:
                logger.warning(f"Method {method.__name__} failed: {e}")
                continue
            if text is None:
                continue
            opened = True
            lines = self.clean_lines(text)
            if not lines:
                logger.info(f"No text found using {method.__name__}")
                continue
            logger.info(f"Extracted {len(lines)} lines using {method.__name__}")
            return lines

        if opened:
            return []
        raise DocumentReadError(pdf_path, "no PDF text extraction method succeeded")

    def _extract_with_pdfplumber(self, pdf_path: str) -> Optional[str]:
        """Extract text using pdfplumber."""
        pages = []
        with pdfplumber.open(pdf_path) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text()
                if not page_text:
                    page_text = page.extract_text(layout=True, x_tolerance=3, y_tolerance=3)
                if page_text:
                    pages.append(page_text)
        return "\n".join(pages)

    def _extract_with_pdftotext(self, pdf_path: str) -> Optional[str]:
        """Extract text using the pdftotext command-line tool, when installed."""
        if shutil.which("pdftotext") is None:
            logger.debug("pdftotext not available")
            return None

        result = subprocess.run(
            ["pdftotext", "-layout", pdf_path, "-"],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            logger.warning(f"pdftotext failed: {result.stderr.strip()}")
            return None
        return result.stdout

    @staticmethod
    def clean_lines(text: str) -> List[str]:
        """Drop CID encoding artifacts and blank lines."""
        text = CID_PATTERN.sub("", text or "")
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return [line.strip() for line in text.split("\n") if line.strip()]

