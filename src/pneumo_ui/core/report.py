"""
PDF Report Export
=================

This module renders the prediction text onto a single fixed-size PDF page
and writes it to disk for sharing.

Functions
---------
render_report_pdf
    Lay out report text on one 300x600 pt page and return the PDF bytes
export_report
    Validate preconditions, render, and write a timestamped PDF file

Page Layout
-----------
- Page size: 300 x 600 points, one page only
- Text: Helvetica 12 pt (or a caller-supplied TrueType font), left-aligned
  at x = 10
- Line ``i`` sits on the baseline y = 50 + 25 * i, measured from the top edge
- No wrapping and no pagination: long lines and lines below the page bottom
  are clipped by the page boundary

Notes
-----
ReportLab places the origin at the bottom-left corner, so the top-down line
positions above are converted with ``PAGE_HEIGHT - y`` when drawing.

Files are written to ``<output_dir>/Xray_Report_<epoch ms>.pdf``. The bytes
go to a ``.part`` file first and are renamed into place, so a failed export
never leaves a file under the final name.

Helvetica is one of the 14 standard PDF fonts and only covers Latin-1;
other characters (CJK, symbols) are drawn as a placeholder box. Pass
``font_path`` with a TrueType font that has the needed glyphs to keep them.

See Also
--------
pneumo_ui.core.pipeline : Calls export_report with the current result text
"""

import io
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .errors import ExportError, NothingToExportError

logger = logging.getLogger(__name__)

PAGE_WIDTH = 300
PAGE_HEIGHT = 600
LEFT_MARGIN = 10
TOP_MARGIN = 50
LINE_HEIGHT = 25
FONT_NAME = "Helvetica"
FONT_SIZE = 12
FILENAME_PREFIX = "Xray_Report_"
DEFAULT_REPORT_DIR = "~/.pneumoscan/reports"


@dataclass(frozen=True)
class ReportDocument:
    """
    A written PDF report.

    Attributes
    ----------
    path : Path
        Location of the PDF file
    line_count : int
        Number of text lines laid out on the page
    created_at : datetime
        Timestamp embedded in the file name
    """

    path: Path
    line_count: int
    created_at: datetime


def line_positions(n_lines: int) -> list[tuple[int, int]]:
    """Top-down ``(x, y)`` baseline position of each report line."""
    return [(LEFT_MARGIN, TOP_MARGIN + LINE_HEIGHT * i) for i in range(n_lines)]


def _register_font(font_path) -> str:
    name = Path(font_path).stem
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, str(font_path)))
    return name


def render_report_pdf(report_text: str, font_path=None) -> bytes:
    """
    Render ``report_text`` onto a single PDF page.

    Parameters
    ----------
    report_text : str
        Multi-line text; split on ``\\n``, one drawn line per entry
    font_path : str or Path, optional
        TrueType font file; Helvetica is used when omitted

    Returns
    -------
    bytes
        Complete PDF document

    Examples
    --------
    >>> pdf = render_report_pdf("Prediction: Normal\\nConfidence: 87.12%")
    >>> pdf[:5]
    b'%PDF-'
    """
    lines = report_text.split("\n")
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
    c.setTitle("X-ray Prediction Report")
    font_name = FONT_NAME if font_path is None else _register_font(font_path)
    c.setFont(font_name, FONT_SIZE)
    for line, (x, y) in zip(lines, line_positions(len(lines))):
        c.drawString(x, PAGE_HEIGHT - y, line)
    c.showPage()
    c.save()
    return buf.getvalue()


def _report_path(output_dir: Path, now: datetime) -> Path:
    stamp = int(now.timestamp() * 1000)
    path = output_dir / f"{FILENAME_PREFIX}{stamp}.pdf"
    while path.exists():
        stamp += 1
        path = output_dir / f"{FILENAME_PREFIX}{stamp}.pdf"
    return path


def export_report(
    report_text, source_image, output_dir=None, now=None, font_path=None
) -> ReportDocument:
    """
    Write the report text as a one-page PDF.

    Parameters
    ----------
    report_text : str
        Text currently shown as the prediction result
    source_image : PIL.Image or None
        Image the result belongs to; only checked for presence
    output_dir : str or Path, optional
        Target directory, created if missing. Defaults to
        ``~/.pneumoscan/reports``.
    now : datetime, optional
        Timestamp for the file name; defaults to the current time
    font_path : str or Path, optional
        TrueType font for the report text

    Returns
    -------
    ReportDocument
        Path and metadata of the written file

    Raises
    ------
    NothingToExportError
        If ``report_text`` is empty or ``source_image`` is None. Nothing is
        written.
    ExportError
        If rendering or writing fails. Any partial file is removed.
    """
    if not report_text or source_image is None:
        raise NothingToExportError("No prediction to share!")

    out_dir = Path(output_dir or DEFAULT_REPORT_DIR).expanduser()
    now = now or datetime.now()
    tmp_path = None
    try:
        data = render_report_pdf(report_text, font_path=font_path)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = _report_path(out_dir, now)
        tmp_path = path.with_name(path.name + ".part")
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except Exception as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        logger.error("PDF export failed: %s", e)
        raise ExportError(str(e) or type(e).__name__) from e

    n_lines = len(report_text.split("\n"))
    logger.info("Wrote report %s (%d lines)", path, n_lines)
    return ReportDocument(path=path, line_count=n_lines, created_at=now)
