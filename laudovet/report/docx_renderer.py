"""Render a ``ReportDocument`` as a Word (.docx) file."""

import io
import logging

from docx import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Mm, Pt, RGBColor

from laudovet.report.document import EXPORT_SUMMARY_LINES, ReportDocument
from laudovet.report.images import ImageBox
from laudovet.report.markup import BOLD, ITALIC

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# 96 dpi screen pixels
EMU_PER_PX = 9525

REFERENCE_COLOR = RGBColor(0x66, 0x66, 0x66)


def _px(value: float) -> Emu:
    return Emu(int(round(value * EMU_PER_PX)))


def _add_picture(run, box: ImageBox) -> bool:
    # python-docx raises its own errors (UnrecognizedImageError, UnexpectedEndOfFileError, ...)
    # and plain AttributeError/struct.error for damaged streams; skip the picture only
    try:
        run.add_picture(io.BytesIO(box.data), width=_px(box.width), height=_px(box.height))
    except Exception as e:
        logger.warning("Skipping undecodable image %s in DOCX: %s", box.filename or "<unnamed>", e)
        return False
    return True


def _remove_table_borders(table):
    tbl_pr = table._tbl.tblPr
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:val"), "none")
        el.set(qn("w:sz"), "0")
        el.set(qn("w:space"), "0")
        el.set(qn("w:color"), "auto")
        borders.append(el)
    # tblBorders must precede tblLook
    look = tbl_pr.find(qn("w:tblLook"))
    if look is not None:
        look.addprevious(borders)
    else:
        tbl_pr.append(borders)


def render_docx(doc: ReportDocument) -> bytes:
    out = DocxDocument()

    # Page setup
    margins = doc.header.margins
    for section in out.sections:
        section.top_margin = Mm(margins.top)
        section.left_margin = Mm(margins.left)
        section.right_margin = Mm(margins.right)
        section.bottom_margin = Mm(margins.bottom)

    # Header: letterhead image or clinic title
    header_para = out.sections[0].header.paragraphs[0]
    header_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    if doc.header.letterhead is not None:
        _add_picture(header_para.add_run(), doc.header.letterhead)
    elif doc.header.title:
        run = header_para.add_run(doc.header.title)
        run.bold = True
        run.font.size = Pt(14)

    # Patient summary
    name = doc.summary.get("name")
    out.add_heading(f"{name.label}: {name.value}", level=2)
    for keys in EXPORT_SUMMARY_LINES:
        fields = [doc.summary.get(k) for k in keys]
        out.add_paragraph(" • ".join(f"{f.label}: {f.value}" for f in fields if f is not None))
    out.add_paragraph("")

    title = out.add_heading(doc.title, level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    out.add_paragraph("")

    # Findings
    for sec in doc.sections:
        out.add_heading(sec.heading, level=3)
        for spans in sec.paragraphs:
            p = out.add_paragraph()
            for span in spans:
                run = p.add_run(span.content)
                run.bold = span.style == BOLD
                run.italic = span.style == ITALIC
        if sec.reference:
            ref = out.add_paragraph().add_run(sec.reference)
            ref.font.size = Pt(10)
            ref.font.color.rgb = REFERENCE_COLOR
        out.add_paragraph("")

    # Image appendix
    if doc.appendix is not None and doc.appendix.rows:
        out.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
        table = out.add_table(rows=0, cols=2)
        _remove_table_borders(table)
        for row in doc.appendix.rows:
            cells = table.add_row().cells
            for cell, box in zip(cells, row):
                pic = cell.paragraphs[0]
                pic.alignment = WD_ALIGN_PARAGRAPH.CENTER
                _add_picture(pic.add_run(), box)
                caption = cell.add_paragraph(box.caption or "")
                caption.alignment = WD_ALIGN_PARAGRAPH.CENTER

    buf = io.BytesIO()
    out.save(buf)
    logger.debug("Rendered DOCX for %s (%d bytes)", doc.filename_stem, buf.tell())
    return buf.getvalue()
