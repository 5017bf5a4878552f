"""DOCX packager - encodes a :class:`DocumentModel` with python-docx.

python-docx has no high-level API for numbering definitions, paragraph
borders, shading or hyperlinks, so those are written as raw OOXML
elements next to the regular API calls.
"""

from __future__ import annotations

import io

from docx import Document
from docx.enum.style import WD_STYLE_TYPE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Pt, RGBColor, Twips
from docx.text.run import Run as DocxRun
from loguru import logger

from md2docx.exceptions import PackagingError
from md2docx.images import IMAGE_ERRORS
from md2docx.model import (
    PLACEHOLDER_COLOR,
    Alignment,
    Borders,
    DocumentModel,
    Hyperlink,
    ImageRun,
    NumberingDefinition,
    NumberingRef,
    Paragraph,
    ParagraphStyle,
    Run,
    Table,
    image_placeholder,
)

_ALIGN_MAP = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}

_EMU_PER_PIXEL = 9525

# Elements that follow w:shd inside w:pPr (CT_PPr sequence).
_PPR_AFTER_SHD = (
    "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN",
    "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap",
    "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr",
    "w:pPrChange",
)
_PPR_AFTER_PBDR = ("w:shd",) + _PPR_AFTER_SHD

_STYLE_NAMES = {
    "Normal": "Normal",
    **{f"Heading{level}": f"Heading {level}" for level in range(1, 7)},
}


# ---------------------------------------------------------------------------
# OOXML helpers
# ---------------------------------------------------------------------------

def _shading_element(fill: str):
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    return shd


def _borders_element(tag: str, borders: Borders):
    container = OxmlElement(tag)
    for side in ("top", "left", "bottom", "right"):
        border = getattr(borders, side)
        if border is None:
            continue
        el = OxmlElement(f"w:{side}")
        el.set(qn("w:val"), border.style.value)
        el.set(qn("w:sz"), str(border.size))
        el.set(qn("w:space"), str(border.space))
        el.set(qn("w:color"), border.color)
        container.append(el)
    return container


def _strip_theme_fonts(rpr) -> None:
    rfonts = rpr.find(qn("w:rFonts")) if rpr is not None else None
    if rfonts is None:
        return
    for attr in ("w:asciiTheme", "w:hAnsiTheme", "w:eastAsiaTheme", "w:cstheme"):
        rfonts.attrib.pop(qn(attr), None)


# ---------------------------------------------------------------------------
# DocxPackager
# ---------------------------------------------------------------------------

class DocxPackager:
    """Encode a :class:`DocumentModel` into DOCX bytes."""

    def __init__(self) -> None:
        self.document = None
        self._abstract_ids: dict[str, int] = {}
        self._num_ids: dict[str, int] = {}

    # ======================================================================
    # Public API
    # ======================================================================

    def encode(self, model: DocumentModel) -> bytes:
        """Return the DOCX file for *model* as bytes.

        Raises:
            PackagingError: If the model cannot be encoded.
        """
        try:
            self.document = Document()
            self._abstract_ids = {}
            self._num_ids = {}

            self._apply_core_properties(model)
            for style in model.styles:
                self._apply_style(style)
            for definition in model.numbering:
                abstract_id = self._add_numbering(definition)
                self._abstract_ids[definition.reference] = abstract_id
                self._num_ids[definition.reference] = self._add_num(abstract_id)

            for block in model.blocks:
                if isinstance(block, Table):
                    self._add_table(block)
                else:
                    self._fill_paragraph(self.document.add_paragraph(), block)

            buf = io.BytesIO()
            self.document.save(buf)
            return buf.getvalue()
        except PackagingError:
            raise
        except Exception as e:
            raise PackagingError(f"Failed to encode DOCX: {e!r}") from e
        finally:
            self.document = None

    # ======================================================================
    # Document-level definitions
    # ======================================================================

    def _apply_core_properties(self, model: DocumentModel) -> None:
        props = self.document.core_properties
        props.title = model.title
        props.author = model.creator
        props.last_modified_by = model.creator

    def _apply_style(self, style: ParagraphStyle) -> None:
        name = _STYLE_NAMES.get(style.id, style.name)
        styles = self.document.styles
        try:
            docx_style = styles[name]
        except KeyError:
            docx_style = styles.add_style(name, WD_STYLE_TYPE.PARAGRAPH)

        font = docx_style.font
        font.name = style.font
        font.size = Pt(style.size)
        font.color.rgb = RGBColor.from_string(style.color)
        font.bold = style.bold
        _strip_theme_fonts(docx_style.element.rPr)

        if style.based_on:
            docx_style.base_style = styles[_STYLE_NAMES.get(style.based_on, style.based_on)]
        if style.next_style:
            docx_style.next_paragraph_style = styles[_STYLE_NAMES.get(style.next_style, style.next_style)]
        if style.spacing is not None:
            docx_style.paragraph_format.space_before = Twips(style.spacing.before)
            docx_style.paragraph_format.space_after = Twips(style.spacing.after)

    def _add_numbering(self, definition: NumberingDefinition) -> int:
        numbering = self.document.part.numbering_part.element

        existing = [int(el.get(qn("w:abstractNumId"))) for el in numbering.findall(qn("w:abstractNum"))]
        abstract_id = max(existing, default=-1) + 1

        abstract = OxmlElement("w:abstractNum")
        abstract.set(qn("w:abstractNumId"), str(abstract_id))
        multi = OxmlElement("w:multiLevelType")
        multi.set(qn("w:val"), "hybridMultilevel")
        abstract.append(multi)

        for level in definition.levels:
            lvl = OxmlElement("w:lvl")
            lvl.set(qn("w:ilvl"), str(level.level))
            for tag, value in (
                ("w:start", str(level.start)),
                ("w:numFmt", level.format),
                ("w:lvlText", level.text),
                ("w:lvlJc", "left"),
            ):
                el = OxmlElement(tag)
                el.set(qn("w:val"), value)
                lvl.append(el)

            ppr = OxmlElement("w:pPr")
            ind = OxmlElement("w:ind")
            ind.set(qn("w:left"), str(level.indent_left))
            ind.set(qn("w:hanging"), str(level.hanging))
            ppr.append(ind)
            lvl.append(ppr)

            rpr = OxmlElement("w:rPr")
            fonts = OxmlElement("w:rFonts")
            fonts.set(qn("w:ascii"), level.font)
            fonts.set(qn("w:hAnsi"), level.font)
            rpr.append(fonts)
            color = OxmlElement("w:color")
            color.set(qn("w:val"), level.color)
            rpr.append(color)
            lvl.append(rpr)

            abstract.append(lvl)

        # abstractNum definitions must precede every w:num.
        first_num = numbering.find(qn("w:num"))
        if first_num is not None:
            first_num.addprevious(abstract)
        else:
            numbering.append(abstract)

        return abstract_id

    def _add_num(self, abstract_id: int, restart: NumberingRef | None = None) -> int:
        num = self.document.part.numbering_part.element.add_num(abstract_id)
        if restart is not None:
            override = num.add_lvlOverride(ilvl=restart.level)
            override.add_startOverride(restart.start)
        return num.numId

    def _num_id_for(self, ref: NumberingRef) -> int:
        """Return the w:num id for *ref*, opening a new instance when it restarts."""
        abstract_id = self._abstract_ids.get(ref.reference)
        if abstract_id is None:
            raise PackagingError(f"Unknown numbering reference {ref.reference!r}")
        if ref.start is not None:
            self._num_ids[ref.reference] = self._add_num(abstract_id, ref)
        return self._num_ids[ref.reference]

    # ======================================================================
    # Paragraphs
    # ======================================================================

    def _fill_paragraph(self, docx_par, para: Paragraph) -> None:
        if para.heading_level is not None:
            docx_par.style = self.document.styles[_STYLE_NAMES[f"Heading{para.heading_level}"]]

        ppr = docx_par._p.get_or_add_pPr()
        if para.numbering is not None:
            num_id = self._num_id_for(para.numbering)
            num_pr = ppr.get_or_add_numPr()
            num_pr.get_or_add_ilvl().val = para.numbering.level
            num_pr.get_or_add_numId().val = num_id
        if para.borders is not None and not para.borders.is_empty():
            ppr.insert_element_before(_borders_element("w:pBdr", para.borders), *_PPR_AFTER_PBDR)
        if para.shading is not None:
            ppr.insert_element_before(_shading_element(para.shading.fill), *_PPR_AFTER_SHD)

        fmt = docx_par.paragraph_format
        if para.spacing is not None:
            fmt.space_before = Twips(para.spacing.before)
            fmt.space_after = Twips(para.spacing.after)
        if para.indent is not None:
            fmt.left_indent = Twips(para.indent.left)
            if para.indent.right:
                fmt.right_indent = Twips(para.indent.right)
            if para.indent.hanging:
                fmt.first_line_indent = Twips(-para.indent.hanging)
        if para.alignment is not None:
            fmt.alignment = _ALIGN_MAP[para.alignment]

        for child in para.children:
            if isinstance(child, Run):
                self._apply_run(docx_par.add_run(), child)
            elif isinstance(child, Hyperlink):
                self._add_hyperlink(docx_par, child)
            elif isinstance(child, ImageRun):
                self._add_image(docx_par, child)

    def _apply_run(self, docx_run: DocxRun, run: Run) -> None:
        docx_run.text = run.text
        docx_run.bold = run.bold or None
        docx_run.italic = run.italic or None
        docx_run.underline = run.underline or None
        font = docx_run.font
        if run.strike:
            font.strike = True
        if run.font:
            font.name = run.font
        if run.size:
            font.size = Pt(run.size)
        if run.color:
            font.color.rgb = RGBColor.from_string(run.color)
        if run.shading is not None:
            docx_run._r.get_or_add_rPr().append(_shading_element(run.shading.fill))

    def _add_hyperlink(self, docx_par, link: Hyperlink) -> None:
        r_id = docx_par.part.relate_to(link.url, RT.HYPERLINK, is_external=True)
        hyperlink = OxmlElement("w:hyperlink")
        hyperlink.set(qn("r:id"), r_id)
        for child in link.children:
            r = OxmlElement("w:r")
            if isinstance(child, ImageRun):
                self._write_picture(DocxRun(r, docx_par), child)
            else:
                self._apply_run(DocxRun(r, docx_par), child)
            hyperlink.append(r)
        docx_par._p.append(hyperlink)

    def _add_image(self, docx_par, image: ImageRun) -> None:
        self._write_picture(docx_par.add_run(), image)

    def _write_picture(self, docx_run: DocxRun, image: ImageRun) -> None:
        try:
            docx_run.add_picture(
                io.BytesIO(image.data),
                width=Emu(image.width * _EMU_PER_PIXEL),
                height=Emu(image.height * _EMU_PER_PIXEL),
            )
        except IMAGE_ERRORS as e:
            logger.warning(f"Unusable image data for {image.alt or 'image'!r} ({e!r}); using placeholder")
            self._apply_run(
                docx_run,
                Run(text=image_placeholder(image.alt), italic=True, color=PLACEHOLDER_COLOR),
            )

    # ======================================================================
    # Tables
    # ======================================================================

    def _add_table(self, table: Table) -> None:
        num_cols = max((len(row.cells) for row in table.rows), default=0)
        if not table.rows or num_cols == 0:
            return

        docx_table = self.document.add_table(rows=len(table.rows), cols=num_cols)
        tbl_w = docx_table._tbl.tblPr.find(qn("w:tblW"))
        if tbl_w is not None:
            tbl_w.set(qn("w:type"), "pct")
            tbl_w.set(qn("w:w"), str(int(round(table.width_percent * 50))))

        for row, docx_row in zip(table.rows, docx_table.rows):
            for cell, docx_cell in zip(row.cells, docx_row.cells):
                tc_pr = docx_cell._tc.get_or_add_tcPr()
                tc_w = tc_pr.get_or_add_tcW()
                tc_w.set(qn("w:type"), "pct")
                tc_w.set(qn("w:w"), str(int(round(cell.width_percent * 50))))
                if cell.borders is not None and not cell.borders.is_empty():
                    tc_pr.append(_borders_element("w:tcBorders", cell.borders))
                if cell.shading is not None:
                    tc_pr.append(_shading_element(cell.shading.fill))

                for idx, para in enumerate(cell.paragraphs):
                    docx_par = docx_cell.paragraphs[0] if idx == 0 else docx_cell.add_paragraph()
                    self._fill_paragraph(docx_par, para)


def encode(model: DocumentModel) -> bytes:
    """Encode *model* into DOCX bytes (see :meth:`DocxPackager.encode`)."""
    return DocxPackager().encode(model)

