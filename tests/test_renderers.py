import base64
import datetime
import io
import struct
import zlib

from laudovet.config import ClinicSettings
from laudovet.records import Exam, ExamImage, OrganEntry, Patient, ReferenceValue, Structure
from laudovet.report.ledger import Measurement


def _document(png_data_url=None, lang="pt", clinic=None):
    from laudovet.report.compiler import ReportContext, compile_report

    images = []
    if png_data_url is not None:
        images = [
            ExamImage(filename="a.png", data=png_data_url(400, 200), organ="Baço"),
            ExamImage(filename="b.png", data=png_data_url(200, 200)),
            ExamImage(filename="c.png", data=png_data_url(300, 100), organ="Fígado"),
        ]
    exam = Exam(
        id=3,
        patient_id=1,
        exam_date=datetime.datetime(2024, 5, 2, 9, 5),
        organs_data=[
            OrganEntry(
                organ_name="Fígado",
                report_text="Lobo **direito** mede {MEDIDA}.\n*Sem* nódulos.",
                measurements=[Measurement(key="m_1", value="6.4")],
            ),
            OrganEntry(organ_name="Baço", measurements=[Measurement(key="m_2", value="1.0")]),
        ],
        images=images,
    )
    ctx = ReportContext(
        patient=Patient(id=1, name="Rex", species="dog", breed="Labrador", owner_name="Ana"),
        exam=exam,
        clinic=clinic or ClinicSettings(clinic_name="Clínica Vet"),
        structures=[Structure(label="Fígado"), Structure(label="Baço")],
        reference_values=[ReferenceValue(organ="Fígado", species="dog", min_value=5, max_value=7)],
        language=lang,
        today=datetime.date(2024, 5, 2),
    )
    return compile_report(ctx)


def _open_docx(content: bytes):
    import docx
    return docx.Document(io.BytesIO(content))


def test_docx_structure():
    from laudovet.report.docx_renderer import render_docx

    out = _open_docx(render_docx(_document()))
    texts = [p.text for p in out.paragraphs]

    assert "Paciente: Rex" in texts
    assert "Tutor: Ana • Raça: Labrador • Idade: Não informada" in texts
    assert "LAUDO" in texts
    assert "Fígado" in texts
    assert "Lobo direito mede 6.4 cm." in texts
    assert "Valor de referência: de 5 a 7 cm" in texts
    # Ledger-only structure omitted
    assert "Baço" not in texts
    assert out.sections[0].header.paragraphs[0].text == "Clínica Vet"
    assert len(out.tables) == 0


def test_docx_inline_styles():
    from laudovet.report.docx_renderer import render_docx

    out = _open_docx(render_docx(_document()))
    para = next(p for p in out.paragraphs if p.text.startswith("Lobo"))
    styled = {r.text: (bool(r.bold), bool(r.italic)) for r in para.runs}
    assert styled["direito"] == (True, False)
    assert styled["Lobo "] == (False, False)

    para = next(p for p in out.paragraphs if p.text == "Sem nódulos.")
    assert para.runs[0].italic


def test_docx_margins():
    from docx.shared import Mm

    from laudovet.report.docx_renderer import render_docx

    out = _open_docx(render_docx(_document()))
    assert abs(out.sections[0].top_margin - Mm(30)) < Mm(1)
    assert abs(out.sections[0].left_margin - Mm(15)) < Mm(1)


def test_docx_image_appendix(png_data_url):
    from laudovet.report.docx_renderer import render_docx

    content = render_docx(_document(png_data_url))
    out = _open_docx(content)

    assert len(out.tables) == 1
    table = out.tables[0]
    assert len(table.rows) == 2
    assert len(table.columns) == 2
    assert table.rows[0].cells[0].paragraphs[1].text == "Baço"
    assert table.rows[1].cells[0].paragraphs[1].text == "Fígado"
    assert len(out.inline_shapes) == 3
    assert b"w:br" in content or any("w:br" in p._p.xml for p in out.paragraphs)


def _png_header_only(width, height):
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    chunk = struct.pack(">I", len(ihdr)) + b"IHDR" + ihdr + struct.pack(">I", zlib.crc32(b"IHDR" + ihdr))
    return b"\x89PNG\r\n\x1a\n" + chunk


def test_docx_skips_damaged_images(png_data_url):
    from laudovet.report.docx_renderer import render_docx

    damaged = {
        (200, 200): b"\x89PNG\r\n\x1a\n\x00\x00",  # truncated after the signature
        (300, 100): _png_header_only(300, 100),  # IHDR but no image data
    }

    def make(width, height):
        if (width, height) in damaged:
            return "data:image/png;base64," + base64.b64encode(damaged[width, height]).decode("ascii")
        return png_data_url(width, height)

    doc = _document(make)
    assert len(doc.appendix.images) == 3

    out = _open_docx(render_docx(doc))
    assert "Lobo direito mede 6.4 cm." in [p.text for p in out.paragraphs]
    table = out.tables[0]
    assert len(table.rows) == 2
    # Captions stay even when the picture is dropped
    assert table.rows[0].cells[0].paragraphs[1].text == "Baço"
    assert table.rows[1].cells[0].paragraphs[1].text == "Fígado"
    assert len(out.inline_shapes) == 1


def test_docx_letterhead_in_header(png_data_url):
    from laudovet.report.docx_renderer import render_docx

    clinic = ClinicSettings(letterhead_data=png_data_url(1200, 200))
    out = _open_docx(render_docx(_document(clinic=clinic)))
    header = out.sections[0].header.paragraphs[0]
    assert header.text == ""
    assert "graphic" in header._p.xml


def test_print_view_content():
    from laudovet.report.print_view import render_print_view

    html = render_print_view(_document(lang="en"))
    assert "<strong>direito</strong>" in html
    assert "<em>Sem</em>" in html
    assert "Lobo <strong>direito</strong> mede 6.4 cm." in html
    assert "Reference value: 5 to 7 cm" in html
    assert ">Liver<" in html
    assert "Spleen" not in html
    assert "Clínica Vet" in html
    # Full patient block
    for label in ("Patient:", "Species:", "Breed:", "Age:", "Owner:", "Date:"):
        assert label in html
    assert "page-break-before" in html
    assert 'class="appendix"' not in html


def test_print_view_appendix_and_escaping(png_data_url):
    from laudovet.report.print_view import render_print_view

    doc = _document(png_data_url)
    html = render_print_view(doc)
    assert 'class="appendix"' in html
    assert html.count("data:image/png;base64,") == 3
    assert 'height="125"' in html


def test_print_view_escapes_free_text():
    from laudovet.report.compiler import ReportContext, compile_report
    from laudovet.report.print_view import render_print_view

    ctx = ReportContext(
        patient=Patient(name="<b>Rex</b>"),
        exam=Exam(id=1, patient_id=1, organs_data=[OrganEntry(organ_name="Fígado", report_text="<script>x</script>")]),
        clinic=ClinicSettings(),
        structures=[Structure(label="Fígado")],
        reference_values=[],
    )
    html = render_print_view(compile_report(ctx))
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html
    assert "&lt;b&gt;Rex&lt;/b&gt;" in html


def test_renderers_share_section_content(png_data_url):
    from laudovet.report.docx_renderer import render_docx
    from laudovet.report.markup import plain_text
    from laudovet.report.print_view import render_print_view

    doc = _document(png_data_url)
    docx_texts = [p.text for p in _open_docx(render_docx(doc)).paragraphs]
    html = render_print_view(doc)
    for sec in doc.sections:
        assert sec.heading in docx_texts
        assert f"<h3>{sec.heading}</h3>" in html
        for spans in sec.paragraphs:
            assert plain_text(spans) in docx_texts
