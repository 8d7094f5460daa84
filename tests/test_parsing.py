import io

from docx import Document

from talentmatch.helpers.parsing import DEFAULT_TITLE, ERROR_TITLE, extract_document, guess_title


def make_docx(*paragraphs):
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


class TestExtractDocument:
    """Résumé text extraction"""

    def test_txt_with_title(self):
        data = b"Jane Doe\nSenior Frontend Developer\n\nReact, TypeScript"

        document = extract_document(data, "jane.txt")

        assert "React, TypeScript" in document.text
        assert document.title_guess == "Senior Frontend Developer"

    def test_txt_without_title(self):
        document = extract_document(b"Gardener with ten years of experience", "cv.TXT")

        assert document.title_guess == DEFAULT_TITLE

    def test_docx(self):
        data = make_docx("John Smith", "Backend Engineer", "Python, Django")

        document = extract_document(data, "john.docx")

        assert "Python, Django" in document.text
        assert document.title_guess == "Backend Engineer"

    def test_corrupt_pdf_does_not_raise(self):
        document = extract_document(b"not really a pdf", "resume.pdf")

        assert document.text.startswith("Error processing file:")
        assert document.title_guess == ERROR_TITLE

    def test_unsupported_extension(self):
        document = extract_document(b"data", "resume.odt")

        assert "Unsupported file type" in document.text
        assert document.title_guess == ERROR_TITLE

    def test_title_only_searched_in_first_lines(self):
        text = "\n".join(["filler"] * 10 + ["Lead Software Architect"])
        assert guess_title(text) is None
