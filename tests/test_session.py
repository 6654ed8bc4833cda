"""Tests for the document session."""

import fitz
import pytest

from conftest import make_pdf
from pdfoverlay.core.document import DocumentSession, RenderTarget
from pdfoverlay.core.document.backend import parse_document
from pdfoverlay.core.errors import LoadError


def test_load_reports_pages_and_resets_view(session: DocumentSession, pdf_bytes) -> None:
    assert session.load(pdf_bytes, "report.pdf") == 3
    assert session.page_count == 3
    assert session.current_page == 1
    assert session.zoom == 1.0
    assert session.file_name == "report.pdf"
    assert session.page_size(3) == (595, 842)


def test_load_clears_annotations_and_history(session, manager, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    ann = manager.create(10, 10, 1)
    manager.select(ann.id)

    session.load(make_pdf(), "b.pdf")

    assert manager.annotations == ()
    assert manager.selected_id is None
    assert not manager.can_undo()


@pytest.mark.parametrize("data", [b"", b"not a pdf at all", b"%PDF-1.4\n%%EOF"])
def test_failed_load_keeps_previous_state(session, manager, pdf_bytes, data) -> None:
    session.load(pdf_bytes, "good.pdf")
    session.set_page(2)
    session.set_zoom(2.0)
    ann = manager.create(1, 2, 2)

    with pytest.raises(LoadError):
        session.load(data, "bad.pdf")

    assert session.file_name == "good.pdf"
    assert session.page_count == 3
    assert (session.current_page, session.zoom) == (2, 2.0)
    assert manager.annotations == (ann,)
    assert session.source_bytes() == pdf_bytes


def test_encrypted_document_is_rejected() -> None:
    doc = fitz.open()
    doc.new_page()
    data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
    doc.close()

    with pytest.raises(LoadError):
        parse_document(data)


def test_source_bytes_requires_document(session) -> None:
    with pytest.raises(LoadError):
        session.source_bytes()


def test_source_bytes_are_a_private_copy(session, pdf_bytes) -> None:
    buffer = bytearray(pdf_bytes)
    session.load(buffer, "a.pdf")
    buffer[:] = b"x" * len(buffer)
    assert session.source_bytes() == pdf_bytes


@pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (2, 2), (3, 3), (9, 3)])
def test_set_page_clamps(session, pdf_bytes, requested, expected) -> None:
    session.load(pdf_bytes, "a.pdf")
    assert session.set_page(requested) == expected


def test_page_navigation(session, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    assert session.next_page() == 2
    assert session.next_page() == 3
    assert session.next_page() == 3
    assert session.previous_page() == 2


def test_set_page_without_document(session) -> None:
    assert session.set_page(5) == 1


@pytest.mark.parametrize("requested, expected", [(0.1, 0.5), (1.5, 1.5), (4, 3.0)])
def test_set_zoom_clamps(session, requested, expected) -> None:
    assert session.set_zoom(requested) == expected


def test_zoom_steps(session) -> None:
    assert session.zoom_in() == 1.25
    assert session.zoom_out() == 1.0
    for _ in range(10):
        session.zoom_out()
    assert session.zoom == 0.5


def test_zoom_never_rewrites_annotations(session, manager, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    ann = manager.create(33.3, 71.7, 1)
    commits = len(manager.history.past)
    for factor in (0.5, 3.0, 1.3, 2.7, 0.9, 1.0):
        session.set_zoom(factor)
    assert manager.get(ann.id) == ann
    assert len(manager.history.past) == commits


def test_switching_page_keeps_annotation_pages(session, manager, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    first = manager.create(0, 0, session.current_page)
    session.set_page(2)
    second = manager.create(0, 0, session.current_page)
    session.set_page(1)

    assert manager.get_annotations_for_page(session.current_page) == [first]
    assert manager.get(first.id).page == 1
    assert manager.get(second.id).page == 2


def test_export_file_name(session, pdf_bytes) -> None:
    assert session.export_file_name == "document_annotated.pdf"
    session.load(pdf_bytes, "/tmp/dir/Quarterly Report.pdf")
    assert session.export_file_name == "Quarterly Report_annotated.pdf"


# -- render orchestration -------------------------------------------------

def test_load_starts_a_render(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    task = rasterizer.last
    assert task.started
    assert task.target == RenderTarget(session.generation, 1, 1.0)


def test_no_render_without_document(session, rasterizer) -> None:
    session.set_zoom(2.0)
    assert session.request_render() is None
    assert rasterizer.tasks == []


def test_new_target_cancels_running_render(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    first = rasterizer.last

    session.set_page(2)

    assert first.cancelled
    assert rasterizer.last.target.page == 2
    assert rasterizer.last.started


def test_duplicate_request_is_suppressed(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    count = len(rasterizer.tasks)

    assert session.request_render() is None
    assert len(rasterizer.tasks) == count
    assert not rasterizer.last.cancelled


def test_finished_render_can_be_repeated(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    rasterizer.last.running = False
    assert session.request_render() is not None
    assert len(rasterizer.tasks) == 2


def test_reload_never_matches_old_target(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    old = rasterizer.last
    session.load(pdf_bytes, "a.pdf")
    assert old.cancelled
    assert not session.is_current(old.target)
    assert session.is_current(rasterizer.last.target)


def test_render_listeners_see_task_before_start(session, rasterizer, pdf_bytes) -> None:
    seen = []
    session.add_render_listener(lambda task: seen.append(task.started))
    session.load(pdf_bytes, "a.pdf")
    assert seen == [False]


def test_cancel_render(session, rasterizer, pdf_bytes) -> None:
    session.load(pdf_bytes, "a.pdf")
    session.cancel_render()
    assert rasterizer.last.cancelled
