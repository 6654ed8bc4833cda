"""Tests for the background export worker."""

import os

import fitz

from pdfoverlay.core.annotations import Annotation
from pdfoverlay.core.export import ExportWorker


def _run(worker: ExportWorker):
    results = []
    worker.finished.connect(lambda ok, message: results.append((ok, message)))
    worker.run()
    return results


def test_writes_annotated_file(qapp, tmp_path, pdf_bytes) -> None:
    output = tmp_path / "out_annotated.pdf"
    annotation = Annotation(id="a", x=10, y=10, width=100, height=30, page=1, text="Saved")
    worker = ExportWorker(pdf_bytes, str(output), [annotation])
    counts = []
    worker.annotation_progress.connect(lambda done, total: counts.append((done, total)))

    results = _run(worker)

    assert results == [(True, "Annotations saved successfully to PDF!")]
    assert counts == [(1, 1)]
    with fitz.open(str(output)) as doc:
        assert "Saved" in doc[0].get_text()
    assert os.listdir(tmp_path) == ["out_annotated.pdf"]


def test_failure_leaves_no_file(qapp, tmp_path) -> None:
    output = tmp_path / "out.pdf"
    worker = ExportWorker(b"broken", str(output), [])

    results = _run(worker)

    assert len(results) == 1
    ok, message = results[0]
    assert not ok
    assert message.startswith("Error during export")
    assert os.listdir(tmp_path) == []


def test_failure_keeps_existing_file(qapp, tmp_path) -> None:
    output = tmp_path / "out.pdf"
    output.write_bytes(b"previous export")

    _run(ExportWorker(b"broken", str(output), []))

    assert output.read_bytes() == b"previous export"


def test_missing_directory_fails_cleanly(qapp, tmp_path, pdf_bytes) -> None:
    output = tmp_path / "missing" / "out.pdf"

    results = _run(ExportWorker(pdf_bytes, str(output), []))

    assert results[0][0] is False
    assert not output.exists()


def test_progress_messages(qapp, tmp_path, pdf_bytes) -> None:
    worker = ExportWorker(pdf_bytes, str(tmp_path / "out.pdf"), [])
    messages = []
    worker.progress.connect(messages.append)

    _run(worker)

    assert messages == ["Exporting annotations...", "Finalizing..."]
