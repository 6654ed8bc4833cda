"""
Command line entry point: flatten a JSON list of text boxes into a PDF.
"""
import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional, Sequence

from .config import load_config
from .core.annotations import Annotation, AnnotationManager
from .core.document import DocumentSession
from .core.errors import ExportError, LoadError
from .core.export import PDFExporter
from .utils import LoggingConfig, get_log_dir

logger = logging.getLogger(__name__)


def read_annotations(path: str) -> List[Annotation]:
    """
    Read annotations in wire form.

    The file holds either a list of annotation objects or an object with an
    ``annotations`` list.

    Raises:
        ValueError: If the file is not valid annotation JSON
    """
    with open(path, 'r', encoding='utf-8') as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        data = data.get('annotations')
    if not isinstance(data, list):
        raise ValueError("expected a list of annotations")

    annotations = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"annotation {index} is not an object")
        try:
            annotations.append(Annotation.from_dict(item))
        except (KeyError, ValueError) as e:
            raise ValueError(f"annotation {index}: {e}") from e
    return annotations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='pdfoverlay',
        description="Draw text boxes onto a PDF and write a flattened copy.")
    parser.add_argument('pdf', help="source PDF file")
    parser.add_argument('annotations', help="JSON file with the text boxes")
    parser.add_argument('-o', '--output',
                        help="output file (default: <name>_annotated.pdf next to the source)")
    parser.add_argument('--exact-alignment', action='store_true',
                        help="center and right-align text using font metrics")
    parser.add_argument('--config', help="settings file to use instead of the user settings")
    parser.add_argument('-v', '--verbose', action='store_true', help="debug logging")
    parser.add_argument('--log-file', action='store_true',
                        help="also write a log file in the per-user log directory")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.exact_alignment:
        config.exact_alignment = True
    log_dir = get_log_dir(create=False) if args.log_file else None
    LoggingConfig.setup_logging(log_dir, level="DEBUG" if args.verbose else config.log_level)

    try:
        with open(args.pdf, 'rb') as f:
            data = f.read()
        annotations = read_annotations(args.annotations)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    manager = AnnotationManager(config)
    session = DocumentSession(manager, config=config)
    try:
        session.load(data, os.path.basename(args.pdf))
    except LoadError as e:
        print(f"error: cannot load {args.pdf}: {e}", file=sys.stderr)
        return 1

    for annotation in annotations:
        manager.add(annotation)

    output = args.output or os.path.join(os.path.dirname(os.path.abspath(args.pdf)),
                                         session.export_file_name)
    try:
        result = PDFExporter(config).export(manager.committed, session.source_bytes(),
                                            session.file_name)
        with open(output, 'wb') as f:
            f.write(result.data)
    except (ExportError, OSError) as e:
        print(f"error: export failed: {e}", file=sys.stderr)
        return 1

    logger.info("Wrote %d annotations to %s", len(manager.committed), output)
    print(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
