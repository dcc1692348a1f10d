import argparse
import sys
from pathlib import Path

from converter.error_messages import build_archive_error_message, build_conversion_summary
from converter.exceptions import ProcessingError
from converter.models import QuestionKind


KIND_OPTIONS = {
    "mc": QuestionKind.MULTIPLE_CHOICE,
    "ma": QuestionKind.MULTIPLE_ANSWER,
    "tf": QuestionKind.TRUE_FALSE,
    "essay": QuestionKind.ESSAY,
    "fib": QuestionKind.FILL_IN_BLANK,
    "mat": QuestionKind.MATCHING,
    "num": QuestionKind.NUMERIC,
}


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Convert pasted questions into Blackboard tab-delimited or QTI 2.1 files."
    )
    ap.add_argument("--tab", metavar="OUT", help="Write tab-delimited rows to OUT")
    ap.add_argument("--qti", metavar="OUT", help="Write a QTI 2.1 ZIP package to OUT")
    for option, kind in KIND_OPTIONS.items():
        ap.add_argument(f"--{option}", metavar="FILE", help=f"{kind.label} questions")
    return ap


def run_headless(args: argparse.Namespace) -> int:
    from converter.service import ConversionService

    buffers: dict[QuestionKind, str] = {}
    for option, kind in KIND_OPTIONS.items():
        path = getattr(args, option)
        if path:
            buffers[kind] = Path(path).read_text(encoding="utf-8")

    service = ConversionService()
    exit_code = 0

    if args.tab:
        result = service.convert(buffers)
        Path(args.tab).write_text(result.rows, encoding="utf-8")
        print(build_conversion_summary(result))
        if result.has_failures:
            exit_code = 1

    if args.qti:
        try:
            archive = service.build_archive(buffers)
        except ProcessingError as exc:
            print(build_archive_error_message(str(exc)), file=sys.stderr)
            return 2
        Path(args.qti).write_bytes(archive.data)
        print(f"Exported {archive.item_count} question(s) to {args.qti}")
        for failure in archive.failures:
            print(f"- {failure.describe()}", file=sys.stderr)
        if archive.failures:
            exit_code = 1

    return exit_code


def main():
    args = build_arg_parser().parse_args()
    if args.tab or args.qti:
        sys.exit(run_headless(args))

    from PyQt5.QtWidgets import QApplication
    from gui.main_window import MainWindow

    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())

if __name__ == "__main__":
    main()
