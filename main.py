#!/usr/bin/env python3
"""Bank and credit card statement analyzer.

Serves the HTTP API by default, and can also analyze a single PDF offline
or run the temp file sweeper.

Usage:
    python main.py [--serve]

    python main.py --pdf-file <path_to_pdf> [--password <password>] [--type bank|credit] [--output-dir <dir>]

    python main.py --sweep     # Remove expired session files once

    python main.py --sweeper   # Run the Celery worker with the sweep schedule
"""

import argparse
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from statement_analyzer.analysis.client import GeminiAnalysisClient, is_fallback_analysis
from statement_analyzer.analysis.document import DocumentType, parse_document_type
from statement_analyzer.analysis.prompts import build_prompt
from statement_analyzer.config.settings import Settings
from statement_analyzer.excel_generator.converter import ReportRenderer, generate_report_filename
from statement_analyzer.pdf_processor.decryptor import PDFGatekeeper
from statement_analyzer.pdf_processor.extractor import PDFTextExtractor
from statement_analyzer.utils.exceptions import StatementAnalyzerError, ValidationError
from statement_analyzer.utils.logger import get_logger, setup_logger

DEFAULT_REPORTS_DIRNAME = "reports"


class StatementProcessor:
    """Runs the full pipeline on a local PDF file."""

    def __init__(self, settings: Settings, analysis_client: Optional[GeminiAnalysisClient] = None) -> None:
        """Initialize the processor."""
        self.settings = settings
        self.logger = get_logger(__name__)
        self.gatekeeper = PDFGatekeeper()
        self.extractor = PDFTextExtractor()
        self.analysis_client = analysis_client or GeminiAnalysisClient(settings)
        self.renderer = ReportRenderer(settings)

    def process_single_pdf(
        self,
        pdf_path: str,
        password: Optional[str] = None,
        document_type: DocumentType = DocumentType.CREDIT,
        output_dir: Optional[str] = None
    ) -> Optional[str]:
        """Analyze a single PDF file and write the Excel report.

        Args:
            pdf_path: Path to the PDF file.
            password: Optional password for an encrypted PDF.
            document_type: Statement kind, selects prompt and sheet layout.
            output_dir: Directory for the report.

        Returns:
            Path to the generated workbook or None if processing failed.
        """
        try:
            self.logger.info(f"Processing PDF: {pdf_path}")

            if not os.path.exists(pdf_path):
                self.logger.error(f"PDF file not found: {pdf_path}")
                return None

            with open(pdf_path, "rb") as f:
                data = f.read()

            check = self.gatekeeper.check_password(data)
            if check.needs_password:
                if not password:
                    self.logger.error(f"PDF is password protected, use --password: {pdf_path}")
                    return None
                data = self.gatekeeper.unlock(data, password)

            text = self.extractor.extract_text(data)
            self.logger.info(f"Extracted {len(text)} characters")

            prompt = build_prompt(
                document_type,
                text,
                max_chars=self.settings.max_prompt_chars,
                head_chars=self.settings.prompt_head_chars,
                tail_chars=self.settings.prompt_tail_chars,
            )
            analysis = self.analysis_client.analyze(prompt, document_type)
            if is_fallback_analysis(analysis):
                self.logger.warning("Model response could not be parsed; writing fallback report")

            output_dir = output_dir or os.path.join(os.getcwd(), DEFAULT_REPORTS_DIRNAME)
            os.makedirs(output_dir, exist_ok=True)
            output_path = os.path.join(output_dir, generate_report_filename())

            with open(output_path, "wb") as f:
                f.write(self.renderer.render(analysis, document_type))

            self.logger.info(f"Excel report created: {output_path}")
            return output_path

        except StatementAnalyzerError as e:
            self.logger.error(f"Processing failed for {pdf_path}: {str(e)}")
            return None


def run_server(settings: Settings) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "statement_analyzer.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.get_log_level().lower(),
    )


def run_sweep(settings: Settings) -> int:
    """Sweep the temp directory once."""
    from statement_analyzer.storage.temp_store import DiskTempFileStore

    store = DiskTempFileStore(settings.temp_dir, settings.session_max_age_seconds)
    report = store.sweep()
    print(f"Removed {len(report.removed)} expired files from {settings.temp_dir}")
    for warning in report.warnings:
        print(f"  warning: {warning}")
    return 0 if report.ok else 1


def start_sweeper() -> None:
    """Start a Celery worker with embedded beat for the sweep schedule."""
    # Import here so the broker is only configured when needed
    from statement_analyzer.tasks.celery_app import celery_app

    celery_app.start(["worker", "--beat", "--loglevel=info", "--queues=maintenance"])


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="Analyze bank and credit card statements and generate Excel reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Serve the HTTP API
    python main.py

    # Analyze a password protected credit card statement
    python main.py --pdf-file statement.pdf --password mypassword

    # Analyze a bank statement
    python main.py --pdf-file statement.pdf --type bank --output-dir ./reports

    # Remove expired uploads
    python main.py --sweep
        """
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        '--serve',
        action='store_true',
        help='Serve the HTTP API (default)'
    )
    group.add_argument(
        '--pdf-file',
        type=str,
        help='Path to a single PDF file to analyze'
    )
    group.add_argument(
        '--sweep',
        action='store_true',
        help='Remove expired session files and exit'
    )
    group.add_argument(
        '--sweeper',
        action='store_true',
        help='Run the Celery worker that sweeps session files on a schedule'
    )

    parser.add_argument(
        '--password',
        type=str,
        help='Password for an encrypted PDF (only used with --pdf-file)'
    )
    parser.add_argument(
        '--type',
        dest='document_type',
        choices=[t.value for t in DocumentType],
        default=None,
        help='Statement type (default: credit)'
    )
    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help=f'Output directory for reports (default: ./{DEFAULT_REPORTS_DIRNAME})'
    )

    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    try:
        load_dotenv()
        args = parse_arguments(argv)

        settings = Settings.from_env()
        settings.require_valid()
        settings.create_directories()
        setup_logger(
            "",
            log_file="statement_analyzer.log",
            level=settings.get_log_level(),
            logs_dir=settings.logs_dir,
            log_format=settings.log_format,
        )

        if args.pdf_file:
            processor = StatementProcessor(settings)
            output_path = processor.process_single_pdf(
                pdf_path=args.pdf_file,
                password=args.password,
                document_type=parse_document_type(args.document_type),
                output_dir=args.output_dir
            )

            if output_path:
                print(f"Success! Report created: {output_path}")
                return 0
            print("Error: Processing failed. Check logs for details.")
            return 1

        if args.sweep:
            return run_sweep(settings)

        if args.sweeper:
            start_sweeper()
            return 0

        run_server(settings)
        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130
    except ValidationError as e:
        print(f"Configuration error: {str(e)}")
        return 1
    except Exception as e:
        print(f"Unexpected error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
