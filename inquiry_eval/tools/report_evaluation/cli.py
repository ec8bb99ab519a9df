#!/usr/bin/env python3
"""Command-line interface for evaluating one student report."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inquiry_eval.libs.config_loader import load_default_configs
from .aggregation import EvaluationSummary, aggregate, bucket_for
from .errors import EvaluationError
from .evaluator import ReportEvaluator, parse_evaluation
from .models import EvaluationResult
from .rubric import DEFAULT_RUBRIC

LOG = logging.getLogger(__name__)

console = Console()

BUCKET_STYLES = {
    'outstanding': 'bold magenta',
    'excellent': 'bold blue',
    'good': 'cyan',
    'fair': 'yellow',
    'weak': 'red',
}


def read_report_text(path: str) -> str:
    """Read the report from a file, or from stdin when path is '-'."""
    if path == '-':
        return sys.stdin.read()
    return Path(path).read_text(encoding='utf-8')


def print_summary(result: EvaluationResult, summary: EvaluationSummary, detailed: bool = False) -> None:
    """Print the evaluation as rich tables."""
    console.print(f"\n[bold cyan]{escape(result.student_name)}[/bold cyan] - {escape(result.tagline)}")
    console.print("=" * 60)

    overview = Table(title="핵심 역량 분석")
    overview.add_column("Category")
    overview.add_column("Score", justify="right")
    overview.add_column("Average", justify="right")
    for category in summary.categories:
        overview.add_row(
            f"{category.category.value}. {category.label}",
            f"{category.total_score}/{category.max_score}",
            f"{category.average:.1f}",
        )
    overview.add_row(
        "[bold]종합[/bold]",
        f"[bold]{summary.total_score}/{summary.max_score}[/bold]",
        f"[bold]{summary.total_average:.1f}[/bold]",
    )
    console.print(overview)

    for category in summary.categories:
        table = Table(title=f"{category.category.value}. {category.label} ({category.max_item_score}점 만점 항목)")
        table.add_column("Item")
        table.add_column("Score", justify="right")
        if detailed:
            table.add_column("Justification")
        for item in category.items:
            style = BUCKET_STYLES[bucket_for(item.score, category.max_item_score).value]
            row = [item.label, f"[{style}]{item.score}[/{style}]"]
            if detailed:
                row.append(escape(item.justification))
            table.add_row(*row)
        console.print(table)

    console.print(f"\n[yellow][핵심 역량][/yellow] {escape(result.core_competency)}")
    console.print(f"[yellow][주요 강점][/yellow] {escape(result.key_strengths)}")
    console.print(f"[yellow][보완점 및 제언][/yellow] {escape(result.suggestions)}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the evaluate-report command."""
    parser = argparse.ArgumentParser(
        description='Evaluate a student activity record for inquiry competency using an LLM',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Evaluate a report and print the summary
  evaluate-report report.txt

  # Read the report from stdin and print the evaluation as JSON
  cat report.txt | evaluate-report - --json

  # Show justifications and export a PDF
  evaluate-report report.txt --detailed --pdf report.pdf

  # Re-render a previously printed JSON evaluation without calling the LLM
  evaluate-report --from-json evaluation.json --pdf report.pdf
        """
    )
    parser.add_argument(
        'report',
        nargs='?',
        help="Path to the report text file ('-' for stdin)"
    )
    parser.add_argument(
        '--from-json',
        type=Path,
        default=None,
        help='Render an evaluation JSON document instead of calling the LLM'
    )
    parser.add_argument(
        '--config', '-c',
        action='append',
        default=[],
        help='Extra YAML config file merged over config/default.yaml and config/local.yaml'
    )
    parser.add_argument(
        '--model', '-m',
        type=str,
        default=None,
        help='Model to use (overrides config value)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the evaluation as JSON instead of tables'
    )
    parser.add_argument(
        '--detailed', '-d',
        action='store_true',
        help='Include justifications (evaluator view)'
    )
    parser.add_argument(
        '--pdf',
        type=Path,
        default=None,
        help='Export the report dashboard to this PDF file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.report is None and args.from_json is None:
        parser.error("either a report path or --from-json is required")

    try:
        if args.from_json is not None:
            result = parse_evaluation(args.from_json.read_text(encoding='utf-8'), DEFAULT_RUBRIC)
        else:
            configs = load_default_configs(*args.config)
            evaluator = ReportEvaluator(configs=configs, model=args.model)
            result = evaluator.evaluate(read_report_text(args.report))
    except (EvaluationError, OSError) as e:
        LOG.error(f"Evaluation failed: {e}")
        return 1
    except ValueError as e:
        # ConfigurationError or an unreadable config file
        LOG.error(f"Configuration error: {e}")
        return 2

    if args.json:
        print(json.dumps(result.to_wire_dict(), ensure_ascii=False, indent=2))
    else:
        print_summary(result, aggregate(result, DEFAULT_RUBRIC), detailed=args.detailed)

    if args.pdf is not None:
        from inquiry_eval.tools.report_dashboard.pdf_export import export_pdf

        args.pdf.write_bytes(export_pdf(result, DEFAULT_RUBRIC))
        LOG.info(f"PDF saved to: {args.pdf}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
