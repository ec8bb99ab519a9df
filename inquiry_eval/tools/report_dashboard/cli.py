"""CLI for launching the report dashboard."""

import argparse
import logging
import sys
import webbrowser
from threading import Timer

from inquiry_eval.libs.config_loader import get_config, load_default_configs
from inquiry_eval.tools.report_evaluation.evaluator import ReportEvaluator
from .app import create_app, run_server
from .session import ReportSession

LOG = logging.getLogger(__name__)


def open_browser(url, delay=1.5):
    """Open browser after a delay."""
    def _open():
        webbrowser.open(url)
    Timer(delay, _open).start()


def main(argv=None):
    """Main CLI entry point for the report dashboard."""
    parser = argparse.ArgumentParser(
        description='Launch the web dashboard for evaluating student reports',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  # Launch the dashboard
  report-dashboard

  # Opens browser to http://localhost:5000
  # Paste a student record, review the scores, edit them and export a PDF
        """
    )

    parser.add_argument(
        '--config', '-c',
        action='append',
        default=[],
        help='Extra YAML config file merged over the defaults'
    )
    parser.add_argument(
        '--host',
        default=None,
        help='Host to bind to (default: dashboard.host or 127.0.0.1)'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=None,
        help='Port to bind to (default: dashboard.port or 5000)'
    )
    parser.add_argument(
        '--model', '-m',
        default=None,
        help='Model to use (overrides config value)'
    )
    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Do not automatically open browser'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Run in debug mode'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Credentials are validated here, before the server starts
    try:
        configs = load_default_configs(*args.config)
        evaluator = ReportEvaluator(configs=configs, model=args.model)
    except ValueError as e:
        LOG.error(f"Configuration error: {e}")
        return 2

    host = args.host or get_config("dashboard.host", configs, default='127.0.0.1')
    port = args.port or int(get_config("dashboard.port", configs, default=5000))

    LOG.info("Initializing report dashboard...")
    create_app(ReportSession(evaluator))

    url = f"http://{host}:{port}"
    if not args.no_browser:
        LOG.info(f"Opening browser at {url}")
        open_browser(url)
    else:
        LOG.info(f"Server will be available at {url}")

    LOG.info(f"Starting server on {host}:{port}")
    try:
        run_server(host=host, port=port, debug=args.debug)
    except KeyboardInterrupt:
        LOG.info("Server stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
