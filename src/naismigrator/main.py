"""
Command-line interface for migrating naisd manifests to naiserator Applications.

Reads a nais.yaml from stdin or a file, optionally enriches it with resources
from Fasit and writes the Application resource to stdout.
"""

import argparse
import logging
import sys
from typing import NoReturn

from naismigrator.config import (
    DEFAULT_FASIT_URL,
    STDIN,
    EnvironmentClass,
    MigratorConfig,
    Zone,
)
from naismigrator.core.pipeline import MigrationRunner
from naismigrator.exceptions import (
    ConfigurationError,
    FasitError,
    FasitNotFoundError,
    ManifestDecodeError,
    ManifestEncodeError,
    SecretResolutionError,
)

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Logs go to stderr; stdout is reserved for the generated document.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Include timestamps and logger names if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Override existing configuration
    )

    if not debug:
        # Keep connection pool chatter out of the output
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nais-migrator",
        description="Convert a naisd manifest (nais.yaml) to a naiserator Application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert without Fasit lookups
  nais-migrator --application myapp --input nais.yaml > app.yaml

  # Resolve Fasit resources for q1 in SBS
  nais-migrator --application myapp --zone sbs --fasit-environment q1 \\
    --fasit-url https://fasit.example --fasit-username user \\
    --fasit-password secret < nais.yaml
        """,
    )

    parser.add_argument(
        "--application", default="myapplication", help="application name"
    )
    parser.add_argument(
        "--namespace", default="default", help="Kubernetes namespace"
    )
    parser.add_argument(
        "--zone",
        default=Zone.FSS.value,
        help=f"zone ({', '.join(z.value for z in Zone)})",
    )
    parser.add_argument("--fasit-url", default=DEFAULT_FASIT_URL, help="Fasit url")
    parser.add_argument(
        "--fasit-username",
        default="",
        help="Fasit username; leave blank to disable Fasit",
    )
    parser.add_argument("--fasit-password", default="", help="Fasit password")
    parser.add_argument(
        "--fasit-environment",
        default=EnvironmentClass.P.value,
        help="Fasit environment ([ptqu][0-9]*)",
    )
    parser.add_argument(
        "--fasit-timeout",
        type=float,
        default=None,
        help="Fasit request timeout in seconds (default: no timeout)",
    )
    parser.add_argument(
        "--input", default=STDIN, help="Input file, use '-' for STDIN"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Include timestamps and logger names in log output",
    )

    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments.
    """
    return build_parser().parse_args(argv)


def run_migration(args: argparse.Namespace) -> NoReturn:
    """Execute the migration and exit.

    Raises:
        SystemExit: Always exits with appropriate code (0 for success, >0 for errors).
    """
    configure_logging(args.debug, args.verbose)

    try:
        config = MigratorConfig.from_arguments(args)
        MigrationRunner(config).execute()
        sys.exit(0)

    except ConfigurationError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except ManifestDecodeError as e:
        logger.error(f"Input error: {e}")
        sys.exit(2)
    except FasitNotFoundError as e:
        logger.error(f"fetch fasit resources: {e}")
        sys.exit(3)
    except SecretResolutionError as e:
        logger.error(f"fetch fasit resources: {e}")
        sys.exit(5)
    except FasitError as e:
        logger.error(f"fetch fasit resources: {e}")
        sys.exit(4)
    except ManifestEncodeError as e:
        logger.error(f"Output error: {e}")
        sys.exit(6)
    except (PermissionError, FileNotFoundError, OSError) as e:
        logger.error(f"File system error: {e}")
        sys.exit(8)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        sys.exit(9)


def main(argv: list[str] | None = None) -> NoReturn:
    run_migration(parse_arguments(argv))


if __name__ == "__main__":
    main()
