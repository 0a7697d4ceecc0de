#!/usr/bin/env python3
"""LogicMonitor Instance Toggle CLI.

Enables (or disables) alerting and monitoring on the instances of one or
more modules applied to a single device.

Architecture:
    - LMClient is the shared HTTP layer; every request is LMv1-signed
    - LMDeviceDatasourceAPI and DatasourceFieldMapper implement the ports
    - ToggleInstancesWorkflow drives resolution and mutation

Environment Variables Required:
    - LM_ACCESS_ID: API token access id
    - LM_ACCESS_KEY: API token access key (never accepted on the command line)
    - LM_ACCOUNT_NAME: Portal account name

Example Usage:
    $ lmtoggle --device-id 42 --module-name snmp64_if-
    $ lmtoggle --device-id 42 --module-id 1234 --filter 'description!~"uplink"'
    $ lmtoggle --device '{"id": 42, "displayName": "core-sw1"}' --module-name Ping --alerting-only
    $ lmtoggle --device-id 42 --module-name Ping --disable --dry-run

Exit status is 0 when every attempted update succeeded (or nothing matched)
and 1 otherwise.
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from .api.client import LMClient
from .api.error_sanitizer import sanitize_error_message
from .api.exceptions import LMError
from .config import LOG_SINKS, LMSettings
from .instances.adapters import DatasourceFieldMapper, LMDeviceDatasourceAPI
from .instances.domain import ToggleAction
from .instances.use_cases import ToggleInstancesWorkflow, ToggleRequest
from .logging_config import PACKAGE_LOGGER, configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lmtoggle",
        description="Enable or disable alerting/monitoring on LogicMonitor module instances",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lmtoggle --device-id 42 --module-name snmp64_if-
  lmtoggle --device-id 42 --module-id 1234 --filter 'description!~"uplink"'
  lmtoggle --device-id 42 --module-name Ping --alerting-only
  lmtoggle --device-id 42 --module-name Ping --disable --dry-run
        """
    )

    # Portal
    portal_group = parser.add_argument_group("Portal")
    portal_group.add_argument(
        "--account",
        metavar="NAME",
        help="Portal account name (default: $LM_ACCOUNT_NAME)"
    )
    portal_group.add_argument(
        "--access-id",
        metavar="ID",
        help="API token access id (default: $LM_ACCESS_ID)"
    )
    portal_group.add_argument(
        "--domain",
        metavar="DOMAIN",
        help="Portal domain (default: $LM_DOMAIN or logicmonitor.com)"
    )

    # Device
    device_group = parser.add_argument_group("Device")
    device_choice = device_group.add_mutually_exclusive_group(required=True)
    device_choice.add_argument(
        "--device-id",
        type=int,
        metavar="ID",
        help="Numeric device id"
    )
    device_choice.add_argument(
        "--device",
        type=str,
        metavar="JSON",
        help='Device record as JSON, e.g. \'{"id": 42, "displayName": "sw1"}\''
    )

    # Module selection
    module_group = parser.add_argument_group("Module Selection")
    module_group.add_argument(
        "--module-name",
        action="append",
        default=[],
        metavar="NAME",
        help="Datasource name of an applied module (repeatable)"
    )
    module_group.add_argument(
        "--module-id",
        action="append",
        type=int,
        default=[],
        metavar="ID",
        help="Device-scoped applied-module id (repeatable)"
    )
    module_group.add_argument(
        "--filter",
        metavar="EXPR",
        help='Instance filter, e.g. \'description!~"uplink"\''
    )

    # Update options
    update_group = parser.add_argument_group("Update Options")
    update_group.add_argument(
        "--alerting-only",
        action="store_true",
        help="Only change disableAlerting, leave monitoring untouched"
    )
    update_group.add_argument(
        "--disable",
        action="store_true",
        help="Disable instead of enable"
    )
    update_group.add_argument(
        "--batch-size",
        type=int,
        metavar="N",
        help="Page size for the applied-module listing (default: $LM_PAGE_SIZE or 1000)"
    )
    update_group.add_argument(
        "--dry-run",
        action="store_true",
        help="List matching instances without updating them"
    )

    # Logging
    log_group = parser.add_argument_group("Logging")
    log_group.add_argument(
        "--log-sink",
        choices=LOG_SINKS,
        help="Where log lines go (default: $LM_LOG_SINK or console)"
    )
    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        help="Log file path for --log-sink file"
    )
    log_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level"
    )

    return parser


def build_request(args: argparse.Namespace, settings: LMSettings) -> ToggleRequest:
    """Translate parsed arguments into a ToggleRequest.

    A malformed --device value is passed through as-is so the workflow
    reports it as invalid input.
    """
    device = None
    if args.device is not None:
        try:
            device = json.loads(args.device)
        except json.JSONDecodeError:
            device = args.device

    return ToggleRequest(
        device=device,
        device_id=args.device_id,
        module_names=list(args.module_name),
        module_ids=list(args.module_id),
        filter_expr=args.filter,
        alerting_only=args.alerting_only,
        action=ToggleAction.DISABLE if args.disable else ToggleAction.ENABLE,
        page_size=args.batch_size if args.batch_size is not None else settings.page_size,
        dry_run=args.dry_run,
    )


async def run_toggle(settings: LMSettings, request: ToggleRequest) -> int:
    """Run the workflow against the portal and return the exit status."""
    credentials = settings.credentials()
    workflow_logger = logging.getLogger(PACKAGE_LOGGER)

    async with LMClient(
        credentials,
        domain=settings.domain,
        timeout=settings.timeout_seconds,
    ) as client:
        workflow = ToggleInstancesWorkflow(
            api=LMDeviceDatasourceAPI(client),
            mapper=DatasourceFieldMapper(),
            logger=workflow_logger,
        )
        result = await workflow.run(request)

    return result.exit_code


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LMSettings(
            access_id=args.access_id,
            account_name=args.account,
            domain=args.domain,
            log_sink=args.log_sink,
            log_file=args.log_file,
            log_level="DEBUG" if args.verbose else None,
        )
    except LMError as e:
        print(f"[lmtoggle] Configuration error: {e.message}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_sink, settings.log_file, settings.log_level)
    logger.debug(f"Settings: {settings}")

    request = build_request(args, settings)

    try:
        exit_code = asyncio.run(run_toggle(settings, request))
    except LMError as e:
        logger.error(sanitize_error_message(str(e), "Toggle failed"))
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
