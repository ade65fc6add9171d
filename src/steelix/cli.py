"""Steelix CLI — command-line interface for the commission engine.

Usage:
    python -m steelix.cli compute --price 500000 --rate 5 --split 70
    python -m steelix.cli compute --price 500000 --rate 5 --split 70 \\
        --mode co_broking --co-broker-split 50 --upline agent_7 --upline-rate 10
    python -m steelix.cli agent-compute --price 500000 --rate 5 --tier advisor \\
        --upline agent_7 --upline-tier sales_leader
    python -m steelix.cli tiers
    python -m steelix.cli tier-progress --tier advisor --sales 1 --team 0
    python -m steelix.cli check-config
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from steelix.models.commission import (
    CommissionInput,
    RateKind,
    RepresentationMode,
    UplineInfo,
)
from steelix.policy.resolver import PolicyResolver, default_config_dir
from steelix.service import CommissionService, ServiceResult

logger = logging.getLogger(__name__)


def _make_service(config_dir: Path | None) -> CommissionService | None:
    """Build the service, or report a broken config and return None."""
    try:
        resolver = PolicyResolver.from_config_dir(config_dir or default_config_dir())
    except (OSError, ValueError) as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return None
    return CommissionService(resolver)


def _emit(result: ServiceResult) -> int:
    if result.success:
        print(json.dumps(result.data, indent=2, default=str))
        return 0
    print(f"Failed: {'; '.join(result.errors)}", file=sys.stderr)
    return 1


def cmd_compute(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    if service is None:
        return 1
    upline = None
    if args.upline:
        upline = UplineInfo(
            identity=args.upline,
            leadership_bonus_rate_percent=args.upline_rate,
            tier=args.upline_tier,
        )
    result = service.calculate(
        CommissionInput(
            property_price=args.price,
            rate_kind=args.rate_kind,
            rate_value=args.rate,
            representation_mode=args.mode,
            company_commission_split_percent=args.split,
            agent_tier=args.tier or "",
            co_broker_split_percent=args.co_broker_split,
            upline=upline,
        ),
        transaction_id=args.transaction,
    )
    return _emit(result)


def cmd_agent_compute(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    if service is None:
        return 1
    result = service.calculate_for_agent(
        property_price=args.price,
        rate_kind=args.rate_kind,
        rate_value=args.rate,
        representation_mode=args.mode,
        agent_tier=args.tier,
        co_broker_split_percent=args.co_broker_split,
        upline_id=args.upline,
        upline_tier=args.upline_tier,
        company_split_override=args.split,
        transaction_id=args.transaction,
    )
    return _emit(result)


def cmd_tiers(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    if service is None:
        return 1
    print(json.dumps(service.tier_overview(), indent=2))
    return 0


def cmd_tier_progress(args: argparse.Namespace) -> int:
    service = _make_service(args.config)
    if service is None:
        return 1
    return _emit(service.tier_progress(args.tier, args.sales, args.team))


def cmd_check_config(args: argparse.Namespace) -> int:
    """Load and validate the config directory."""
    config_dir = args.config or default_config_dir()
    try:
        resolver = PolicyResolver.from_config_dir(config_dir)
    except (OSError, ValueError) as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1
    registry = resolver.tier_registry()
    print(
        f"Config OK: {resolver.source} "
        f"({len(registry.order)} tiers, "
        f"co-broking policy: {resolver.commission_params().co_broker_split_policy})"
    )
    return 0


def _add_rate_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--price", required=True, help="Property price (Decimal)")
    parser.add_argument("--rate", required=True, help="Commission rate value (Decimal)")
    parser.add_argument(
        "--rate-kind", default=RateKind.PERCENTAGE.value,
        choices=[k.value for k in RateKind],
        help="Rate interpretation (default: percentage)",
    )
    parser.add_argument(
        "--mode", default=RepresentationMode.DIRECT.value,
        choices=[m.value for m in RepresentationMode],
        help="Representation mode (default: direct)",
    )
    parser.add_argument("--co-broker-split", help="Co-broker split percent")
    parser.add_argument("--upline", help="Upline agent ID")
    parser.add_argument("--upline-tier", help="Upline agent tier")
    parser.add_argument("--transaction", help="Transaction ID for the audit trail")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="steelix",
        description="Steelix — commission distribution engine CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config directory (default: $STEELIX_CONFIG_DIR or config/)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command")

    # compute
    p_compute = sub.add_parser("compute", help="Compute a breakdown from raw inputs")
    _add_rate_args(p_compute)
    p_compute.add_argument(
        "--split", required=True, help="Percent of agent share the agent keeps",
    )
    p_compute.add_argument("--tier", help="Agent tier label (attribution only)")
    p_compute.add_argument(
        "--upline-rate", default="0", help="Upline leadership bonus percent",
    )

    # agent-compute
    p_agent = sub.add_parser(
        "agent-compute", help="Compute with split and bonus resolved from tiers",
    )
    _add_rate_args(p_agent)
    p_agent.add_argument("--tier", required=True, help="Agent tier")
    p_agent.add_argument("--split", help="Override the tier's commission split")

    # tiers
    sub.add_parser("tiers", help="List the tier ladder")

    # tier-progress
    p_prog = sub.add_parser("tier-progress", help="Progress toward the next tier")
    p_prog.add_argument("--tier", required=True, help="Current tier")
    p_prog.add_argument("--sales", type=int, default=0, help="Monthly sales")
    p_prog.add_argument("--team", type=int, default=0, help="Team members")

    # check-config
    sub.add_parser("check-config", help="Validate the config directory")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "compute": cmd_compute,
        "agent-compute": cmd_agent_compute,
        "tiers": cmd_tiers,
        "tier-progress": cmd_tier_progress,
        "check-config": cmd_check_config,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    logger.debug("Running command %s", args.command)
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
