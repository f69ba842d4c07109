import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import DemoConfig
from .content import ContentLoader
from .errors import DlcGateError, describe_error
from .logging_config import configure_logging
from .ownership import BackendRegistry, LicenseFileBackend, ManifestBackend

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dlcgate",
        description="Inspect content ownership and demo gating configuration",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Discover content manifests and verify ownership")
    status.add_argument("paths", nargs="+", type=Path, help="Content search paths")
    status.add_argument(
        "--owned",
        type=Path,
        default=None,
        help="YAML ownership manifest used for the 'manifest' ownership method.",
    )
    status.add_argument(
        "--license",
        type=Path,
        default=None,
        help="License file used for the 'license' ownership method.",
    )
    status.add_argument("--game-version", default=None, help="Running game version for min-version checks.")

    demo = sub.add_parser("demo-config", help="Print the effective demo configuration")
    demo.add_argument("--config", type=Path, default=None, help="User demo config YAML file.")
    return parser.parse_args(argv)


def _build_registry(args: argparse.Namespace) -> BackendRegistry:
    registry = BackendRegistry(default="manifest")
    if args.owned is not None:
        registry.register(ManifestBackend.from_file(args.owned))
    else:
        registry.register(ManifestBackend())
    if args.license is not None:
        registry.register(LicenseFileBackend(args.license))
    return registry


def cmd_status(args: argparse.Namespace) -> int:
    loader = ContentLoader(_build_registry(args), game_version=args.game_version)
    for p in args.paths:
        loader.add_search_path(p)
    loader.discover()
    failures = loader.verify_all()
    for content in loader.contents:
        line = f"{content.content_id:<24} {content.content_type.value:<10} {content.ownership_state.value}"
        if content.content_id in failures:
            err = failures[content.content_id]
            line += f"  ({describe_error(err)}: {err})"
        print(line)
    return 1 if failures else 0


def cmd_demo_config(args: argparse.Namespace) -> int:
    config = DemoConfig.load(user_path=args.config)
    print(f"demo_mode:     {config.demo_mode}")
    print(f"time_limit:    {config.time_limit:g}s" if config.time_limit else "time_limit:    unlimited")
    print(f"warning_times: {', '.join(f'{t:g}' for t in sorted(config.warning_times, reverse=True)) or '-'}")
    print(f"purchase_url:  {config.purchase_url or '-'}")
    print(f"gated_content: {', '.join(config.gated_content) or '-'}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(default_level=logging.DEBUG if args.debug else logging.WARNING)
    try:
        if args.command == "status":
            return cmd_status(args)
        return cmd_demo_config(args)
    except DlcGateError as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2
