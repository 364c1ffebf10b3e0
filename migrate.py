#!/usr/bin/env python3
"""
Alembic migration helper script for manual execution.

Usage examples:
  - Upgrade to latest:       python migrate.py
  - Downgrade one step:      python migrate.py downgrade -1
  - Show current revision:   python migrate.py current
  - Show history:            python migrate.py history
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig


def build_alembic_config(project_root: Path) -> AlembicConfig:
    alembic_ini_path = project_root / "alembic.ini"
    if not alembic_ini_path.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini_path}")

    cfg = AlembicConfig(str(alembic_ini_path))
    # 실행 위치와 관계없이 절대 경로 사용
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    return cfg


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manual Alembic migration runner")
    subparsers = parser.add_subparsers(dest="cmd", required=False)

    p_upgrade = subparsers.add_parser("upgrade", help="Upgrade to a later version")
    p_upgrade.add_argument("revision", nargs="?", default="head")

    p_downgrade = subparsers.add_parser("downgrade", help="Revert to a previous version")
    p_downgrade.add_argument("revision")

    subparsers.add_parser("current", help="Show the current revision")
    subparsers.add_parser("history", help="List changeset scripts in chronological order")

    parser.set_defaults(cmd="upgrade", revision="head")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    project_root = Path(__file__).resolve().parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))
    cfg = build_alembic_config(project_root)
    args = parse_args(argv)

    try:
        if args.cmd == "upgrade":
            command.upgrade(cfg, args.revision)
        elif args.cmd == "downgrade":
            command.downgrade(cfg, args.revision)
        elif args.cmd == "current":
            command.current(cfg)
        elif args.cmd == "history":
            command.history(cfg)
        else:
            raise ValueError(f"Unknown command: {args.cmd}")
    except Exception as exc:  # noqa: BLE001 - surface all exceptions
        sys.stderr.write(f"Migration command failed: {exc}\n")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
