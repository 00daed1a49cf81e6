"""
QAP Command-Line Interface
==========================

Commands:
    catalog     - List the baseline specification catalog
    build       - Apply a decisions file to a new or existing QAP and
                  emit the resulting draft or submission record as JSON

Decisions file:
    {
        "header": {"customer_name": "jmr", "project_name": "Solar Park 7",
                   "order_quantity": 50, "product_type": "Dual Glass M10 Topcon",
                   "plant": "P4"},
        "decisions": {"1": "yes", "14": "no"},
        "customer_specifications": {"14": "Max 1 scratch <= 10mm"},
        "assignments": {"14": ["quality", "production"]}
    }

Usage:
    python -m qap.orchestrator.cli catalog
    python -m qap.orchestrator.cli build --decisions d.json --actor qa.lead --submit
    python -m qap.orchestrator.cli build --decisions d.json --record old.json -o new.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from ..assignment.assignment_models import Department
from ..catalog.catalog_loader import CatalogError, load_catalog
from ..lifecycle.lifecycle_models import QAPRecord
from ..lifecycle.record_builder import HeaderValidationError, LifecycleRecordBuilder
from ..lifecycle.session import QAPSession, WorkflowStageError
from ..reconciliation.item_models import MatchDecision
from .config import get_settings
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _read_json(path: str) -> dict:
    with open(Path(path), "r") as f:
        return json.load(f)


def cmd_catalog(args):
    """List the baseline catalog."""
    try:
        catalog = load_catalog(args.catalog or get_settings().workflow.catalog_path)
    except CatalogError as e:
        print(f"ERROR: {e}")
        return 1

    if args.json:
        print(json.dumps(catalog.to_dict(), indent=2))
        return 0

    print(f"Catalog version: {catalog.version or 'unversioned'}")
    print("=" * 60)
    print(f"MQP ({len(catalog.mqp)})")
    print("=" * 60)
    for i, row in enumerate(catalog.mqp, 1):
        print(f"{i:3}. [{row.spec_class}] {row.sub_criteria} / {row.component_operation}: "
              f"{row.characteristics}")
        print(f"      Spec: {row.specification}")
    print()
    print("=" * 60)
    print(f"VISUAL & EL ({len(catalog.visual_el)})")
    print("=" * 60)
    for i, row in enumerate(catalog.visual_el, 1):
        print(f"{i:3}. [{row.criteria.value}/{row.defect_class}] {row.sub_criteria}: {row.defect}")
        print(f"      Limits: {row.criteria_limits}")
    return 0


def build_session(args, decisions: dict) -> QAPSession:
    """Open a session for `build` and apply review-stage decisions."""
    workflow = get_settings().workflow
    kwargs = {
        "builder": LifecycleRecordBuilder(default_actor=workflow.default_actor),
        "allow_direct_submit": workflow.allow_direct_submit,
    }

    if args.record:
        session = QAPSession.edit(QAPRecord.from_dict(_read_json(args.record)), **kwargs)
    else:
        catalog = load_catalog(args.catalog or workflow.catalog_path)
        start_sno = args.start_sno if args.start_sno is not None else workflow.start_sno
        session = QAPSession.start_new(catalog, start_sno, **kwargs)

    if decisions.get("header"):
        session.update_header(**decisions["header"])
    for sno, decision in decisions.get("decisions", {}).items():
        session.set_match_decision_for(int(sno), MatchDecision(decision))
    for sno, text in decisions.get("customer_specifications", {}).items():
        session.edit_customer_specification_for(int(sno), text)
    return session


def cmd_build(args):
    """Build a draft or submission record from a decisions file."""
    try:
        decisions = _read_json(args.decisions)
        session = build_session(args, decisions)

        routing = decisions.get("assignments", {})
        if args.submit or routing:
            session.enter_assignment_stage()
            for sno, departments in routing.items():
                for department in departments:
                    session.toggle_department(int(sno), Department(department), True)

        if args.submit:
            record = session.submit(actor=args.actor)
        else:
            record = session.save_draft(actor=args.actor)

    except HeaderValidationError as e:
        print(f"ERROR: Submission refused, missing: {', '.join(e.missing_fields)}")
        return 1
    except (CatalogError, WorkflowStageError, LookupError, ValueError, IOError) as e:
        print(f"ERROR: {e}")
        logger.exception("Build failed")
        return 1

    output = json.dumps(record.to_dict(), indent=2)
    if args.output:
        Path(args.output).write_text(output)
        print(f"{record.status.value} record {record.id} written to {args.output}")
    else:
        print(output)
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="qap",
        description="QAP reconciliation and mismatch-assignment CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # catalog command
    catalog_parser = subparsers.add_parser("catalog", help="List the baseline catalog")
    catalog_parser.add_argument(
        "--catalog",
        help="JSON catalog file (default: QAP_CATALOG_PATH or built-in)",
    )
    catalog_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # build command
    build_parser = subparsers.add_parser("build", help="Build a draft or submission record")
    build_parser.add_argument(
        "--decisions",
        required=True,
        help="JSON decisions file",
    )
    build_parser.add_argument(
        "--record",
        help="Existing record JSON to edit (default: start a new QAP)",
    )
    build_parser.add_argument(
        "--catalog",
        help="JSON catalog file for new QAPs",
    )
    build_parser.add_argument(
        "--start-sno",
        type=int,
        help="First sequence number for a new QAP (default: QAP_START_SNO)",
    )
    build_parser.add_argument(
        "--actor",
        help="Acting user recorded on the record",
    )
    build_parser.add_argument(
        "--submit",
        action="store_true",
        help="Submit for level 2 review instead of saving a draft",
    )
    build_parser.add_argument(
        "-o", "--output",
        help="Write the record JSON to this file",
    )

    args = parser.parse_args(argv)

    log_config = get_settings().logging
    setup_logging(
        level="DEBUG" if args.verbose else log_config.level,
        json_output=log_config.json_logs,
        log_file=log_config.log_file,
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "catalog": cmd_catalog,
        "build": cmd_build,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
