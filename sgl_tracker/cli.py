"""Command line interface for the sales pipeline tracker."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import ConfigurationError, load_settings
from .dates import format_date, parse_date
from .errors import TrackerError
from .io import UnsupportedFileTypeError
from .models import LeadStatus
from .phone import is_normalized
from .service import TrackerService
from .store import JsonFileStore

LOGGER = logging.getLogger(__name__)


def _date_argument(value: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")
    return parsed


def _yes_no(value: str) -> bool:
    text = value.strip().lower()
    if text in {"yes", "y", "true", "1"}:
        return True
    if text in {"no", "n", "false", "0"}:
        return False
    raise argparse.ArgumentTypeError(f"expected yes or no, got '{value}'")


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Track salespeople, leads, onboarded leaders and check-ins")
    parser.add_argument("--config", help="Path to a configuration file (YAML or JSON)")
    parser.add_argument("--data", help="Path to the JSON data file (overrides the configuration)")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    team = commands.add_parser("team", help="Manage the sales team").add_subparsers(dest="action", required=True)
    team.add_parser("list", help="List salespeople")
    team_add = team.add_parser("add", help="Add a salesperson")
    team_add.add_argument("--name", required=True)
    team_add.add_argument("--phone", required=True)
    team_add.add_argument("--region", required=True)
    team_add.add_argument("--joined", required=True, type=_date_argument, help="Joined date (YYYY-MM-DD)")

    leads = commands.add_parser("leads", help="Manage leads").add_subparsers(dest="action", required=True)
    leads.add_parser("list", help="List active (not promoted) leads")
    leads_add = leads.add_parser("add", help="Add a lead")
    leads_add.add_argument("--name", required=True)
    leads_add.add_argument("--phone", required=True)
    leads_add.add_argument("--location", required=True)
    leads_add.add_argument("--salesperson", required=True)
    leads_add.add_argument("--status", default=LeadStatus.NOT_CONTACTED.value)
    leads_add.add_argument("--source", default="From List")
    leads_add.add_argument("--remark")
    leads_add.add_argument("--appointment", type=_date_argument)
    leads_add.add_argument("--cohort")
    leads_update = leads.add_parser("update", help="Edit status, remark, appointment or salesperson")
    leads_update.add_argument("lead_id")
    leads_update.add_argument("--status")
    leads_update.add_argument("--remark")
    leads_update.add_argument("--appointment", type=_date_argument)
    leads_update.add_argument("--salesperson")
    leads_promote = leads.add_parser("promote", help="Promote a lead to onboarded leaders")
    leads_promote.add_argument("lead_id")
    leads_import = leads.add_parser("import", help="Import leads from a CSV or Excel file")
    leads_import.add_argument("path")
    leads_export = leads.add_parser("export", help="Export active leads")
    leads_export.add_argument("--output-dir", default=".")
    leads_export.add_argument("--format", choices=["csv", "xlsx"], default="csv")

    leaders = commands.add_parser("leaders", help="Manage onboarded leaders").add_subparsers(dest="action", required=True)
    leaders_list = leaders.add_parser("list", help="List onboarded leaders")
    leaders_list.add_argument("--follow-up", action="store_true", help="Only leaders that need a follow-up")
    leaders_update = leaders.add_parser("update", help="Edit ordered flag, remark or salesperson")
    leaders_update.add_argument("leader_id")
    leaders_update.add_argument("--ordered", type=_yes_no)
    leaders_update.add_argument("--remark")
    leaders_update.add_argument("--salesperson")
    leaders_export = leaders.add_parser("export", help="Export onboarded leaders")
    leaders_export.add_argument("--output-dir", default=".")
    leaders_export.add_argument("--format", choices=["csv", "xlsx"], default="csv")

    check_in = commands.add_parser("checkin", help="Record today's check-in for a salesperson")
    check_in.add_argument("name")

    check_ins = commands.add_parser("checkins", help="List check-ins for a day")
    check_ins.add_argument("--date", type=_date_argument, help="Day to show (default: today)")

    weeks = commands.add_parser("weeks", help="List recent weeks for the dashboard")
    weeks.add_argument("--count", type=int)

    dashboard = commands.add_parser("dashboard", help="Weekly performance and cohort insights")
    dashboard.add_argument("--week", help="Any date in the week to show (default: this week)")
    dashboard.add_argument("--salesperson", help="Only show this salesperson")
    return parser


def _cmd_team(service: TrackerService, args: argparse.Namespace) -> int:
    if args.action == "add":
        person = service.add_salesperson(args.name, args.phone, args.region, format_date(args.joined))
        _warn_phone(person.phone, person.name)
        print(f"Added salesperson {person.name} ({person.id})")
        return 0
    for person in service.sales_team():
        print(f"{person.name}\t{person.phone}\t{person.region}\t{person.joined_date}")
    return 0


def _cmd_leads(service: TrackerService, args: argparse.Namespace) -> int:
    if args.action == "add":
        lead = service.add_lead(
            args.name,
            args.phone,
            args.location,
            args.salesperson,
            status=args.status,
            source=args.source,
            remark=args.remark,
            appointment=format_date(args.appointment) if args.appointment else None,
            cohort=args.cohort,
        )
        _warn_phone(lead.phone, lead.name)
        print(f"Added lead {lead.name} ({lead.id})")
    elif args.action == "update":
        changes: Dict[str, object] = {"status": args.status}
        if args.remark is not None:
            changes["remark"] = args.remark
        if args.appointment is not None:
            changes["appointment"] = format_date(args.appointment)
        if args.salesperson is not None:
            changes["salesperson"] = args.salesperson
        lead = service.update_lead(args.lead_id, **changes)
        print(f"Updated lead {lead.name}")
    elif args.action == "promote":
        leader = service.promote_lead(args.lead_id)
        print(f"{leader.name} promoted to Onboarded Leaders")
    elif args.action == "import":
        report = service.import_leads(args.path)
        for diagnostic in report.diagnostics:
            print(str(diagnostic), file=sys.stderr)
        print(f"{len(report.leads)} leads imported")
        return 0 if report.leads else 1
    elif args.action == "export":
        path = service.export_leads(args.output_dir, suffix=f".{args.format}")
        print(f"Lead list exported to {path}")
    else:
        for lead in service.active_leads():
            print(
                "\t".join(
                    [
                        lead.id,
                        lead.name,
                        lead.phone,
                        lead.location,
                        lead.status.value,
                        lead.salesperson or "-",
                        lead.cohort or "-",
                    ]
                )
            )
    return 0


def _cmd_leaders(service: TrackerService, args: argparse.Namespace) -> int:
    if args.action == "update":
        changes: Dict[str, object] = {"ordered": args.ordered}
        if args.remark is not None:
            changes["remark"] = args.remark
        if args.salesperson is not None:
            changes["salesperson"] = args.salesperson
        leader = service.update_leader(args.leader_id, **changes)
        print(f"Updated leader {leader.name}")
        return 0
    if args.action == "export":
        path = service.export_leaders(args.output_dir, suffix=f".{args.format}")
        print(f"Onboarded leaders exported to {path}")
        return 0

    flagged = {leader.id for leader in service.follow_ups()}
    for leader in service.onboarded_leaders():
        if args.follow_up and leader.id not in flagged:
            continue
        print(
            "\t".join(
                [
                    leader.id,
                    leader.name,
                    leader.phone,
                    leader.upgrade_date,
                    "Yes" if leader.ordered else "No",
                    leader.salesperson or "-",
                    "Follow Up" if leader.id in flagged else "",
                ]
            ).rstrip()
        )
    return 0


def _cmd_checkin(service: TrackerService, args: argparse.Namespace) -> int:
    record = service.check_in(args.name)
    print(f"{record.salesperson_name} checked in successfully on {record.date}")
    return 0


def _cmd_checkins(service: TrackerService, args: argparse.Namespace) -> int:
    for record in service.check_ins_on(args.date):
        print(f"{record.salesperson_name}\t{record.timestamp}")
    return 0


def _cmd_weeks(service: TrackerService, args: argparse.Namespace) -> int:
    for week in service.recent_weeks(args.count):
        print(f"{week.value}\t{week.label}")
    return 0


def _cmd_dashboard(service: TrackerService, args: argparse.Namespace) -> int:
    weekly = service.weekly_performance(args.week, args.salesperson)
    print(f"Week {format_date(weekly.week_start)} to {format_date(weekly.week_end)}")
    print(f"Upgraded: {weekly.total_upgraded}  Ordered: {weekly.total_ordered}")
    for row in weekly.rows:
        print(f"{row.salesperson_name}\t{row.upgraded_count}\t{row.ordered_count}\t{row.progress:.0f}%")
    print("Cohorts:")
    for cohort in service.cohort_insights():
        print(
            f"{cohort.name}\t{cohort.total_leads}\t{cohort.promoted_leads}\t"
            f"{cohort.display_rate}\t{cohort.tier.value}"
        )
    return 0


_COMMANDS: Dict[str, Callable[[TrackerService, argparse.Namespace], int]] = {
    "team": _cmd_team,
    "leads": _cmd_leads,
    "leaders": _cmd_leaders,
    "checkin": _cmd_checkin,
    "checkins": _cmd_checkins,
    "weeks": _cmd_weeks,
    "dashboard": _cmd_dashboard,
}


def _warn_phone(phone: str, owner: str) -> None:
    if not is_normalized(phone):
        print(f"Warning: phone for {owner} may be incorrect. Expected +251...", file=sys.stderr)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        settings = load_settings(args.config, data_path=args.data)
        service = TrackerService(JsonFileStore(Path(settings.data_path)), settings)
        return _COMMANDS[args.command](service, args)
    except (TrackerError, ConfigurationError, UnsupportedFileTypeError, FileNotFoundError) as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
