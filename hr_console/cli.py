"""HR Console CLI — log in, inspect records and check in / out from a terminal.

Usage:
    hr-console login --email admin@example.com            # prompts for the password
    hr-console whoami
    hr-console employees --search ali --page 2
    hr-console leave-requests --status pending
    hr-console attendance --date 2024-05-01 --json
    hr-console check-in --employee-id 7 --lat 24.7 --lon 46.6 --photo selfie.jpg
    hr-console logout

Reads HR_API_BASE_URL, HR_TOKEN_FILE and LOG_LEVEL from the environment or .env.
The bearer token is kept in HR_TOKEN_FILE between invocations.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from hr_console.attendance.service import filter_attendances
from hr_console.auth.session import SessionController
from hr_console.client import ApiClient, create_client
from hr_console.common.constants import EmploymentType, LeaveStatus
from hr_console.common.envelope import ApiResponse
from hr_console.common.storage import FileTokenStorage
from hr_console.config import Settings, get_settings
from hr_console.core_hr.service import filter_departments, filter_positions
from hr_console.leave.service import filter_leave_requests

logger = logging.getLogger("hr_console.cli")

EXIT_OK = 0
EXIT_API_FAILURE = 1

Handler = Callable[[ApiClient, argparse.Namespace], Awaitable[int]]


# ═════════════════════════════════════════════════════════════════════
# Output
# ═════════════════════════════════════════════════════════════════════


def _print_json(value: Any) -> None:
    print(json.dumps(to_jsonable_python(value, by_alias=True), indent=2, ensure_ascii=False))


def _report_failure(response: ApiResponse) -> int:
    print(f"❌ {response.message}", file=sys.stderr)
    for field, messages in (response.errors or {}).items():
        for message in messages:
            print(f"   {field}: {message}", file=sys.stderr)
    return EXIT_API_FAILURE


def _report_invalid(exc: ValidationError) -> int:
    print("❌ Invalid input", file=sys.stderr)
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "input"
        print(f"   {field}: {error['msg']}", file=sys.stderr)
    return EXIT_API_FAILURE


def _emit(args: argparse.Namespace, response: ApiResponse, render: Callable[[Any], None]) -> int:
    if not response.success:
        return _report_failure(response)
    if args.output_json:
        _print_json(response.data)
    else:
        render(response.data)
    return EXIT_OK


def _table(rows: Sequence[Sequence[Any]], headers: Sequence[str]) -> None:
    cells = [[("" if c is None else str(c)) for c in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        widths = [max(w, len(c)) for w, c in zip(widths, row)]
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in cells:
        print("  ".join(c.ljust(w) for c, w in zip(row, widths)))
    if not cells:
        print("(no records)")


def _page_footer(pagination: Any) -> None:
    if pagination is None:
        return
    print(f"\nPage {pagination.current_page}/{pagination.last_page} — {pagination.total} total")


# ═════════════════════════════════════════════════════════════════════
# Commands — session
# ═════════════════════════════════════════════════════════════════════


async def cmd_login(client: ApiClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    session = SessionController(client)
    credentials = {"email": args.email, "password": password}
    if args.remember:
        credentials["remember_me"] = True
    if not await session.login(credentials):
        return EXIT_API_FAILURE
    user = session.user
    print(f"Logged in as {user.name} <{user.email}>")
    return EXIT_OK


async def cmd_logout(client: ApiClient, args: argparse.Namespace) -> int:
    if not client.has_token:
        print("Not logged in.")
        return EXIT_OK
    await SessionController(client).logout()
    return EXIT_OK


async def cmd_whoami(client: ApiClient, args: argparse.Namespace) -> int:
    session = SessionController(client)
    await session.initialize()
    if not session.is_authenticated:
        print("Not logged in.", file=sys.stderr)
        return EXIT_API_FAILURE

    if args.output_json:
        _print_json({
            "user": session.user,
            "hr_employee": session.employee_profile,
            "permissions": dict(session.permissions),
        })
        return EXIT_OK

    user, profile = session.user, session.employee_profile
    print(f"{user.name} <{user.email}>")
    print(f"Employee : {profile.employee_id}")
    print(f"Dept     : {profile.department or '-'}")
    print(f"Position : {profile.position or '-'}")
    granted = sorted(name for name, allowed in session.permissions.items() if allowed)
    print(f"Can      : {', '.join(granted) or '-'}")
    return EXIT_OK


# ═════════════════════════════════════════════════════════════════════
# Commands — core HR
# ═════════════════════════════════════════════════════════════════════


async def cmd_employees(client: ApiClient, args: argparse.Namespace) -> int:
    filters = {
        "search": args.search,
        "department_id": args.department_id,
        "position_id": args.position_id,
        "employment_type": args.employment_type,
        "is_active": args.is_active,
        "page": args.page,
        "per_page": args.per_page,
    }
    response = await client.get_employees(filters)

    def render(data):
        rows = [
            (
                e.id,
                e.employee_id,
                e.user.name if e.user else "",
                e.department.name if e.department else "",
                e.position.title if e.position else "",
                "yes" if e.is_active else "no",
            )
            for e in data.employees
        ]
        _table(rows, ["ID", "EMP#", "NAME", "DEPARTMENT", "POSITION", "ACTIVE"])
        _page_footer(data.pagination)

    return _emit(args, response, render)


async def cmd_departments(client: ApiClient, args: argparse.Namespace) -> int:
    response = await client.get_departments()

    def render(data):
        rows = [
            (d.id, d.code, d.name, d.employees_count, "yes" if d.is_active else "no")
            for d in filter_departments(data.departments, args.search)
        ]
        _table(rows, ["ID", "CODE", "NAME", "EMPLOYEES", "ACTIVE"])

    return _emit(args, response, render)


async def cmd_positions(client: ApiClient, args: argparse.Namespace) -> int:
    response = await client.get_positions()

    def render(data):
        rows = [
            (p.id, p.code, p.title, f"{p.base_salary_min} – {p.base_salary_max}", p.employees_count)
            for p in filter_positions(data.positions, args.search)
        ]
        _table(rows, ["ID", "CODE", "TITLE", "SALARY", "EMPLOYEES"])

    return _emit(args, response, render)


# ═════════════════════════════════════════════════════════════════════
# Commands — leave / attendance
# ═════════════════════════════════════════════════════════════════════


async def cmd_leave_requests(client: ApiClient, args: argparse.Namespace) -> int:
    filters = {
        "employee_id": args.employee_id,
        "leave_type": args.leave_type,
        "status": args.status,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "page": args.page,
    }
    response = await client.get_leave_requests(filters)

    def render(data):
        rows = []
        for r in filter_leave_requests(data.data, args.search):
            name = r.employee.user.name if r.employee and r.employee.user else r.employee_id
            amount = f"{r.total_hours}h" if r.is_hourly else f"{r.total_days}d"
            rows.append((r.id, name, r.leave_type, r.start_date, r.end_date, amount, r.status))
        _table(rows, ["ID", "EMPLOYEE", "TYPE", "FROM", "TO", "DURATION", "STATUS"])
        _page_footer(data.meta())

    return _emit(args, response, render)


async def cmd_attendance(client: ApiClient, args: argparse.Namespace) -> int:
    filters = {
        "employee_id": args.employee_id,
        "date": args.date,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "attendance_type": args.attendance_type,
        "page": args.page,
    }
    response = await client.get_attendances(filters)

    def render(data):
        rows = [
            (
                a.id,
                a.employee.name if a.employee else a.employee_id,
                a.date,
                a.check_in_time,
                a.check_out_time,
                a.total_hours,
                a.attendance_type_label or a.attendance_type,
            )
            for a in filter_attendances(data.attendances, args.search)
        ]
        _table(rows, ["ID", "EMPLOYEE", "DATE", "IN", "OUT", "HOURS", "TYPE"])
        _page_footer(data.pagination)

    return _emit(args, response, render)


async def cmd_today(client: ApiClient, args: argparse.Namespace) -> int:
    response = await client.get_today_stats()

    def render(stats):
        print(f"Employees     : {stats.total_employees}")
        print(f"Checked in    : {stats.checked_in}")
        print(f"Checked out   : {stats.checked_out}")
        print(f"Late arrivals : {stats.late_arrivals}")
        print(f"Absent        : {stats.absent}")

    return _emit(args, response, render)


def _photo_file(path: str) -> str:
    """argparse type: read an image file and return it base64-encoded."""
    try:
        data = Path(path).expanduser().read_bytes()
    except OSError as exc:
        raise argparse.ArgumentTypeError(f"cannot read photo {path!r}: {exc.strerror}")
    return base64.b64encode(data).decode("ascii")


async def cmd_check_in(client: ApiClient, args: argparse.Namespace) -> int:
    response = await client.check_in(
        args.employee_id,
        latitude=args.lat,
        longitude=args.lon,
        notes=args.notes,
        photo=args.photo,
    )
    return _emit(args, response, lambda a: print(f"✅ Checked in at {a.check_in_time}"))


async def cmd_check_out(client: ApiClient, args: argparse.Namespace) -> int:
    response = await client.check_out(
        args.employee_id,
        notes=args.notes,
        photo=args.photo,
    )
    return _emit(args, response, lambda a: print(f"✅ Checked out at {a.check_out_time}"))


# ═════════════════════════════════════════════════════════════════════
# Parser
# ═════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hr-console",
        description="HR administration console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Print raw records as JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in and store the token")
    p.add_argument("--email", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.add_argument("--remember", action="store_true", help="Ask for a long-lived token")
    p.set_defaults(handler=cmd_login)

    p = sub.add_parser("logout", help="End the session and forget the token")
    p.set_defaults(handler=cmd_logout)

    p = sub.add_parser("whoami", help="Show the logged-in user and permissions")
    p.set_defaults(handler=cmd_whoami)

    p = sub.add_parser("employees", help="List employees")
    p.add_argument("--search")
    p.add_argument("--department-id", type=int)
    p.add_argument("--position-id", type=int)
    p.add_argument("--employment-type", choices=[t.value for t in EmploymentType])
    active = p.add_mutually_exclusive_group()
    active.add_argument("--active", dest="is_active", action="store_const", const=True)
    active.add_argument("--inactive", dest="is_active", action="store_const", const=False)
    p.add_argument("--page", type=int)
    p.add_argument("--per-page", type=int)
    p.set_defaults(handler=cmd_employees)

    p = sub.add_parser("departments", help="List departments")
    p.add_argument("--search")
    p.set_defaults(handler=cmd_departments)

    p = sub.add_parser("positions", help="List positions")
    p.add_argument("--search")
    p.set_defaults(handler=cmd_positions)

    p = sub.add_parser("leave-requests", help="List leave requests")
    p.add_argument("--employee-id", type=int)
    p.add_argument("--leave-type")
    p.add_argument("--status", choices=[s.value for s in LeaveStatus])
    p.add_argument("--start-date", help="YYYY-MM-DD")
    p.add_argument("--end-date", help="YYYY-MM-DD")
    p.add_argument("--page", type=int)
    p.add_argument("--search", help="Filter the page by employee, number or reason")
    p.set_defaults(handler=cmd_leave_requests)

    p = sub.add_parser("attendance", help="List attendance records")
    p.add_argument("--employee-id", type=int)
    p.add_argument("--date", help="YYYY-MM-DD")
    p.add_argument("--start-date", help="YYYY-MM-DD")
    p.add_argument("--end-date", help="YYYY-MM-DD")
    p.add_argument("--type", dest="attendance_type")
    p.add_argument("--page", type=int)
    p.add_argument("--search", help="Filter the page by employee or notes")
    p.set_defaults(handler=cmd_attendance)

    p = sub.add_parser("today", help="Today's attendance counters")
    p.set_defaults(handler=cmd_today)

    p = sub.add_parser("check-in", help="Check in an employee")
    p.add_argument("--employee-id", type=int, required=True)
    p.add_argument("--lat", type=float)
    p.add_argument("--lon", type=float)
    p.add_argument("--notes")
    p.add_argument("--photo", type=_photo_file, help="Image file, sent base64-encoded")
    p.set_defaults(handler=cmd_check_in)

    p = sub.add_parser("check-out", help="Check out an employee")
    p.add_argument("--employee-id", type=int, required=True)
    p.add_argument("--notes")
    p.add_argument("--photo", type=_photo_file, help="Image file, sent base64-encoded")
    p.set_defaults(handler=cmd_check_out)

    return parser


async def run(args: argparse.Namespace, settings: Settings, client: Optional[ApiClient] = None) -> int:
    """Execute the parsed command; *client* overrides the one built from *settings*."""
    if client is None:
        client = create_client(settings, storage=FileTokenStorage(settings.HR_TOKEN_FILE))
    logger.debug("Running %s against %s", args.command, client.base_url)
    async with client:
        handler: Handler = args.handler
        try:
            return await handler(client, args)
        except ValidationError as exc:
            return _report_invalid(exc)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
