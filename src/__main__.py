"""Main entry point for App-Tracker."""

import argparse
import asyncio
import json
import locale
import sys
from pathlib import Path

from pydantic import ValidationError

from src import __version__
from src.auth.models import AuthEvent, Identity
from src.auth.session import NotAuthenticatedError, SessionManager
from src.config.settings import Settings
from src.grocery.models import FlyerStatus, GroceryCategory, GroceryItemDraft
from src.grocery.repository import GroceryRepository
from src.grocery.savings import best_deal, load_matches, top_store, total_savings
from src.grocery.service import GroceryService
from src.tracker.favorites import FavoriteStore
from src.tracker.models import (
    ApplicationDraft,
    ApplicationStatus,
    ApplicationUpdate,
    JobApplication,
)
from src.tracker.pipeline import (
    PAGE_SIZE_OPTIONS,
    ListQuery,
    SortDirection,
    SortKey,
    parse_status_filter,
)
from src.tracker.repository import ApplicationRepository
from src.tracker.sample_data import generate_sample_drafts
from src.tracker.service import TrackerService
from src.utils.logging import configure_logging
from src.utils.store import RecordNotFoundError, StoreError

STORE_ERROR_MESSAGE = "Something went wrong while saving your changes. Please try again."
NOT_SIGNED_IN_MESSAGE = "Not signed in. Run: app-tracker auth login --email you@example.com"
CHART_WIDTH = 40


def _status(value: str) -> ApplicationStatus:
    try:
        return ApplicationStatus.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _category(value: str) -> GroceryCategory:
    try:
        return GroceryCategory.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return number


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override database path (defaults to settings)",
    )


def _print_validation_errors(error: ValidationError) -> None:
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "input"
        print(f"{field}: {item.get('msg')}", file=sys.stderr)


def _format_application(application: JobApplication, favorite: bool) -> str:
    star = "*" if favorite else " "
    return (
        f"{application.date_applied.isoformat()} {star} "
        f"{application.status.value:<10} {application.id} "
        f"{application.company} - {application.position} ({application.location})"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="app-tracker",
        description="App-Tracker: track job applications and grocery savings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src auth login --email you@example.com
  python -m src apps add --company Acme --position Engineer --location Remote
  python -m src apps list --search acme --sort company --order asc
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available modes",
    )

    # Auth
    auth_parser = subparsers.add_parser("auth", help="Sign in, sign out, whoami")
    auth_subparsers = auth_parser.add_subparsers(
        dest="auth_cmd", title="auth", required=True
    )
    auth_login = auth_subparsers.add_parser("login", help="Sign in")
    auth_login.add_argument("--email", required=True, help="Email address")
    auth_subparsers.add_parser("logout", help="Sign out")
    auth_subparsers.add_parser("whoami", help="Show the signed-in user")

    # Job applications
    apps_parser = subparsers.add_parser("apps", help="Job application tracker")
    apps_subparsers = apps_parser.add_subparsers(
        dest="apps_cmd",
        title="apps",
        description="Application operations",
        required=True,
    )

    apps_list = apps_subparsers.add_parser("list", help="List applications")
    apps_list.add_argument("--search", default="", help="Search company/title/location")
    apps_list.add_argument(
        "--status",
        default="all",
        help="Status filter: all, applied, interview, offer, rejected, follow-up, archived",
    )
    apps_list.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=None,
        help="Sort field (defaults to settings)",
    )
    apps_list.add_argument(
        "--order",
        choices=[direction.value for direction in SortDirection],
        default=None,
        help="Sort direction (defaults to settings)",
    )
    apps_list.add_argument("--page", type=_positive_int, default=1, help="Page number")
    apps_list.add_argument(
        "--page-size",
        type=int,
        choices=PAGE_SIZE_OPTIONS,
        default=None,
        help="Applications per page (defaults to settings)",
    )
    apps_list.add_argument("--json", action="store_true", help="Print JSON")
    _add_db_argument(apps_list)

    apps_add = apps_subparsers.add_parser("add", help="Add an application")
    apps_add.add_argument("--company", required=True)
    apps_add.add_argument("--position", required=True, help="Job title")
    apps_add.add_argument("--location", required=True)
    apps_add.add_argument("--status", type=_status, default=ApplicationStatus.APPLIED)
    apps_add.add_argument("--salary", default=None, help="Salary range")
    apps_add.add_argument("--notes", default=None)
    apps_add.add_argument("--url", dest="job_url", default=None, help="Job posting URL")
    apps_add.add_argument("--hiring-manager", default=None)
    apps_add.add_argument(
        "--not-posted",
        action="store_true",
        help="The posting is no longer online",
    )
    _add_db_argument(apps_add)

    apps_edit = apps_subparsers.add_parser("edit", help="Edit an application")
    apps_edit.add_argument("id", help="Application id")
    apps_edit.add_argument("--company")
    apps_edit.add_argument("--position")
    apps_edit.add_argument("--location")
    apps_edit.add_argument("--status", type=_status)
    apps_edit.add_argument("--salary")
    apps_edit.add_argument("--notes")
    apps_edit.add_argument("--url", dest="job_url")
    apps_edit.add_argument("--hiring-manager")
    posting = apps_edit.add_mutually_exclusive_group()
    posting.add_argument(
        "--posted", dest="posting_online", action="store_const", const=True
    )
    posting.add_argument(
        "--not-posted", dest="posting_online", action="store_const", const=False
    )
    _add_db_argument(apps_edit)

    apps_status = apps_subparsers.add_parser("status", help="Change status")
    apps_status.add_argument("id", help="Application id")
    apps_status.add_argument("status", type=_status, help="New status")
    _add_db_argument(apps_status)

    apps_archive = apps_subparsers.add_parser("archive", help="Archive an application")
    apps_archive.add_argument("id", help="Application id")
    _add_db_argument(apps_archive)

    apps_delete = apps_subparsers.add_parser("delete", help="Delete an application")
    apps_delete.add_argument("id", help="Application id")
    apps_delete.add_argument(
        "--yes", action="store_true", help="Skip the confirmation prompt"
    )
    _add_db_argument(apps_delete)

    apps_favorite = apps_subparsers.add_parser("favorite", help="Toggle favorite")
    apps_favorite.add_argument("id", help="Application id")
    _add_db_argument(apps_favorite)

    apps_stats = apps_subparsers.add_parser("stats", help="Show summary counts")
    apps_stats.add_argument("--chart", action="store_true", help="Draw a status chart")
    _add_db_argument(apps_stats)

    apps_seed = apps_subparsers.add_parser("seed", help="Insert sample applications")
    apps_seed.add_argument("--count", type=_positive_int, default=500)
    apps_seed.add_argument("--seed", type=int, default=None, help="Random seed")
    _add_db_argument(apps_seed)

    # Grocery
    grocery_parser = subparsers.add_parser("grocery", help="Grocery list and flyers")
    grocery_subparsers = grocery_parser.add_subparsers(
        dest="grocery_cmd",
        title="grocery",
        description="Grocery operations",
        required=True,
    )

    grocery_add = grocery_subparsers.add_parser("add", help="Add an item")
    grocery_add.add_argument("name", help="Item name")
    grocery_add.add_argument(
        "--category", type=_category, default=GroceryCategory.PRODUCE
    )
    grocery_add.add_argument("--quantity", type=int, default=1)
    grocery_add.add_argument("--brand", default="Any")
    _add_db_argument(grocery_add)

    grocery_list = grocery_subparsers.add_parser("list", help="List items")
    _add_db_argument(grocery_list)

    grocery_check = grocery_subparsers.add_parser("check", help="Toggle checked")
    grocery_check.add_argument("id", help="Item id")
    _add_db_argument(grocery_check)

    grocery_remove = grocery_subparsers.add_parser("remove", help="Remove an item")
    grocery_remove.add_argument("id", help="Item id")
    _add_db_argument(grocery_remove)

    grocery_flyer_add = grocery_subparsers.add_parser("flyer-add", help="Add a flyer")
    grocery_flyer_add.add_argument("url", help="Flyer URL")
    _add_db_argument(grocery_flyer_add)

    grocery_flyers = grocery_subparsers.add_parser("flyers", help="List flyers")
    _add_db_argument(grocery_flyers)

    grocery_flyer_remove = grocery_subparsers.add_parser(
        "flyer-remove", help="Remove a flyer"
    )
    grocery_flyer_remove.add_argument("id", help="Flyer id")
    _add_db_argument(grocery_flyer_remove)

    grocery_savings = grocery_subparsers.add_parser(
        "savings", help="Summarize savings from a price-match file"
    )
    grocery_savings.add_argument(
        "matches_file", type=Path, help="YAML or JSON file of price matches"
    )

    return parser


def _handle_auth(parsed: argparse.Namespace, session: SessionManager) -> int:
    if parsed.auth_cmd == "login":
        try:
            identity = session.sign_in(parsed.email)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        print(f"Signed in as {identity.email}")
        return 0

    if parsed.auth_cmd == "logout":
        session.sign_out()
        print("Signed out")
        return 0

    if parsed.auth_cmd == "whoami":
        identity = session.get_user()
        if identity is None:
            print("Not signed in")
            return 1
        remaining = session.minutes_remaining() or 0.0
        print(f"{identity.email} ({identity.id})")
        print(f"Session expires in {remaining:.0f} minutes")
        if session.expiring_soon():
            print("Warning: your session is about to expire due to inactivity")
        return 0

    print("Unknown auth command", file=sys.stderr)
    return 1


async def _run_apps(
    parsed: argparse.Namespace, settings: Settings, service: TrackerService
) -> int:
    cmd = parsed.apps_cmd

    if cmd == "list":
        try:
            status_filter = parse_status_filter(parsed.status)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1

        service.set_query(
            search=parsed.search,
            status_filter=status_filter,
            sort_key=SortKey(parsed.sort) if parsed.sort else settings.default_sort_key,
            direction=SortDirection(parsed.order)
            if parsed.order
            else settings.default_sort_direction,
            page_size=parsed.page_size or settings.default_page_size,
        )
        await service.refresh()
        page = service.go_to_page(parsed.page)

        if parsed.json:
            payload = {
                "items": [app.to_dict() for app in page.items],
                "total_count": page.total_count,
                "total_pages": page.total_pages,
                "page": page.page,
                "page_size": page.page_size,
            }
            print(json.dumps(payload, indent=2))
            return 0

        if not page.items:
            print("No applications found")
            return 0
        for app in page.items:
            print(_format_application(app, service.is_favorite(app.id)))
        print(
            f"\nPage {page.page} of {page.total_pages} "
            f"({page.total_count} applications)"
        )
        return 0

    if cmd == "add":
        try:
            draft = ApplicationDraft(
                company=parsed.company,
                position=parsed.position,
                location=parsed.location,
                status=parsed.status,
                salary=parsed.salary,
                notes=parsed.notes,
                job_url=parsed.job_url,
                posting_online=not parsed.not_posted,
                hiring_manager=parsed.hiring_manager,
            )
        except ValidationError as e:
            _print_validation_errors(e)
            return 1

        application = await service.add_application(draft)
        print(application.id)
        return 0

    if cmd == "edit":
        provided = {
            key: getattr(parsed, key)
            for key in ApplicationUpdate.model_fields
            if getattr(parsed, key, None) is not None
        }
        if not provided:
            print("Nothing to update", file=sys.stderr)
            return 1
        try:
            update = ApplicationUpdate(**provided)
        except ValidationError as e:
            _print_validation_errors(e)
            return 1

        application = await service.update_application(parsed.id, update)
        print(_format_application(application, service.is_favorite(application.id)))
        return 0

    if cmd == "status":
        application = await service.set_status(parsed.id, parsed.status)
        print(f"{application.id} -> {application.status.value}")
        return 0

    if cmd == "archive":
        await service.archive_application(parsed.id)
        print("ok")
        return 0

    if cmd == "delete":
        if not parsed.yes:
            answer = input(
                f"Delete application {parsed.id}? This cannot be undone. [y/N] "
            )
            if answer.strip().lower() not in {"y", "yes"}:
                print("Cancelled")
                return 1
        await service.delete_application(parsed.id)
        print("ok")
        return 0

    if cmd == "favorite":
        application = await service.repository.get(service.owner_id, parsed.id)
        if application is None:
            print("Not found", file=sys.stderr)
            return 1
        favorited = service.toggle_favorite(parsed.id)
        print("favorited" if favorited else "unfavorited")
        return 0

    if cmd == "stats":
        await service.refresh()
        summary = service.summary()
        counts = await service.status_counts()
        print(f"Total: {summary.total}")
        print(f"Interviews: {summary.interviews}")
        print(f"Offers: {summary.offers}")
        print(f"Favorited: {summary.favorited}")
        for status in ApplicationStatus:
            print(f"{status.value}: {counts.get(status, 0)}")
        if parsed.chart:
            breakdown = service.chart()
            largest = max((item.count for item in breakdown), default=0)
            print()
            for item in breakdown:
                width = round(CHART_WIDTH * item.count / largest) if largest else 0
                print(f"{item.label:<10} {'#' * width} {item.count}")
        return 0

    if cmd == "seed":
        drafts = generate_sample_drafts(count=parsed.count, seed=parsed.seed)
        for draft in drafts:
            await service.add_application(draft)
        print(f"Inserted {len(drafts)} sample applications")
        return 0

    print("Unknown apps command", file=sys.stderr)
    return 1


async def _run_grocery(parsed: argparse.Namespace, service: GroceryService) -> int:
    cmd = parsed.grocery_cmd

    if cmd == "add":
        try:
            draft = GroceryItemDraft(
                name=parsed.name,
                category=parsed.category,
                quantity=parsed.quantity,
                brand=parsed.brand,
            )
        except ValidationError as e:
            _print_validation_errors(e)
            return 1
        item = await service.add_item(draft)
        print(item.id)
        return 0

    await service.refresh()

    if cmd == "list":
        if not service.items:
            print("Your grocery list is empty")
            return 0
        for item in service.items:
            mark = "x" if item.checked else " "
            print(
                f"[{mark}] {item.id} {item.name} x{item.quantity} "
                f"({item.brand}, {item.category.value})"
            )
        summary = service.list_summary()
        print(f"\n{summary.total} items, {summary.checked} checked")
        return 0

    if cmd == "check":
        item = await service.toggle_item(parsed.id)
        print("checked" if item.checked else "unchecked")
        return 0

    if cmd == "remove":
        await service.delete_item(parsed.id)
        print("ok")
        return 0

    if cmd == "flyer-add":
        try:
            flyer = await service.add_flyer(parsed.url)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 1
        # Price extraction is not performed; the flyer is marked as processed.
        flyer = await service.mark_flyer(flyer.id, FlyerStatus.PROCESSED)
        print(f"{flyer.id} {flyer.store} {flyer.status.value}")
        return 0

    if cmd == "flyers":
        if not service.flyers:
            print("No flyers added")
            return 0
        for flyer in service.flyers:
            print(f"{flyer.id} {flyer.store:<8} {flyer.status.value:<10} {flyer.url}")
        return 0

    if cmd == "flyer-remove":
        await service.delete_flyer(parsed.id)
        print("ok")
        return 0

    print("Unknown grocery command", file=sys.stderr)
    return 1


def _show_savings(matches_file: Path) -> int:
    try:
        matches = load_matches(matches_file)
    except (FileNotFoundError, ValueError) as e:
        # pydantic.ValidationError is a ValueError subclass
        print(str(e), file=sys.stderr)
        return 1

    if not matches:
        print("No price matches")
        return 0

    for match in matches:
        deal = best_deal(match)
        print(f"{match.item}: best at {deal.store} ${deal.price:.2f} (save ${deal.savings:.2f})")
    print(f"\nTotal savings: ${total_savings(matches):.2f}")
    best = top_store(matches)
    if best is not None:
        print(f"Top store: {best[0]} (${best[1]:.2f})")
    return 0


async def _with_tracker(
    parsed: argparse.Namespace,
    settings: Settings,
    favorites: FavoriteStore,
    identity: Identity,
) -> int:
    repo = ApplicationRepository(parsed.db or settings.tracker_db_path)
    try:
        await repo.initialize()
        favorites.load()
        service = TrackerService(
            repo,
            favorites,
            identity,
            query=ListQuery(
                sort_key=settings.default_sort_key,
                direction=settings.default_sort_direction,
                page_size=settings.default_page_size,
            ),
        )
        return await _run_apps(parsed, settings, service)
    finally:
        await repo.close()


async def _with_grocery(
    parsed: argparse.Namespace, settings: Settings, identity: Identity
) -> int:
    repo = GroceryRepository(parsed.db or settings.tracker_db_path)
    try:
        await repo.initialize()
        return await _run_grocery(parsed, GroceryService(repo, identity))
    finally:
        await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    # Name sorting follows the user's collation locale
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Could not apply the system collation locale: {e}")

    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.debug(f"App-Tracker v{__version__} running {parsed.mode}")

    session = SessionManager(
        settings.session_path, timeout_minutes=settings.session_timeout_minutes
    )
    favorites = FavoriteStore(settings.favorites_path)

    # Favorites are device-local and do not outlive the session.
    def _on_auth_change(event: AuthEvent, _identity: Identity | None) -> None:
        if event == AuthEvent.SIGNED_OUT:
            favorites.clear()

    subscription = session.on_auth_state_change(_on_auth_change)

    try:
        if parsed.mode == "auth":
            return _handle_auth(parsed, session)

        try:
            identity = session.require_user()
        except NotAuthenticatedError:
            print(NOT_SIGNED_IN_MESSAGE, file=sys.stderr)
            return 1
        session.touch()

        if parsed.mode == "grocery" and parsed.grocery_cmd == "savings":
            return _show_savings(parsed.matches_file)

        try:
            if parsed.mode == "apps":
                return asyncio.run(_with_tracker(parsed, settings, favorites, identity))
            if parsed.mode == "grocery":
                return asyncio.run(_with_grocery(parsed, settings, identity))
        except RecordNotFoundError as e:
            print(str(e), file=sys.stderr)
            return 1
        except StoreError:
            print(STORE_ERROR_MESSAGE, file=sys.stderr)
            return 1

        print(f"Unknown mode: {parsed.mode}", file=sys.stderr)
        return 1
    finally:
        subscription.unsubscribe()


if __name__ == "__main__":
    sys.exit(main())
