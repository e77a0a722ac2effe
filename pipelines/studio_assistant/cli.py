#!/usr/bin/env python
"""
CLI entry point for the Studio Assistant.

Run this script directly, or through the installed console script:
    studio-assistant businesses
    studio-assistant signup-owner --business-name "Flow Yoga" --category Yoga ...
    studio-assistant slots --business-id biz_123
    studio-assistant chat --business-id biz_123 --role user --email jane@example.com

Options via environment variables:
    STUDIO_STATE_FILE          JSON state file (default: .studio/state.json)
    STUDIO_ASSISTANT_CONFIG    YAML file overriding assistant.yaml
    STUDIO_LOG_LEVEL           Log level (default: INFO)
    LLM_API_KEY                API key for the OpenAI-compatible endpoint
    LLM_MODEL                  Model name (default: gpt-4o-mini)
    LLM_BASE_URL               Custom endpoint (Azure / local gateway)

Command line arguments:
    --state-file               Override STUDIO_STATE_FILE for this run
"""

import argparse
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path for direct script execution
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from rich.console import Console

from core.infrastructure.message_bus import MessageBus
from core.infrastructure.state_store import JsonFileStateStore
from core.llm_client import LLMClient
from core.logger import get_logger
from pipelines.studio_assistant.accounts import AccountService
from pipelines.studio_assistant.agents.interpretation_gateway import InterpretationGateway
from pipelines.studio_assistant.config import HORIZON_DAYS, PIPELINE_NAME, STATE_FILE
from pipelines.studio_assistant.directory import BusinessDirectory
from pipelines.studio_assistant.errors import StudioError
from pipelines.studio_assistant.pipeline import build_pipeline, run_turn
from pipelines.studio_assistant.scheduling.availability import project_upcoming_slots
from pipelines.studio_assistant.session import ConversationSession
from pipelines.studio_assistant.utils.timeslots import zone_for

logger = get_logger(__name__)
console = Console()

EXIT_COMMANDS = {"exit", "quit", ":q"}


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Studio Assistant - scheduling assistant for yoga studios and gyms",
    )
    parser.add_argument(
        "--state-file",
        default=str(STATE_FILE),
        help=f"JSON state file (default: {STATE_FILE})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    businesses = subparsers.add_parser("businesses", help="List stored businesses")
    businesses.add_argument("-z", "--zipcode", default=None, help="Only this zipcode")

    signup = subparsers.add_parser("signup-owner", help="Create an owner account and business")
    signup.add_argument("--business-name", required=True)
    signup.add_argument("--category", required=True,
                        choices=["Yoga", "Fitness", "Yoga & Fitness Center"])
    signup.add_argument("--address", required=True)
    signup.add_argument("--zipcode", required=True)
    signup.add_argument("--email", required=True)
    signup.add_argument("--password", required=True)

    slots = subparsers.add_parser("slots", help="Show upcoming slots for a business")
    slots.add_argument("-b", "--business-id", required=True)
    slots.add_argument("--days", type=int, default=HORIZON_DAYS,
                       help=f"Lookahead in days (default: {HORIZON_DAYS})")

    cancel = subparsers.add_parser("cancel", help="Cancel an appointment by id")
    cancel.add_argument("appointment_id")

    chat = subparsers.add_parser("chat", help="Interactive assistant session")
    chat.add_argument("-b", "--business-id", required=True)
    chat.add_argument("-r", "--role", choices=["user", "business_owner"], default="user")
    chat.add_argument("-e", "--email", default=None,
                      help="Email of a stored account to chat as (default: anonymous)")

    return parser.parse_args(argv)


def _list_businesses(directory: BusinessDirectory, args) -> int:
    businesses = directory.list_businesses(zipcode=args.zipcode)
    if not businesses:
        console.print("No businesses stored.")
        return 0
    for business in businesses:
        console.print(
            f"[bold]{business.name}[/bold] ({business.type}) id={business.id} "
            f"zipcode={business.zipcode} services={len(business.services)} "
            f"appointments={len(business.appointments)}"
        )
    return 0


def _signup_owner(accounts: AccountService, args) -> int:
    owner = accounts.signup("business_owner", {
        "business_name": args.business_name,
        "category": args.category,
        "address": args.address,
        "zipcode": args.zipcode,
        "email": args.email,
        "password": args.password,
    })
    console.print(f"✓ Owner {owner.email} created business {owner.business_id}")
    return 0


def _show_slots(directory: BusinessDirectory, args) -> int:
    business = directory.get_business(args.business_id)
    slots = project_upcoming_slots(
        business.services,
        datetime.now(timezone.utc),
        args.days,
        tz=zone_for(business.timezone),
    )
    if not slots:
        console.print(f"No upcoming slots in the next {args.days} days.")
    for slot in slots:
        console.print(f"- {slot.describe()}")
    return 0


def _cancel(directory: BusinessDirectory, args) -> int:
    if directory.cancel_appointment(args.appointment_id):
        console.print(f"✓ Cancelled {args.appointment_id}")
        return 0
    console.print(f"Appointment {args.appointment_id} not found")
    return 1


def _chat(store, directory: BusinessDirectory, accounts: AccountService, args) -> int:
    business = directory.get_business(args.business_id)
    user = None
    if args.email:
        user = next(
            (u for u in accounts.list_users() if u.email.lower() == args.email.lower()),
            None,
        )
        if user is None:
            logger.error(f"No account with email {args.email}")
            return 1

    bus = MessageBus()
    bus.subscribe("appointment.created", lambda e: console.print(
        f"[green]Booked[/green] {e['service_name']} at {e['start_time']} ({e['appointment_id']})"
    ))
    bus.subscribe("service.created", lambda e: console.print(
        f"[green]Service created[/green] {e['name']} ({e['service_id']})"
    ))
    bus.subscribe("announcement.created", lambda e: console.print(
        f"[green]Announcement posted[/green] {e['message']}"
    ))

    session = ConversationSession(store, f"cli-{uuid.uuid4().hex[:8]}", business.id)
    gateway = InterpretationGateway(LLMClient.from_env())
    pipeline = build_pipeline(directory, gateway, session=session, bus=bus)

    console.print(f"Chatting with [bold]{business.name}[/bold] as {args.role}. Type 'exit' to leave.")
    while True:
        try:
            message = console.input("[bold cyan]you>[/bold cyan] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            return 0
        if not message:
            continue
        if message.lower() in EXIT_COMMANDS:
            return 0

        result = run_turn(pipeline, message, args.role, business, user=user, session=session)
        response = result["assistant_response"]
        console.print(f"[bold magenta]assistant>[/bold magenta] "
                      f"{response.response.assistant_reply or '(no reply)'}")
        for question in response.response.clarifying_questions or []:
            console.print(f"  ? {question}")
        for error in response.response.errors or []:
            console.print(f"  [red]! {error}[/red]")
        # Reload so the next turn sees anything this one wrote
        business = directory.get_business(business.id)


def main(argv=None):
    """Main entry point for the Studio Assistant CLI."""
    args = parse_args(argv)

    logger.info("=" * 60)
    logger.info(f"Running {PIPELINE_NAME}: {args.command}")
    logger.info(f"  State file: {args.state_file}")
    logger.info("=" * 60)

    store = JsonFileStateStore(args.state_file)
    directory = BusinessDirectory(store)
    accounts = AccountService(store, directory)

    try:
        if args.command == "businesses":
            return _list_businesses(directory, args)
        if args.command == "signup-owner":
            return _signup_owner(accounts, args)
        if args.command == "slots":
            return _show_slots(directory, args)
        if args.command == "cancel":
            return _cancel(directory, args)
        return _chat(store, directory, accounts, args)
    except StudioError as e:
        logger.error(f"✗ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
