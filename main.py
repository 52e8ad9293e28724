"""
Demo command line for the appointment engine.

Seeds the in-memory demo barbershop and runs one query against it.

Usage:
    python main.py availability --date 2026-11-03 --service svc-haircut
    python main.py availability --date 2026-11-03 --service svc-haircut --resource res-joao
    python main.py book --date 2026-11-03 --start 10:00 --service svc-haircut \
        --service svc-beard --name "Ana Souza" --phone "+55 11 99999-0000"
"""

import argparse
import json
import logging
import sys
from datetime import date

from pydantic import ValidationError

from appointment_engine.config import settings
from appointment_engine.errors import SchedulingError
from appointment_engine.schemas.booking_schema import (
    BookingResponse,
    CreateBookingRequest,
    ResourceAvailability,
    ServiceBooking,
)
from appointment_engine.schemas.customer_schema import CustomerInfo
from appointment_engine.seed import DEMO_OWNER_ID, build_demo_context
from appointment_engine.services import AvailabilityService, BookingService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"{settings.engine_name} demo")
    parser.add_argument("--mode", choices=["shared_resource", "per_service"],
                        default=settings.scheduling.assignment_mode,
                        help="How services of one reservation are assigned to barbers")
    sub = parser.add_subparsers(dest="command", required=True)

    avail = sub.add_parser("availability", help="List available start times")
    avail.add_argument("--date", type=date.fromisoformat, required=True)
    avail.add_argument("--service", action="append", required=True, dest="services")
    avail.add_argument("--resource", default=None)

    book = sub.add_parser("book", help="Create a reservation")
    book.add_argument("--date", type=date.fromisoformat, required=True)
    book.add_argument("--start", required=True)
    book.add_argument("--service", action="append", required=True, dest="services")
    book.add_argument("--resource", default=None)
    book.add_argument("--name", required=True)
    book.add_argument("--phone", required=True)
    book.add_argument("--email", default=None)
    return parser


def _run_availability(args: argparse.Namespace) -> object:
    context = build_demo_context(assignment_mode=args.mode)
    result = AvailabilityService(context).compute_availability(
        DEMO_OWNER_ID, args.resource, args.services, args.date,
    )
    if result and isinstance(result[0], ResourceAvailability):
        return [r.model_dump() for r in result]
    return result


def _run_book(args: argparse.Namespace) -> object:
    context = build_demo_context(assignment_mode=args.mode)
    request = CreateBookingRequest(
        owner_id=DEMO_OWNER_ID,
        services=[ServiceBooking(service_id=s, resource_id=args.resource) for s in args.services],
        appointment_date=args.date,
        start_time=args.start,
        customer=CustomerInfo(name=args.name, phone=args.phone, email=args.email),
    )
    bookings = BookingService(context).create_booking(request)
    return [BookingResponse.from_booking(b).model_dump(mode="json") for b in bookings]


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    handlers = {"availability": _run_availability, "book": _run_book}
    try:
        output = handlers[args.command](args)
    except SchedulingError as exc:
        logger.error("%s", exc)
        print(json.dumps({"error": exc.code, "message": exc.message}), file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(json.dumps({"error": "ValidationError", "message": str(exc)}), file=sys.stderr)
        return 2
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
