"""
Hotel Portal CLI
================
Load the catalog and review tree, then serve the portal.

Usage:
    hotel-portal -hotels input/hotels.json -reviews input/reviews
    hotel-portal -hotels input/hotels.json -reviews input/reviews -port 8090 -workers 8
"""

import argparse
import os

import uvicorn

from hotel_portal.services.ingestion import DEFAULT_GRACE_PERIOD, DEFAULT_WORKERS

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8090


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hotel-portal", description="Hotel information portal")
    parser.add_argument("-hotels", dest="hotels", help="Path to the hotel catalog JSON file")
    parser.add_argument("-reviews", dest="reviews", help="Directory tree of review JSON files")
    parser.add_argument("-host", dest="host", default=DEFAULT_HOST, help=f"Bind address (default: {DEFAULT_HOST})")
    parser.add_argument("-port", dest="port", type=int, default=DEFAULT_PORT, help=f"Port (default: {DEFAULT_PORT})")
    parser.add_argument(
        "-workers", dest="workers", type=int, default=DEFAULT_WORKERS,
        help=f"Review ingestion threads (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "-grace", dest="grace", type=float, default=DEFAULT_GRACE_PERIOD,
        help=f"Seconds to wait for ingestion to finish (default: {DEFAULT_GRACE_PERIOD:.0f})",
    )
    return parser


def apply_arguments(args: argparse.Namespace, environ=os.environ) -> None:
    """Hand the parsed flags to Settings through the environment."""
    if args.hotels:
        environ["HOTELS_PATH"] = args.hotels
    if args.reviews:
        environ["REVIEWS_PATH"] = args.reviews
    environ["INGEST_WORKERS"] = str(args.workers)
    environ["INGEST_GRACE_SECONDS"] = str(args.grace)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.workers < 1:
        parser.error("-workers must be at least 1")
    if args.grace < 0:
        parser.error("-grace must not be negative")

    apply_arguments(args)
    uvicorn.run("hotel_portal.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
