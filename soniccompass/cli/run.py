"""Standalone CLI for the SonicCompass flows.

Usage::

    python -m soniccompass.cli search Spartanburg --radius 50
    python -m soniccompass.cli playlist "Asheville, NC" --genre Rock --days 60 --json
    python -m soniccompass.cli publish Spartanburg --access-token "$TOKEN"

Log lines go to stderr so stdout carries only the results.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from pydantic import ValidationError

from soniccompass.models.concert import ConcertRecord, DateWindow, PlaceQuery
from soniccompass.models.playlist import PlaylistEntry, PublishResult

_DEFAULT_RADIUS = 50


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_concerts(concerts: list[ConcertRecord]) -> str:
    if not concerts:
        return "No concerts found."
    lines = [f"{len(concerts)} concerts", "-" * 40]
    for concert in concerts:
        lines.append(f"  {concert.date}  {concert.artist_name}")
        lines.append(f"      {concert.venue_name}, {concert.location}  [{concert.genre}]")
    return "\n".join(lines)


def _format_playlist(entries: list[PlaylistEntry]) -> str:
    if not entries:
        return "Playlist is empty."
    lines = [f"{len(entries)} songs", "-" * 40]
    for position, entry in enumerate(entries, start=1):
        link = entry.video_link or "(no video found)"
        lines.append(f"  {position:>2}. {entry.song_title} by {entry.artist_name}")
        lines.append(f"      {link}")
    return "\n".join(lines)


def _format_publish(result: PublishResult) -> str:
    lines = [
        f"Created {result.playlist.title}",
        f"  {result.playlist.url}",
        f"  Added {len(result.added)} of {result.attempted} songs",
    ]
    for failure in result.failures:
        lines.append(f"  skipped: {failure.artist_name} - {failure.song_title} ({failure.reason})")
    return "\n".join(lines)


def _dump(payload: object) -> str:
    return json.dumps(payload, indent=2, default=str)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace) -> int:
    """Build the pipeline, run the requested flow, print the result."""
    # Deferred: importing soniccompass.main reads settings and builds the app.
    import httpx

    from soniccompass.main import build_pipeline, config, settings
    from soniccompass.utils.errors import SonicCompassError
    from soniccompass.utils.logging import configure_logging

    configure_logging(
        log_level="WARNING" if args.quiet else settings.log_level,
        stream=sys.stderr,
    )

    try:
        query = PlaceQuery(
            city_name=args.city,
            radius_miles=args.radius,
            genre=args.genre,
            date_window_days=DateWindow(args.days) if args.days else None,
        )
    except ValidationError as exc:
        print(f"Error: Invalid search: {exc.errors()[0].get('msg', 'bad value')}", file=sys.stderr)
        return 1

    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http_client:
        pipeline, _registry = build_pipeline(settings, http_client, app_config=config)
        session = pipeline.create_session()
        sid = session.session_id

        try:
            search = await pipeline.search_concerts(sid, query)
            if args.command == "search":
                if args.json:
                    print(_dump([c.model_dump(mode="json") for c in search.concerts]))
                else:
                    print(_format_concerts(search.concerts))
                return 0

            generation = await pipeline.generate_playlist(sid)
            if args.command == "playlist":
                if args.json:
                    print(_dump([e.model_dump(mode="json") for e in generation.playlist]))
                else:
                    print(_format_playlist(generation.playlist))
                return 0

            await pipeline.sign_in(sid, args.access_token)
            result = await pipeline.publish_playlist(sid)
        except SonicCompassError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        if args.json:
            print(
                _dump(
                    {
                        "playlist_id": result.playlist.playlist_id,
                        "title": result.playlist.title,
                        "url": result.playlist.url,
                        "added": len(result.added),
                        "failures": [f.model_dump() for f in result.failures],
                    }
                )
            )
        else:
            print(_format_publish(result))
        return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soniccompass",
        description="Find concerts near a city and turn them into a playlist.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(p: argparse.ArgumentParser) -> None:
        p.add_argument("city", help="City or place name, e.g. 'Spartanburg'")
        p.add_argument("--radius", type=int, default=_DEFAULT_RADIUS, help="Radius in miles")
        p.add_argument("--genre", default=None, help="Keyword filter, e.g. Rock")
        p.add_argument(
            "--days",
            type=int,
            choices=[int(w) for w in DateWindow],
            default=None,
            help="Only concerts in the next N days",
        )
        p.add_argument("--json", action="store_true", help="Print JSON instead of text")
        p.add_argument("--quiet", action="store_true", help="Only log warnings and errors")

    _common(sub.add_parser("search", help="List concerts near a city"))
    _common(sub.add_parser("playlist", help="Generate a song playlist from the concerts"))
    publish = sub.add_parser("publish", help="Save the playlist to YouTube")
    _common(publish)
    publish.add_argument(
        "--access-token",
        required=True,
        help="Google OAuth access token with the YouTube scope",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.json:
        args.quiet = True
    return asyncio.run(_run(args))
