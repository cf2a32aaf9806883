#!/usr/bin/env python3
"""Watch the vessel feed from the command line.

Polls the vessel list, prints the vessel partition after each poll and,
optionally, fetches one vessel's historical route.

Usage
-----
Set environment variables and run::

    export AIS_BASE_URL="https://ais.example.com"
    python scripts/watch_vessels.py

Options::

    --search NAME        Filter the list by vessel name
    --field FIELD        Search field (VesselName, MMSI, IMO, CallSign)
    --mmsi 574001230     Also fetch and print this vessel's route
    --hours 6            Route window in hours
    --polls 3            Number of polls before exiting (0 = forever)
    --boundaries FILE    GeoJSON boundary layer(s) to load first
    --json               Output the store as GeoJSON at the end
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyaismap import AisMapClient, AisMapConfig, AisMapError, PollStatus, SearchField  # noqa: E402
from pyaismap.models.feature import FeaturePartition  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _vessel_row(properties: dict[str, Any], coordinates: list[float]) -> str:
    lon, lat = coordinates
    course = properties.get("course")
    course_text = f"{course:5.1f}" if isinstance(course, (int, float)) else "  -  "
    kind = "AtoN" if properties.get("is_aid_to_navigation") else "ship"
    return (
        f"  {properties.get('mmsi', ''):>11}  {str(properties.get('name', ''))[:24]:<24}"
        f"  {lat:9.5f} {lon:10.5f}  cog={course_text}  {kind:<4}  {properties.get('destination') or ''}"
    )


def _print_vessels(client: AisMapClient, out: list[str]) -> None:
    features = client.store.partition(FeaturePartition.VESSEL)
    out.append(_section(f"VESSELS ({len(features)})"))
    for feature in sorted(features, key=lambda f: f.id):
        out.append(_vessel_row(feature.properties, feature.geometry.coordinates))


def _on_error(error: AisMapError) -> None:
    print(f"!! {error.kind.value if error.kind else 'error'}: {error}", file=sys.stderr)


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Poll the vessel feed and print the reconciled map features.",
    )
    parser.add_argument("--search", help="Filter value for the vessel list")
    parser.add_argument(
        "--field",
        default=SearchField.VESSEL_NAME.value,
        choices=[f.value for f in SearchField],
        help="Search field",
    )
    parser.add_argument("--mmsi", help="Fetch and print this vessel's route")
    parser.add_argument("--hours", type=int, default=None, help="Route window in hours")
    parser.add_argument("--polls", type=int, default=1, help="Number of polls (0 = run until interrupted)")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    parser.add_argument("--boundaries", nargs="*", default=[], help="GeoJSON boundary files to load")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output GeoJSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    config = AisMapConfig.from_env(**overrides)

    out: list[str] = []
    out.append(_section("pyaismap watch_vessels"))
    out.append(f"  time      : {datetime.now(UTC).isoformat()}")
    out.append(f"  endpoint  : {config.request_url}")

    async with AisMapClient(config, on_error=_on_error) as client:
        if args.boundaries:
            count = client.load_boundaries(*args.boundaries)
            out.append(f"  boundaries: {count} features")

        if not args.json_mode:
            print("\n".join(out))
            out = []

        polls = 0
        while args.polls == 0 or polls < args.polls:
            if polls == 0 and args.search:
                result = await client.set_query(args.field, args.search)
            elif polls == 0:
                result = await client.refresh()
            else:
                await asyncio.sleep(config.poll_interval)
                result = await client.refresh()
            polls += 1

            if result.status == PollStatus.APPLIED and not args.json_mode:
                _print_vessels(client, out)
                print("\n".join(out))
                out = []

        if args.mmsi:
            route_result = await client.select(args.mmsi, args.hours)
            route = route_result.route if route_result is not None else None
            if not args.json_mode:
                out.append(_section(f"ROUTE {args.mmsi}"))
                if route is None:
                    out.append(f"  no route ({client.routes.state.value})")
                else:
                    for point in route.points:
                        stamp = point.timestamp.isoformat() if point.timestamp else "-"
                        out.append(f"  {point.latitude:9.5f} {point.longitude:10.5f}  {stamp}")
                print("\n".join(out))

        geojson = client.geojson()

    # ── Output ──
    if args.json_mode:
        payload = json.dumps(geojson, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"GeoJSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
    elif args.output:
        Path(args.output).write_text(
            json.dumps(geojson, indent=2, default=str, ensure_ascii=False),
            encoding="utf-8",
        )
        print(f"GeoJSON written to {args.output}")


if __name__ == "__main__":
    asyncio.run(main())
