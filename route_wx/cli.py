#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from typing import List, Optional

from route_wx.config import Settings
from route_wx.preflight import LoggingNotifier, PreflightMonitor
from route_wx.route import RouteBriefingService
from route_wx.sources import AvWxSource
from route_wx.stations import StationTable
from route_wx.weather import GhostStationService

logger = logging.getLogger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def _source(settings: Settings) -> AvWxSource:
    return AvWxSource(timeout=settings.timeout, base_url=settings.avwx_url)


def cmd_briefing(args, settings: Settings) -> int:
    service = RouteBriefingService(
        StationTable.from_csv(args.stations),
        source=_source(settings),
        corridor_nm=args.corridor,
        gap_threshold_nm=settings.gap_threshold_nm,
    )
    briefing = service.build_briefing(args.waypoints)
    if briefing is None:
        logger.error("Need at least 2 known waypoints, got %s", " ".join(args.waypoints))
        return 1
    _print_json(briefing.to_dict())
    return 0


def cmd_ghost(args, settings: Settings) -> int:
    service = GhostStationService(StationTable.from_csv(args.stations), source=_source(settings))
    estimate = service.estimate(args.ident)
    if estimate is None:
        logger.error("Not enough reporting stations near %s for an estimate", args.ident)
        return 1
    _print_json(estimate.to_dict())
    return 0


def cmd_monitor(args, settings: Settings) -> int:
    source = _source(settings)
    station = args.ident.strip().upper()
    snapshot = source.fetch_latest([station]).get(station)
    if snapshot is None or snapshot.degraded:
        logger.error("No current observation for %s, cannot start monitoring", station)
        return 1

    monitor = PreflightMonitor(source=source, notifier=LoggingNotifier(), fetch_timeout=settings.timeout)
    session = monitor.start(station, snapshot)
    task = monitor.run_in_background(session)
    try:
        task.join(timeout=args.minutes * 60)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        task.stop()

    _print_json(session.to_dict())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description='Route weather briefing and preflight monitoring')
    parser.add_argument('-s', '--stations', help='Station CSV file (OurAirports format)', default=settings.stations_path)
    parser.add_argument('-v', '--verbose', help='Verbose output', action='store_true')
    subparsers = parser.add_subparsers(dest='command', required=True)

    briefing = subparsers.add_parser('briefing', help='Weather briefing along a route')
    briefing.add_argument('waypoints', help='Waypoint identifiers in flight order', nargs='+')
    briefing.add_argument('-c', '--corridor', help='Corridor half-width in nm', type=float, default=settings.corridor_nm)
    briefing.set_defaults(func=cmd_briefing, needs_stations=True)

    ghost = subparsers.add_parser('ghost', help='Estimate weather at a station from its neighbours')
    ghost.add_argument('ident', help='Station identifier')
    ghost.set_defaults(func=cmd_ghost, needs_stations=True)

    monitor = subparsers.add_parser('monitor', help='Watch a station for weather changes before departure')
    monitor.add_argument('ident', help='Station identifier')
    monitor.add_argument('-m', '--minutes', help='How long to monitor', type=float, default=90)
    monitor.set_defaults(func=cmd_monitor, needs_stations=False)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.logging_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.needs_stations and not args.stations:
        parser.error('a station file is required (--stations or ROUTE_WX_STATIONS)')

    return args.func(args, settings)


if __name__ == '__main__':
    sys.exit(main())
