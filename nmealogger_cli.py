#!/usr/bin/env python3
# NMEA0183 Logger - marine sentence logger and voyage analyzer
# Copyright (C) 2024 NMEA0183 Logger Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
NMEA0183 Logger CLI entry point.

`run` logs sentences from a TCP NMEA stream (or stdin) and serves the public
API until the stream ends. The other commands query the log directory and
print a JSON response.
"""
import asyncio
import dataclasses
import json
import os
import sys
import argparse
import logging

# Add script directory to path for imports
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from api.server import start_api_server, stop_api_server
from core.analyzer import analyze
from core.errors import LogQueryError
from core.options import LoggerOptions, options_schema
from core.query import LogStore, validate_filename
from core.service import LoggerService
from core.visualization import plot_track
import config
from locales.strings import ERRORS, STATUS

logger = logging.getLogger('nmealogger_cli')


def print_json(response):
    print(json.dumps(response, ensure_ascii=False, indent=2))


def error_response(message):
    return {"success": False, "error": message}


def parse_tcp_source(source):
    """'host:port' -> (host, port)"""
    host, sep, port = source.rpartition(':')
    if not sep or not host or not port.isdigit():
        raise ValueError(ERRORS['invalid_source'].format(source=source))
    return host, int(port)


def load_options(args):
    """Options from --options JSON, with --log-dir taking precedence."""
    if args.options:
        if not os.path.exists(args.options):
            raise ValueError(ERRORS['file_not_found'].format(file_path=args.options))
        options = LoggerOptions.from_json_file(args.options)
    else:
        options = LoggerOptions.from_dict({})
    if args.log_dir:
        options = dataclasses.replace(options, log_directory=args.log_dir)
    return options


async def _stdin_lines():
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            return
        yield line


async def _tcp_lines(host, port):
    reader, writer = await asyncio.open_connection(host, port)
    logger.info(f"Connected to NMEA source {host}:{port}")
    try:
        async for raw in reader:
            yield raw.decode('ascii', errors='replace')
    finally:
        writer.close()


async def run_logger(options, tcp_source=None, status_sink=None):
    """
    Runs the logger until the sentence source is exhausted.

    Returns:
        dict: writer statistics at the end of the run
    """
    status_sink = status_sink or (lambda message: logger.info(message))
    service = LoggerService(options, status_sink=status_sink)
    service.start(asyncio.get_running_loop())
    runner = None
    try:
        try:
            runner, port = await start_api_server(service.store, options.api_port)
        except OSError as e:
            message = ERRORS['api_unavailable'].format(error=e)
            logger.error(message)
            status_sink(message)
        else:
            service.api_port = port
            status_sink(STATUS['started'].format(port=port))

        lines = _tcp_lines(*tcp_source) if tcp_source else _stdin_lines()
        async for line in lines:
            service.bus.publish(config.SENTENCE_EVENT, line)
        return service.store.writer_stats()
    finally:
        await stop_api_server(runner)
        service.stop()
        status_sink(STATUS['stopped'])


def cmd_run(args):
    options = load_options(args)
    tcp_source = parse_tcp_source(args.tcp) if args.tcp else None
    try:
        stats = asyncio.run(run_logger(options, tcp_source))
    except KeyboardInterrupt:
        return {"success": True, "interrupted": True}
    return {"success": True, "stats": stats}


def cmd_list(args):
    store = LogStore(load_options(args).resolved_log_directory)
    return {"success": True, "logs": store.list_logs()}


def cmd_analyze(args):
    store = LogStore(load_options(args).resolved_log_directory)
    return {"success": True, "results": store.analyze(args.name)}


def cmd_lines(args):
    store = LogStore(load_options(args).resolved_log_directory)
    return {"success": True, "results": store.read_lines(args.name, args.filter, args.last)}


def cmd_delete(args):
    store = LogStore(load_options(args).resolved_log_directory)
    return {"success": True, "results": store.delete(args.name)}


def cmd_plot(args):
    store = LogStore(load_options(args).resolved_log_directory)
    summary = analyze(store.read_text(args.name))
    output = args.output
    if output is None:
        base = os.path.splitext(validate_filename(args.name))[0]
        output = os.path.join(os.getcwd(), f"{base}_track.png")
    path = plot_track(summary, output, title=validate_filename(args.name))
    return {
        "success": True,
        "graph": path,
        "track_points": summary.track_points,
        "total_distance_nm": summary.total_distance_nm,
    }


def cmd_schema(args):
    return {"success": True, "schema": options_schema()}


COMMANDS = {
    'run': cmd_run,
    'list': cmd_list,
    'analyze': cmd_analyze,
    'lines': cmd_lines,
    'delete': cmd_delete,
    'plot': cmd_plot,
    'schema': cmd_schema,
}


def build_parser():
    parser = argparse.ArgumentParser(description='NMEA0183 sentence logger and voyage analyzer')
    parser.add_argument('--options', help='Path to JSON file with logger options', default=None)
    parser.add_argument('--log-dir', dest='log_dir', help='Log directory (overrides options)', default=None)
    parser.add_argument('--log-level', dest='log_level', help='Logging level (default: INFO for run, ERROR otherwise)',
                        default=None, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    sub = parser.add_subparsers(dest='command', required=True)

    run = sub.add_parser('run', help='Log sentences from a TCP source or stdin and serve the API')
    run.add_argument('--tcp', help='NMEA TCP source as HOST:PORT (default: stdin)', default=None)

    sub.add_parser('list', help='List log files')

    analyze_p = sub.add_parser('analyze', help='Voyage summary of a log file')
    analyze_p.add_argument('name', help='Log file name')

    lines = sub.add_parser('lines', help='Raw lines of a log file')
    lines.add_argument('name', help='Log file name')
    lines.add_argument('--filter', help='Case-insensitive substring filter', default=None)
    lines.add_argument('--last', type=int, help='Only the last N lines (0 = all)', default=0)

    delete = sub.add_parser('delete', help='Delete a log file')
    delete.add_argument('name', help='Log file name')

    plot = sub.add_parser('plot', help='Render the track of a log file to PNG')
    plot.add_argument('name', help='Log file name')
    plot.add_argument('--output', help='Output PNG path', default=None)

    sub.add_parser('schema', help='Print the options schema')
    return parser


def main(argv=None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    level = args.log_level or ('INFO' if args.command == 'run' else 'ERROR')
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(levelname)s: %(message)s',
        stream=sys.stderr
    )

    try:
        response = COMMANDS[args.command](args)
    except LogQueryError as e:
        response = error_response(str(e))
    except (ValueError, OSError) as e:
        response = error_response(str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        response = error_response(f"Unexpected error: {str(e)}")

    print_json(response)
    if not response.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
