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
Public read-only HTTP API over a LogStore.

    GET /api/logs                        list log files
    GET /api/stats                       running logger statistics
    GET /api/logs/{name}?lines=N&filter=S  raw lines
    GET /api/logs/{name}/stats           voyage summary
    GET /api/logs/{name}/download        file download

File analysis and reads run in the default executor so the sentence
callbacks on the loop are not held up by disk I/O.
"""
import asyncio
import errno
import logging

from aiohttp import web

try:
    from .. import config
    from ..core.errors import LogQueryError
    from ..locales.strings import ERRORS
except ImportError:
    import config
    from core.errors import LogQueryError
    from locales.strings import ERRORS

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey('store', object)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}

_ADDRESS_IN_USE = {errno.EADDRINUSE, getattr(errno, 'WSAEADDRINUSE', errno.EADDRINUSE)}


def _error(message, status):
    return web.json_response({'error': message}, status=status)


@web.middleware
async def error_middleware(request, handler):
    try:
        return await handler(request)
    except LogQueryError as e:
        return _error(str(e), e.status)
    except web.HTTPNotFound:
        return _error(ERRORS['not_found'], 404)
    except web.HTTPMethodNotAllowed:
        return _error('Method not allowed', 405)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.error(ERRORS['api_error'].format(error=e))
        return _error(str(e), 500)


@web.middleware
async def cors_middleware(request, handler):
    if request.method == 'OPTIONS':
        response = web.Response(status=200)
    else:
        response = await handler(request)
    response.headers.update(CORS_HEADERS)
    return response


async def _in_executor(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


def _int_param(request, name):
    try:
        return int(request.query.get(name, 0))
    except ValueError:
        return 0


async def list_logs(request):
    store = request.app[STORE_KEY]
    return web.json_response(await _in_executor(store.list_logs))


async def writer_stats(request):
    store = request.app[STORE_KEY]
    return web.json_response(store.writer_stats())


async def read_lines(request):
    store = request.app[STORE_KEY]
    name = request.match_info['name']
    result = await _in_executor(
        store.read_lines, name, request.query.get('filter', ''), _int_param(request, 'lines'))
    return web.json_response(result)


async def file_stats(request):
    store = request.app[STORE_KEY]
    result = await _in_executor(store.analyze, request.match_info['name'])
    return web.json_response(result)


async def download(request):
    store = request.app[STORE_KEY]
    path = store.resolve(request.match_info['name'])
    if store.writer is not None:
        store.writer.flush()
    filename = path.replace('\\', '/').rsplit('/', 1)[-1]
    return web.FileResponse(path, headers={
        'Content-Type': 'application/octet-stream',
        'Content-Disposition': f'attachment; filename="{filename}"',
    })


def create_app(store) -> web.Application:
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[STORE_KEY] = store
    app.router.add_get('/api/logs', list_logs)
    app.router.add_get('/api/stats', writer_stats)
    app.router.add_get('/api/logs/{name}', read_lines)
    app.router.add_get('/api/logs/{name}/stats', file_stats)
    app.router.add_get('/api/logs/{name}/download', download)
    return app


async def start_api_server(store, port=config.DEFAULT_API_PORT, host=config.API_HOST,
                           attempts=config.API_PORT_ATTEMPTS):
    """
    Starts the API, moving to the next port while the current one is busy.

    Returns:
        tuple: (AppRunner, bound port)

    Raises:
        OSError: no free port within `attempts` ports, or any other bind error
    """
    runner = web.AppRunner(create_app(store))
    await runner.setup()

    for candidate in range(port, port + max(attempts, 1)):
        site = web.TCPSite(runner, host, candidate)
        try:
            await site.start()
        except OSError as e:
            if e.errno not in _ADDRESS_IN_USE:
                await runner.cleanup()
                raise
            logger.error(ERRORS['port_busy'].format(port=candidate, next_port=candidate + 1))
            continue
        bound = runner.addresses[-1][1] if runner.addresses else candidate
        logger.info(f"NMEA logger public API on port {bound}")
        return runner, bound

    await runner.cleanup()
    raise OSError(errno.EADDRINUSE, ERRORS['no_free_port'].format(first=port, last=port + attempts - 1))


async def stop_api_server(runner):
    if runner is not None:
        await runner.cleanup()
