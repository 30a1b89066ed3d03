#!/usr/bin/env python3
"""
Tests for:
  - GET /servers and GET / (Starlette test client)
  - list_game_servers MCP tool
  - ProxySettings.from_env()
  - build_service() wiring

Run with:
    python -m pytest tests/test_server.py
"""
import unittest
from unittest.mock import patch

from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from fakes import FakeClock, FakeGamesApi, SleepRecorder, make_page, make_records
from game_server_proxy import server
from game_server_proxy.config import ProxySettings
from game_server_proxy.core.cache import FreshnessCache
from game_server_proxy.core.errors import UpstreamError
from game_server_proxy.core.service import ServerListingService


def _service(pages):
    api = FakeGamesApi(pages)
    cache = FreshnessCache(clock=FakeClock())
    return ServerListingService(cache, api, sleep=SleepRecorder()), api


def _client():
    app = Starlette(routes=[
        Route('/servers', server.servers_endpoint, methods=['GET']),
        Route('/', server.health_endpoint, methods=['GET']),
    ])
    return TestClient(app)


# ===========================================================================
# HTTP routes
# ===========================================================================

class TestServersEndpoint(unittest.TestCase):

    def test_returns_ranked_listing(self):
        records = make_records(3, playing=1) + [{'id': 'busy', 'playing': 12, 'fps': 59.7, 'ping': 80.2}]
        svc, api = _service([make_page(records, None)])
        with patch.object(server, 'service', svc):
            resp = _client().get('/servers', params={'gameId': '123', 'limit': '2'})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers['access-control-allow-origin'], '*')
        body = resp.json()
        self.assertEqual(body['gameId'], '123')
        self.assertEqual(body['total'], 4)
        self.assertEqual(body['count'], 2)
        self.assertEqual(
            body['servers'][0],
            {'jobId': 'busy', 'players': 12, 'maxPlayers': 20, 'fps': 60, 'ping': 80},
        )
        self.assertEqual(api.calls, [('123', '')])

    def test_place_id_alias(self):
        svc, api = _service([make_page(make_records(2), None)])
        with patch.object(server, 'service', svc):
            resp = _client().get('/servers', params={'placeId': '456'})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['gameId'], '456')

    def test_invalid_game_id_is_400(self):
        svc, api = _service([])
        with patch.object(server, 'service', svc):
            client = _client()
            for params in ({}, {'gameId': ''}, {'gameId': 'abc'}):
                with self.subTest(params=params):
                    resp = client.get('/servers', params=params)
                    self.assertEqual(resp.status_code, 400)
                    self.assertEqual(resp.json(), {'error': 'Missing or invalid gameId'})
        self.assertEqual(api.calls, [])

    def test_upstream_failure_is_500(self):
        svc, _ = _service([UpstreamError(429, '123')])
        with patch.object(server, 'service', svc):
            resp = _client().get('/servers', params={'gameId': '123'})
        self.assertEqual(resp.status_code, 500)
        self.assertIn('429', resp.json()['error'])
        self.assertNotIn('servers', resp.json())


class TestHealthEndpoint(unittest.TestCase):

    def test_health(self):
        resp = _client().get('/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['status'], 'ok')
        self.assertTrue(resp.json()['message'])


# ===========================================================================
# MCP tool
# ===========================================================================

class TestListGameServersTool(unittest.IsolatedAsyncioTestCase):

    async def test_returns_listing_body(self):
        svc, _ = _service([make_page(make_records(5), None)])
        with patch.object(server, 'service', svc):
            body = await server.list_game_servers('123', 3)
        self.assertEqual(body['count'], 3)
        self.assertEqual(len(body['servers']), 3)

    async def test_returns_error_body(self):
        svc, _ = _service([])
        with patch.object(server, 'service', svc):
            body = await server.list_game_servers('not-a-number')
        self.assertEqual(body, {'error': 'Missing or invalid gameId'})


# ===========================================================================
# Configuration
# ===========================================================================

class TestProxySettings(unittest.TestCase):

    def test_defaults(self):
        settings = ProxySettings.from_env({})
        self.assertEqual(settings.port, 3000)
        self.assertEqual(settings.cache_ttl_seconds, 20.0)
        self.assertEqual(settings.page_delay_seconds, 0.3)
        self.assertEqual(settings.max_pages, 3)
        self.assertEqual(settings.default_limit, 30)
        self.assertEqual(settings.max_limit, 100)
        self.assertIsNone(settings.cache_max_entries)
        self.assertFalse(settings.coalesce_requests)

    def test_reads_environment(self):
        settings = ProxySettings.from_env({
            'PORT': '8080',
            'CACHE_TTL_MS': '5000',
            'PAGE_DELAY_MS': '0',
            'CACHE_MAX_ENTRIES': '500',
            'COALESCE_REQUESTS': 'true',
            'USER_AGENT': 'TestAgent/2.0',
        })
        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.cache_ttl_seconds, 5.0)
        self.assertEqual(settings.page_delay_seconds, 0.0)
        self.assertEqual(settings.cache_max_entries, 500)
        self.assertTrue(settings.coalesce_requests)
        self.assertEqual(settings.user_agent, 'TestAgent/2.0')

    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError):
            ProxySettings.from_env({'PORT': 'eighty'})
        with self.assertRaises(ValueError):
            ProxySettings.from_env({'PORT': '0'})

    def test_build_service_applies_settings(self):
        settings = ProxySettings.from_env({'CACHE_TTL_MS': '1000', 'MAX_LIMIT': '50', 'CACHE_MAX_ENTRIES': '3'})
        svc = server.build_service(settings)
        self.assertEqual(svc.cache.ttl_seconds, 1.0)
        self.assertEqual(svc.cache.max_entries, 3)
        self.assertEqual(svc.max_limit, 50)


if __name__ == '__main__':
    unittest.main()
