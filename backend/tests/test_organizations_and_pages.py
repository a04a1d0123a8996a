import json
import logging

from fastapi.testclient import TestClient
from edubridge.main import app

client = TestClient(app)


def test_list_organizations():
    r = client.get('/api/organizations')
    assert r.status_code == 200
    names = [o['name'] for o in r.json()]
    assert 'Acme Labs' in names and 'Bright Futures' in names
    assert set(r.json()[0]) == {'id', 'name'}


def test_health_and_request_id():
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}
    assert 'X-Request-ID' in r.headers


def test_request_id_is_propagated():
    r = client.get('/api/organizations', headers={'X-Request-ID': 'abc123'})
    assert r.headers['X-Request-ID'] == 'abc123'


def test_unknown_route_uses_error_shape():
    r = client.get('/api/nope')
    assert r.status_code == 404
    assert 'error' in r.json()


def test_home_links_list_page():
    r = client.get('/')
    assert r.status_code == 200
    assert '/static/index.html' in r.text


def test_static_client_is_served():
    for path in ('/static/index.html', '/static/form.html', '/static/css/style.css'):
        assert client.get(path).status_code == 200
    js = client.get('/static/js/script.js')
    assert js.status_code == 200
    # escaping and client-side filtering helpers ship with the page
    assert 'function escapeHTML' in js.text
    assert "'<': '&lt;'" in js.text
    assert 'function filterOpportunities' in js.text
    assert 'toLowerCase().includes(q)' in js.text


def test_api_requests_are_logged_as_json(caplog):
    caplog.set_level(logging.INFO, logger='edubridge.api')
    client.get('/api/organizations', headers={'X-Request-ID': 'log-1'})
    lines = [r.getMessage() for r in caplog.records if r.getMessage().startswith('request_done ')]
    assert lines
    fields = json.loads(lines[-1].split(' ', 1)[1])
    assert fields['request_id'] == 'log-1'
    assert fields['path'] == '/api/organizations'
    assert fields['method'] == 'GET'
    assert fields['status_code'] == 200
    assert 'duration_ms' in fields
