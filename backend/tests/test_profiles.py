from fastapi.testclient import TestClient
from edubridge.main import app

client = TestClient(app)


def _create(**overrides):
    data = {
        'fullName': 'Ada Lovelace',
        'email': 'ada@example.com',
        'phone': '555-0100',
        'skills': 'Python, Math',
        'education': 'BSc Mathematics',
        'experience': '2 years',
    }
    data.update(overrides)
    r = client.post('/api/profiles', json=data)
    assert r.status_code == 201
    return r.json()


def test_create_returns_stored_row():
    p = _create()
    assert isinstance(p['id'], int)
    assert p['fullName'] == 'Ada Lovelace'
    assert p['email'] == 'ada@example.com'
    assert p['createdAt'] and p['updatedAt']


def test_create_rejects_missing_email():
    r = client.post('/api/profiles', json={'fullName': 'No Email'})
    assert r.status_code == 400
    assert 'email' in r.json()['error']


def test_create_rejects_missing_body():
    r = client.post('/api/profiles')
    assert r.status_code == 400
    assert r.json() == {'error': 'Invalid or missing JSON data'}


def test_list_contains_created_profiles():
    p = _create(email='list@example.com')
    r = client.get('/api/profiles')
    assert r.status_code == 200
    assert p['id'] in [row['id'] for row in r.json()]


def test_get_returns_empty_certificates():
    p = _create(email='nocerts@example.com')
    r = client.get(f"/api/profiles/{p['id']}")
    assert r.status_code == 200
    body = r.json()
    assert body['certificates'] == []
    assert body['fullName'] == p['fullName']


def test_get_missing_is_not_found():
    r = client.get('/api/profiles/999999')
    assert r.status_code == 404
    assert r.json() == {'error': 'Profile not found'}


def test_update_changes_sent_fields_and_keeps_email():
    p = _create(email='keep@example.com')
    r = client.put(f"/api/profiles/{p['id']}", json={
        'fullName': 'Ada King',
        'skills': 'Analytical Engines',
        'email': 'changed@example.com',
    })
    assert r.status_code == 200
    updated = r.json()
    assert updated['fullName'] == 'Ada King'
    assert updated['skills'] == 'Analytical Engines'
    assert updated['email'] == 'keep@example.com'
    # not sent, so unchanged
    assert updated['phone'] == p['phone']
    assert updated['education'] == p['education']
    assert updated['experience'] == p['experience']
    assert updated['updatedAt'] >= p['updatedAt']

    fetched = client.get(f"/api/profiles/{p['id']}").json()
    assert fetched['fullName'] == 'Ada King'
    assert fetched['email'] == 'keep@example.com'


def test_update_missing_is_not_found():
    r = client.put('/api/profiles/999999', json={'fullName': 'Nobody'})
    assert r.status_code == 404


def test_delete_returns_prior_row_then_not_found():
    p = _create(email='gone@example.com')
    r = client.delete(f"/api/profiles/{p['id']}")
    assert r.status_code == 200
    body = r.json()
    assert body['message'] == 'Profile deleted successfully'
    assert body['deletedProfile']['id'] == p['id']
    assert body['deletedProfile']['email'] == 'gone@example.com'
    assert client.get(f"/api/profiles/{p['id']}").status_code == 404


def test_delete_missing_is_not_found():
    r = client.delete('/api/profiles/999999')
    assert r.status_code == 404
    assert r.json() == {'error': 'Profile not found'}


def test_update_rejects_null_full_name():
    p = _create(email='nullname@example.com')
    r = client.put(f"/api/profiles/{p['id']}", json={'fullName': None})
    assert r.status_code == 400
    assert 'fullName' in r.json()['error']
    assert client.get(f"/api/profiles/{p['id']}").json()['fullName'] == p['fullName']


def test_update_without_full_name_keeps_it():
    p = _create(email='phoneonly@example.com')
    r = client.put(f"/api/profiles/{p['id']}", json={'phone': '555-0199'})
    assert r.status_code == 200
    assert r.json()['fullName'] == p['fullName']
    assert r.json()['phone'] == '555-0199'
