# tests/test_image.py
from smartbrain import db
from smartbrain.core.database import ImageEntry, User
from smartbrain.services.image_service import ImageService
from smartbrain.utils.exceptions import NotFoundError

import pytest


def test_put_image_increments_entries(client, make_user):
    user = make_user(entries=2)
    results = [{"value": 0.9, "topRow": "0.1", "leftCol": "0.1", "bottomRow": "0.2", "rightCol": "0.2"}]

    response = client.put('/api/image', json={
        'id': user.id,
        'imageUrl': 'https://example.com/a.jpg',
        'detectionResults': results,
    })
    assert response.status_code == 200
    assert response.json['entries'] == 3
    assert 'password_hash' not in response.json

    entry = ImageEntry.query.filter_by(user_id=user.id).one()
    assert entry.detection_results == results


def test_put_image_without_url_only_counts(client, make_user):
    user = make_user()

    response = client.put('/api/image', json={'id': str(user.id)})
    assert response.status_code == 200
    assert response.json['entries'] == 1
    assert ImageEntry.query.filter_by(user_id=user.id).count() == 0


def test_put_image_unknown_user(client):
    response = client.put('/api/image', json={'id': 555, 'imageUrl': 'https://example.com/a.jpg'})
    assert response.status_code == 404
    assert ImageEntry.query.count() == 0


def test_put_image_invalid_id(client):
    response = client.put('/api/image', json={'imageUrl': 'https://example.com/a.jpg'})
    assert response.status_code == 400


def test_record_entry_is_atomic(app, make_user, monkeypatch):
    user = make_user(entries=7)
    service = ImageService()

    def broken_add_entry(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(service.image_entries, 'add_entry', broken_add_entry)
    with pytest.raises(RuntimeError):
        service.record_entry(user.id, 'https://example.com/a.jpg', [])

    assert db.session.get(User, user.id).entries == 7
    assert ImageEntry.query.count() == 0


def test_record_entry_unknown_user(app):
    with pytest.raises(NotFoundError):
        ImageService().record_entry(404, 'https://example.com/a.jpg')


def test_profile(client, make_user):
    user = make_user(entries=9)

    response = client.get(f'/api/profile/{user.id}')
    assert response.status_code == 200
    assert response.json['entries'] == 9
    assert response.json['email'] == user.email
    assert 'isAuthorized' not in response.json


def test_profile_not_found(client):
    response = client.get('/api/profile/321')
    assert response.status_code == 404
    assert response.json == {'error': 'User not found'}


def test_user_list(client, make_user):
    make_user(entries=1)
    make_user(entries=2)

    response = client.get('/api')
    assert response.status_code == 200
    assert [user['entries'] for user in response.json] == [1, 2]
    assert all('email' not in user for user in response.json)


def test_health(client):
    response = client.get('/')
    assert response.status_code == 200
    assert response.json['status'] == 'healthy'


def test_put_image_non_object_body(client):
    response = client.put('/api/image', json=[1])
    assert response.status_code == 400
    assert response.json['error'] == 'Request body must be a JSON object'


def test_put_image_unusable_id(client):
    response = client.put('/api/image', json={'id': '³'})
    assert response.status_code == 400
    assert response.json['field'] == 'id'


def test_profile_unusable_id(client):
    response = client.get('/api/profile/99999999999999999999999')
    assert response.status_code == 400
