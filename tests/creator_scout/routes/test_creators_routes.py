"""Tests for /api/creators search, CRUD and bulk delete."""
from unittest.mock import patch, MagicMock

import pytest

from creator_scout.store import StoreError


class TestSearch:

    def test_post_filters(self, client, store):
        store.upsert_batch([
            {'username': 'big', 'follower_count': 50000, 'is_verified': True},
            {'username': 'small', 'follower_count': 500, 'is_verified': False},
        ])
        resp = client.post('/api/creators/search', json={'minFollowers': 1000})
        data = resp.get_json()
        assert resp.status_code == 200
        assert data['success'] is True
        assert data['total'] == 1
        assert data['creators'][0]['username'] == 'big'

    def test_get_query_args(self, client, store):
        store.upsert_batch([{'username': 'v', 'is_verified': True}, {'username': 'n', 'is_verified': False}])
        data = client.get('/api/creators/search?isVerified=true').get_json()
        assert [c['username'] for c in data['creators']] == ['v']

    def test_empty_database(self, client):
        data = client.post('/api/creators/search', json={}).get_json()
        assert data == {'success': True, 'creators': [], 'total': 0}

    def test_store_error_returns_500(self, client):
        failing = MagicMock()
        failing.query.side_effect = StoreError('query', 'timeout')
        with patch('creator_scout.routes.creators.get_store', return_value=failing):
            resp = client.post('/api/creators/search', json={})
        assert resp.status_code == 500
        assert resp.get_json()['success'] is False


class TestCreate:

    def test_creates_normalized_record(self, client):
        resp = client.post('/api/creators', json={'username': ' jane ', 'followers': '1200', 'verified': 'yes'})
        assert resp.status_code == 201
        creator = resp.get_json()['creator']
        assert creator['username'] == 'jane'
        assert creator['follower_count'] == 1200
        assert creator['is_verified'] is True
        assert creator['source_keyword'] == 'manual'

    def test_username_required(self, client):
        resp = client.post('/api/creators', json={'full_name': 'No Handle'})
        assert resp.status_code == 400

    def test_duplicate_username_conflict(self, client):
        client.post('/api/creators', json={'username': 'jane'})
        resp = client.post('/api/creators', json={'username': 'jane'})
        assert resp.status_code == 409


class TestGetUpdateDelete:

    def _create(self, client, **fields):
        return client.post('/api/creators', json={'username': 'jane', **fields}).get_json()['creator']

    def test_get(self, client):
        created = self._create(client)
        resp = client.get(f"/api/creators/{created['id']}")
        assert resp.status_code == 200
        assert resp.get_json()['creator']['username'] == 'jane'

    def test_get_missing(self, client):
        assert client.get('/api/creators/999').status_code == 404

    def test_patch(self, client):
        created = self._create(client, category='Travel')
        resp = client.patch(f"/api/creators/{created['id']}", json={'category': 'Food'})
        assert resp.status_code == 200
        assert resp.get_json()['creator']['category'] == 'Food'

    def test_patch_blank_username_rejected(self, client):
        created = self._create(client)
        resp = client.patch(f"/api/creators/{created['id']}", json={'username': '  '})
        assert resp.status_code == 400

    def test_patch_coerces_values(self, client):
        created = self._create(client)
        resp = client.patch(f"/api/creators/{created['id']}",
                            json={'follower_count': '5000', 'is_verified': 'yes', 'engagement_rate': 3})
        creator = resp.get_json()['creator']
        assert resp.status_code == 200
        assert creator['follower_count'] == 5000
        assert creator['is_verified'] is True
        assert creator['engagement_rate'] == pytest.approx(0.03)

    def test_patch_rejects_unparseable_number(self, client):
        created = self._create(client, followers=10)
        resp = client.patch(f"/api/creators/{created['id']}", json={'follower_count': 'lots'})
        assert resp.status_code == 400
        assert 'follower_count' in resp.get_json()['error']
        assert client.get(f"/api/creators/{created['id']}").get_json()['creator']['follower_count'] == 10

    def test_duplicate_scan_after_patch(self, client):
        created = self._create(client)
        client.post('/api/creators', json={'username': 'JANE'})
        client.patch(f"/api/creators/{created['id']}", json={'follower_count': 'lots'})
        client.patch(f"/api/creators/{created['id']}", json={'follower_count': '900'})
        resp = client.get('/api/duplicates')
        assert resp.status_code == 200
        assert resp.get_json()['groups'][0]['survivor_id'] == created['id']

    def test_patch_list_body_rejected(self, client):
        created = self._create(client)
        assert client.patch(f"/api/creators/{created['id']}", json=[1]).status_code == 400

    def test_patch_missing(self, client):
        assert client.patch('/api/creators/999', json={'category': 'x'}).status_code == 404

    def test_delete(self, client):
        created = self._create(client)
        assert client.delete(f"/api/creators/{created['id']}").status_code == 200
        assert client.get(f"/api/creators/{created['id']}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete('/api/creators/999').status_code == 404


class TestBulkDelete:

    def test_deletes_selected(self, client, store):
        ids = [store.create({'username': name})['id'] for name in ('a', 'b', 'c')]
        resp = client.post('/api/creators/bulk-delete', json={'ids': ids[:2]})
        assert resp.get_json() == {'success': True, 'deleted': 2}
        assert store.count() == 1

    def test_requires_ids(self, client):
        assert client.post('/api/creators/bulk-delete', json={'ids': []}).status_code == 400

    def test_rejects_non_integer_ids(self, client):
        assert client.post('/api/creators/bulk-delete', json={'ids': ['x']}).status_code == 400


def test_unknown_route_returns_json_404(client):
    resp = client.get('/api/nope')
    assert resp.status_code == 404
    assert resp.get_json()['success'] is False
