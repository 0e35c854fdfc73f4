import pytest

from datagrid import db
from datagrid.models import SavedQuery


def test_create_saved_query(client, app):
    resp = client.post('/grid_saved_queries/tasks', json={
        'name': 'Urgent',
        'query': {'f': {'tasks.priority': {'fr': '5'}}, 'order': 'tasks.title', 'page': '3'},
    })
    assert resp.status_code == 201, resp.data

    data = resp.get_json()
    assert data['name'] == 'Urgent'
    assert data['grid_name'] == 'tasks'
    # the page is not part of a saved query
    assert data['state'] == {'f': {'tasks.priority': {'fr': '5'}}, 'order': 'tasks.title'}

    with app.app_context():
        saved = SavedQuery.query.filter_by(grid_name='tasks', name='Urgent').first()
        assert saved is not None
        assert saved.state['order'] == 'tasks.title'


@pytest.mark.parametrize('payload', [
    {'query': {'order': 'tasks.title'}},
    {'name': '  ', 'query': {'order': 'tasks.title'}},
    {'name': 'No state'},
    {'name': 'Bad state', 'query': ['tasks.title']},
])
def test_create_saved_query_missing_fields(client, payload):
    resp = client.post('/grid_saved_queries/tasks', json=payload)
    assert resp.status_code == 400
    assert 'Missing required field' in resp.get_json()['error']


def test_create_saved_query_duplicate_name(client):
    payload = {'name': 'Urgent', 'query': {'order': 'tasks.title'}}
    assert client.post('/grid_saved_queries/tasks', json=payload).status_code == 201

    resp = client.post('/grid_saved_queries/tasks', json=payload)
    assert resp.status_code == 400
    assert 'already exists' in resp.get_json()['error']

    # the same name is fine for another grid
    assert client.post('/grid_saved_queries/projects', json=payload).status_code == 201


def test_list_saved_queries(client, app):
    with app.app_context():
        db.session.add_all([
            SavedQuery(name='Zeta', grid_name='tasks', state={}),
            SavedQuery(name='Alpha', grid_name='tasks', state={}),
            SavedQuery(name='Other', grid_name='projects', state={}),
        ])
        db.session.commit()

    resp = client.get('/grid_saved_queries/tasks')
    assert resp.status_code == 200
    assert [item['name'] for item in resp.get_json()] == ['Alpha', 'Zeta']

    assert client.get('/grid_saved_queries/nothing').get_json() == []


def test_delete_saved_query(client, app):
    with app.app_context():
        saved = SavedQuery(name='Urgent', grid_name='tasks', state={})
        db.session.add(saved)
        db.session.commit()
        saved_id = saved.id

    # a query of another grid is not found
    assert client.delete(f'/grid_saved_queries/projects/{saved_id}').status_code == 404

    resp = client.delete(f'/grid_saved_queries/tasks/{saved_id}')
    assert resp.status_code == 200
    assert resp.get_json()['message'] == 'Saved query deleted successfully'

    with app.app_context():
        assert db.session.get(SavedQuery, saved_id) is None

    assert client.delete(f'/grid_saved_queries/tasks/{saved_id}').status_code == 404
