from unittest.mock import patch

from quizapi import repository
from quizapi.core.errors import StorageError
from quizapi.core.identity import derive_user_id


def test_list_users_is_empty_array_on_fresh_store(client) -> None:
    response = client.get('/api/users')

    assert response.status_code == 200
    assert response.json() == []


def test_create_user_returns_201_with_derived_id(client) -> None:
    response = client.post('/api/users', json={'email': 'ada@example.com', 'name': 'Ada'})

    assert response.status_code == 201
    assert response.headers['content-type'] == 'application/json'
    assert response.json() == {
        'id': derive_user_id('ada@example.com'),
        'email': 'ada@example.com',
        'name': 'Ada',
        'score': 0,
    }


def test_create_user_is_idempotent_per_email(client) -> None:
    first = client.post('/api/users', json={'email': 'ada@example.com'})
    second = client.post('/api/users', json={'email': 'ADA@Example.com', 'name': 'Ada'})

    assert first.json()['id'] == second.json()['id']
    users = client.get('/api/users').json()
    assert len(users) == 1
    assert users[0]['name'] == 'Ada'


def test_create_user_rejects_malformed_email(client) -> None:
    response = client.post('/api/users', json={'email': 'not-an-email'})

    assert response.status_code == 400
    assert response.json() == {'error': 'Email must look like name@domain.'}


def test_create_user_rejects_missing_email(client) -> None:
    response = client.post('/api/users', json={'name': 'Ada'})

    assert response.status_code == 400
    assert 'email' in response.json()['error']


def test_create_user_rejects_invalid_json(client) -> None:
    response = client.post(
        '/api/users',
        content='{"email": ',
        headers={'content-type': 'application/json'},
    )

    assert response.status_code == 400
    assert 'error' in response.json()


def test_get_user_returns_stored_user(client, app_db) -> None:
    user_id = derive_user_id('ada@example.com')
    repository.create_user(app_db, user_id, 'ada@example.com', 'Ada')

    response = client.get(f'/api/users/{user_id}')

    assert response.status_code == 200
    assert response.json()['name'] == 'Ada'


def test_get_user_returns_404_for_unknown_id(client) -> None:
    response = client.get('/api/users/unknown')

    assert response.status_code == 404
    assert response.json() == {'error': 'User not found'}


def test_get_score_returns_stored_score(client, app_db) -> None:
    user_id = derive_user_id('ada@example.com')
    repository.create_user(app_db, user_id, 'ada@example.com')
    repository.increment_score(app_db, user_id)

    response = client.get(f'/api/users/{user_id}/score')

    assert response.status_code == 200
    assert response.json() == {'id': user_id, 'score': 1}


def test_get_score_returns_404_for_unknown_user(client) -> None:
    response = client.get('/api/users/unknown/score')

    assert response.status_code == 404
    assert response.json() == {'error': 'User not found'}


def test_cors_preflight_allows_any_origin(client) -> None:
    response = client.options(
        '/api/users',
        headers={
            'Origin': 'http://quiz.example',
            'Access-Control-Request-Method': 'POST',
            'Access-Control-Request-Headers': 'content-type',
        },
    )

    assert response.status_code == 200
    assert response.headers['access-control-allow-origin'] == '*'


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Quiz API Running'}


def test_store_failure_returns_500_and_server_keeps_serving(client) -> None:
    with patch.object(repository, 'list_users', side_effect=StorageError('timeout')):
        response = client.get('/api/users')

    assert response.status_code == 500
    assert response.json() == {'error': 'timeout'}

    follow_up = client.get('/api/users')
    assert follow_up.status_code == 200
    assert follow_up.json() == []
