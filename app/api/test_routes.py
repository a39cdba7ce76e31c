# app/api/test_routes.py
"""
HTTP 라우트 통합 테스트 - create_app('testing')에 가짜 Firestore/Storage/Auth를 주입해 사용합니다.

사용법: python -m pytest app/api/test_routes.py -v
"""

import io
import json

import pytest

NEW_POST = {
    'title': "Guitar lessons", 'description': "Beginner friendly", 'type': "offer",
    'tags': ["guitar"], 'location': "Seoul",
    'availability': [{'start': "2024-07-01", 'end': "2024-07-10T12:00:00+09:00"}],
}

@pytest.fixture
def alice(auth_headers):
    return auth_headers("token-alice")

@pytest.fixture
def bob(auth_headers):
    return auth_headers("token-bob")

@pytest.fixture
def with_profiles(fake_db):
    fake_db.put("user_profiles", "alice", {'user_id': "alice", 'display_name': "Alice", 'rating': 0.0})
    fake_db.put("user_profiles", "bob", {'user_id': "bob", 'display_name': "Bob", 'rating': 0.0})
    return fake_db

# --- 인증 ---
def test_missing_or_invalid_token_is_401(client, auth_headers):
    response = client.post('/api/posts', json=NEW_POST)
    assert response.status_code == 401
    assert response.get_json()['error_code'] == "UNAUTHENTICATED"

    response = client.post('/api/posts', json=NEW_POST, headers=auth_headers("forged"))
    assert response.status_code == 401

def test_public_reads_need_no_token(client):
    assert client.get('/api/posts').status_code == 200
    assert client.get('/api/users').status_code == 200
    assert client.get('/api/reviews').status_code == 200

# --- 게시글 ---
def test_create_post_with_json(client, alice, with_profiles):
    response = client.post('/api/posts', json=NEW_POST, headers=alice)
    assert response.status_code == 201

    body = response.get_json()
    assert body['user_id'] == "alice"
    assert body['status'] == "open"
    assert body['display_name'] == "Alice"
    assert body['availability'] == [{'start': "2024-07-01T00:00:00.000000Z", 'end': "2024-07-10T03:00:00.000000Z"}]

def test_create_post_with_multipart_image(client, alice, with_profiles, fake_bucket):
    response = client.post('/api/posts', headers=alice, content_type='multipart/form-data', data={
        'post': json.dumps(NEW_POST),
        'image': (io.BytesIO(b"fake-png"), "guitar.png", "image/png"),
    })
    assert response.status_code == 201
    assert response.get_json()['image_url'].endswith(".png")
    assert len(fake_bucket.blobs) == 1

def test_create_post_validation_error(client, alice):
    response = client.post('/api/posts', json={'title': "", 'type': "gift"}, headers=alice)
    assert response.status_code == 400
    body = response.get_json()
    assert body['error_code'] == "VALIDATION_ERROR"
    assert {'title', 'description', 'type'} <= set(body['details'])

def test_list_posts_with_query_params(client, alice, with_profiles):
    client.post('/api/posts', json=NEW_POST, headers=alice)
    client.post('/api/posts', json=dict(NEW_POST, title="Cooking", tags=["cooking"]), headers=alice)

    response = client.get('/api/posts?skillCategory=guitar&searchTerm=GUITAR&availability=2024-07-05'
                          '&radius=10&urgency=high')
    assert response.status_code == 200
    assert [p['title'] for p in response.get_json()] == ["Guitar lessons"]

    response = client.get('/api/posts?tags=guitar,cooking&uploaderId=alice&page=0&size=1')
    assert len(response.get_json()) == 1

    assert client.get('/api/posts?page=3').get_json() == []

def test_list_posts_rejects_bad_paging(client):
    assert client.get('/api/posts?page=-1').status_code == 400
    assert client.get('/api/posts?size=0').status_code == 400
    assert client.get('/api/posts?status=archived').status_code == 400

def test_post_owner_checks(client, alice, bob, with_profiles):
    post_id = client.post('/api/posts', json=NEW_POST, headers=alice).get_json()['post_id']

    assert client.get(f'/api/posts/{post_id}').status_code == 200
    assert client.get(f'/api/posts/{post_id}/edit', headers=alice).status_code == 200
    assert client.get(f'/api/posts/{post_id}/edit', headers=bob).status_code == 403

    response = client.put(f'/api/posts/{post_id}', json={'title': "Hijacked"}, headers=bob)
    assert response.status_code == 403
    assert response.get_json()['error_code'] == "FORBIDDEN"
    assert client.delete(f'/api/posts/{post_id}', headers=bob).status_code == 403

    response = client.put(f'/api/posts/{post_id}', json={'status': "closed"}, headers=alice)
    assert response.status_code == 200
    assert response.get_json()['status'] == "closed"
    assert response.get_json()['title'] == "Guitar lessons"

    assert client.delete(f'/api/posts/{post_id}', headers=alice).status_code == 204
    assert client.get(f'/api/posts/{post_id}').status_code == 404

def test_update_post_remove_image_flag(client, alice, with_profiles, fake_bucket):
    post_id = client.post('/api/posts', headers=alice, content_type='multipart/form-data', data={
        'post': json.dumps(NEW_POST),
        'image': (io.BytesIO(b"fake-png"), "guitar.png", "image/png"),
    }).get_json()['post_id']

    response = client.put(f'/api/posts/{post_id}?removeImage=true', json={}, headers=alice)
    assert response.status_code == 200
    assert response.get_json()['image_url'] is None
    assert fake_bucket.blobs == {}

# --- 사용자 ---
def test_profile_lifecycle(client, alice, bob):
    response = client.post('/api/users', json={'display_name': "Alice", 'rating': 5}, headers=alice)
    assert response.status_code == 201
    body = response.get_json()
    assert body['user_id'] == "alice"
    assert body['email'] == "alice@example.com"
    assert body['rating'] == 0.0

    assert client.post('/api/users', json={'display_name': "Again"}, headers=alice).status_code == 400
    assert client.put('/api/users/alice', json={'bio': "x"}, headers=bob).status_code == 403

    response = client.put('/api/users/alice', json={'bio': "Guitarist", 'rating': 5}, headers=alice)
    assert response.status_code == 200
    assert response.get_json()['bio'] == "Guitarist"
    assert response.get_json()['rating'] == 0.0

    assert client.get('/api/users/alice').get_json()['display_name'] == "Alice"
    assert client.delete('/api/users/alice', headers=alice).status_code == 204
    assert client.get('/api/users/alice').status_code == 404

# --- 리뷰 ---
def test_review_flow_updates_rating(client, alice, bob, auth_headers, with_profiles):
    carol = auth_headers("token-carol")
    for headers, rating in [(alice, 5), (carol, 3)]:
        response = client.post('/api/reviews', json={'rating': rating, 'to_user_id': "bob"}, headers=headers)
        assert response.status_code == 201

    assert client.get('/api/users/bob').get_json()['rating'] == 4.0

    received = client.get('/api/reviews/received?toUserId=bob').get_json()
    assert len(received) == 2
    assert client.get('/api/reviews/written?fromUserId=alice').get_json()[0]['from_user']['display_name'] == "Alice"
    assert client.get('/api/reviews/received').status_code == 400

    review_id = next(r['review_id'] for r in received if r['rating'] == 3)
    assert client.delete(f'/api/reviews/{review_id}', headers=alice).status_code == 403
    assert client.delete(f'/api/reviews/{review_id}', headers=carol).status_code == 204
    assert client.get('/api/users/bob').get_json()['rating'] == 5.0

def test_review_rating_range(client, alice, with_profiles):
    response = client.post('/api/reviews', json={'rating': 6, 'to_user_id': "bob"}, headers=alice)
    assert response.status_code == 400
    response = client.post('/api/reviews', json={'rating': 4, 'to_user_id': "ghost"}, headers=alice)
    assert response.status_code == 404

def test_reviews_for_post(client, alice, with_profiles):
    client.post('/api/reviews', json={'rating': 4, 'to_user_id': "bob", 'barter_post_id': "p1"}, headers=alice)
    client.post('/api/reviews', json={'rating': 4, 'to_user_id': "bob"}, headers=alice)
    assert len(client.get('/api/reviews/post/p1').get_json()) == 1

# --- 채팅 ---
def test_chat_flow(client, alice, bob, auth_headers, with_profiles):
    response = client.post('/api/chats', json={'participants': ["alice", "bob"], 'type': "direct"}, headers=alice)
    assert response.status_code == 201
    chat_id = response.get_json()['chat_id']
    assert chat_id == "alice_bob"

    response = client.post('/api/chats', json={'participants': ["bob", "alice"]}, headers=bob)
    assert response.status_code == 200
    assert response.get_json()['chat_id'] == chat_id

    response = client.post(f'/api/chats/{chat_id}/messages', json={'text': "Hello"}, headers=bob)
    assert response.status_code == 201
    assert response.get_json()['sender_display_name'] == "Bob"

    messages = client.get(f'/api/chats/{chat_id}/messages', headers=alice).get_json()
    assert [m['text'] for m in messages] == ["Hello"]

    chats = client.get('/api/chats/user/alice', headers=alice).get_json()
    assert chats[0]['last_message']['text'] == "Hello"

    carol = auth_headers("token-carol")
    assert client.get(f'/api/chats/{chat_id}', headers=carol).status_code == 403
    assert client.get('/api/chats/user/alice', headers=bob).status_code == 403

    assert client.delete(f'/api/chats/{chat_id}', headers=alice).status_code == 204
    assert client.get(f'/api/chats/{chat_id}', headers=alice).status_code == 404

def test_group_chat_requires_name(client, alice):
    response = client.post('/api/chats', json={'participants': ["alice", "bob"], 'type': "group"}, headers=alice)
    assert response.status_code == 400

# --- 이미지 ---
def test_image_upload(client, alice, fake_bucket):
    response = client.post('/api/images/upload', headers=alice, content_type='multipart/form-data', data={
        'image': (io.BytesIO(b"fake-jpeg"), "photo.jpg", "image/jpeg"),
    })
    assert response.status_code == 201
    assert response.get_json()['image_url'].endswith(".jpg")

def test_image_upload_rejects_non_image(client, alice):
    response = client.post('/api/images/upload', headers=alice, content_type='multipart/form-data', data={
        'image': (io.BytesIO(b"%PDF"), "doc.pdf", "application/pdf"),
    })
    assert response.status_code == 400
    assert client.post('/api/images/upload', headers=alice).status_code == 400

# --- 오류 응답 ---
def test_backend_failure_is_500(client, fake_db):
    fake_db.fail_on.add('query')
    response = client.get('/api/posts')
    assert response.status_code == 500
    assert response.get_json()['error_code'] == "BACKEND_UNAVAILABLE"

def test_body_image_url_is_not_stored(client, alice, bob, with_profiles, fake_bucket):
    bob_post = client.post('/api/posts', headers=bob, content_type='multipart/form-data', data={
        'post': json.dumps(NEW_POST),
        'image': (io.BytesIO(b"fake-png"), "guitar.png", "image/png"),
    }).get_json()

    response = client.post('/api/posts', json=dict(NEW_POST, image_url=bob_post['image_url']), headers=alice)
    assert response.get_json()['image_url'] is None
    assert client.delete(f"/api/posts/{response.get_json()['post_id']}", headers=alice).status_code == 204

    assert len(fake_bucket.blobs) == 1
    assert client.get(f"/api/posts/{bob_post['post_id']}").get_json()['image_url'] == bob_post['image_url']
