# app/conftest.py
"""
pytest 공용 픽스처.

실제 Firebase 프로젝트 없이 서비스/라우트를 테스트할 수 있도록
Firestore 클라이언트, Storage 버킷, firebase_admin.auth 모듈의 메모리 구현을 제공합니다.
"""

import copy
import itertools

import pytest
from google.api_core import exceptions as gcp_exceptions

from app.services.firestore_service import FirestoreService, DESCENDING
from app.services.storage_service import StorageService

# --- Firestore ---
class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)

class FakeDocumentRef:
    def __init__(self, client, collection_path, doc_id):
        self._client = client
        self._collection_path = collection_path
        self.id = doc_id

    @property
    def _docs(self):
        return self._client.data.setdefault(self._collection_path, {})

    def get(self):
        self._client.check('get')
        return FakeSnapshot(self, self._docs.get(self.id))

    def set(self, data):
        self._client.check('set')
        self._docs[self.id] = copy.deepcopy(data)

    def update(self, fields):
        self._client.check('update')
        if self.id not in self._docs:
            raise gcp_exceptions.NotFound(f"No document to update: {self._collection_path}/{self.id}")
        self._docs[self.id].update(copy.deepcopy(fields))

    def delete(self):
        self._client.check('delete')
        self._client.deleted.append(f"{self._collection_path}/{self.id}")
        self._docs.pop(self.id, None)

    def collection(self, name):
        return FakeCollection(self._client, f"{self._collection_path}/{self.id}/{name}")

class FakeQuery:
    def __init__(self, collection, filters=None, order=None):
        self._collection = collection
        self._filters = filters or []
        self._order = order

    def where(self, filter=None):
        return FakeQuery(self._collection, self._filters + [filter], self._order)

    def order_by(self, field_path, direction="ASCENDING"):
        return FakeQuery(self._collection, self._filters, (field_path, direction))

    @staticmethod
    def _matches(data, field_filter):
        value = data.get(field_filter.field_path)
        op = field_filter.op_string
        if op == "==":
            return value == field_filter.value
        if op == "array_contains":
            return field_filter.value in (value or [])
        if op == "array_contains_any":
            return any(v in (value or []) for v in field_filter.value)
        if op == "in":
            return value in field_filter.value
        raise NotImplementedError(op)

    def stream(self):
        client = self._collection._client
        client.check('query')
        client.queries.append((self._collection.path, [(f.field_path, f.op_string, f.value) for f in self._filters]))
        docs = [
            (doc_id, data) for doc_id, data in client.data.get(self._collection.path, {}).items()
            if all(self._matches(data, f) for f in self._filters)
        ]
        if self._order:
            field_path, direction = self._order
            docs.sort(key=lambda item: item[1].get(field_path) or "", reverse=(direction == DESCENDING))
        return iter([FakeSnapshot(self._collection.document(doc_id), data) for doc_id, data in docs])

class FakeCollection(FakeQuery):
    def __init__(self, client, path):
        self._client = client
        self.path = path
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentRef(self._client, self.path, doc_id or self._client.next_id())

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return None, ref

class FakeFirestore:
    """
    테스트용 Firestore 클라이언트.
    fail_on에 연산 이름('get', 'set', 'update', 'delete', 'query', 'get_all')을 넣으면 해당 호출이 실패합니다.
    """
    def __init__(self):
        self.data = {}
        self.queries = []
        self.deleted = []
        self.fail_on = set()
        self._ids = itertools.count(1)

    def next_id(self):
        return f"doc{next(self._ids):04d}"

    def check(self, operation):
        if operation in self.fail_on:
            raise gcp_exceptions.ServiceUnavailable(f"{operation} failed")

    def collection(self, name):
        return FakeCollection(self, name)

    def get_all(self, refs):
        self.check('get_all')
        return [ref.get() for ref in refs]

    # 테스트 편의 메서드
    def put(self, collection, doc_id, data):
        self.data.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    def doc(self, collection, doc_id):
        return copy.deepcopy(self.data.get(collection, {}).get(doc_id))

# --- Storage ---
class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def upload_from_string(self, data, content_type=None):
        if self.bucket.fail_uploads:
            raise gcp_exceptions.ServiceUnavailable("upload failed")
        self.bucket.blobs[self.name] = (data, content_type)

    def make_public(self):
        pass

    def delete(self):
        if self.bucket.fail_deletes:
            raise gcp_exceptions.ServiceUnavailable("delete failed")
        self.bucket.blobs.pop(self.name, None)

class FakeBucket:
    def __init__(self, name="test-bucket"):
        self.name = name
        self.blobs = {}
        self.fail_uploads = False
        self.fail_deletes = False

    def blob(self, name):
        return FakeBlob(self, name)

    def list_blobs(self, prefix=None):
        return [FakeBlob(self, name) for name in list(self.blobs) if name.startswith(prefix or "")]

# --- Auth ---
class FakeAuth:
    """firebase_admin.auth 모듈 대용. tokens에 {토큰: uid} 를 등록해 사용합니다."""
    def __init__(self):
        self.tokens = {}

    def verify_id_token(self, id_token):
        if id_token not in self.tokens:
            raise ValueError("invalid token")
        uid = self.tokens[id_token]
        return {'uid': uid, 'email': f"{uid}@example.com"}

# --- 픽스처 ---
@pytest.fixture
def fake_db():
    return FakeFirestore()

@pytest.fixture
def fake_bucket():
    return FakeBucket()

@pytest.fixture
def fake_auth():
    fake = FakeAuth()
    fake.tokens.update({'token-alice': 'alice', 'token-bob': 'bob', 'token-carol': 'carol'})
    return fake

@pytest.fixture
def store(fake_db):
    return FirestoreService(client=fake_db)

@pytest.fixture
def storage_service(fake_bucket):
    return StorageService(bucket=fake_bucket, folder="barter_images")

@pytest.fixture
def app(fake_db, fake_bucket, fake_auth):
    from app import create_app
    flask_app = create_app('testing', firestore_client=fake_db, storage_bucket=fake_bucket, auth_client=fake_auth)
    return flask_app

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def auth_headers():
    """토큰 문자열로 Authorization 헤더를 만들어 주는 헬퍼."""
    return lambda token: {'Authorization': f"Bearer {token}"}
