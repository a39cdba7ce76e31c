# app/services/firestore_service.py
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from flask import Flask
from firebase_admin import firestore
from google.api_core import exceptions as gcp_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter
from marshmallow import ValidationError

from app.core.exceptions import NotFoundError, UnavailableError

# Firestore의 array-contains-any / in 연산자가 허용하는 최대 값 개수
ARRAY_CONTAINS_ANY_LIMIT = 10

ASCENDING = firestore.Query.ASCENDING
DESCENDING = firestore.Query.DESCENDING

class FirestoreService:
    """
    서비스 계층이 사용하는 Firestore 접근 래퍼.
    - 컬렉션/문서 단위의 get/set/update/delete와 등호 필터 쿼리만 제공합니다.
    - Google API 예외를 도메인 예외(UnavailableError, NotFoundError)로 변환합니다.
    - 클라이언트는 init_app 또는 생성자로 주입되므로 테스트에서는 가짜 클라이언트를 넣을 수 있습니다.
    """

    def __init__(self, client=None):
        self.db = client

    def init_app(self, app: Flask):
        """Firebase 앱이 초기화된 뒤 호출되어 Firestore 클라이언트를 설정합니다."""
        if self.db is None:
            self.db = firestore.client()
        logging.info("FirestoreService: Firestore 클라이언트가 설정되었습니다.")

    def _client(self):
        if self.db is None:
            raise RuntimeError("FirestoreService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.db

    def _call(self, description: str, func, *args, **kwargs):
        """Firestore 호출을 실행하고 백엔드 예외를 도메인 예외로 변환합니다."""
        try:
            return func(*args, **kwargs)
        except gcp_exceptions.NotFound as e:
            raise NotFoundError(f"{description}: 문서를 찾을 수 없습니다.") from e
        except (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError) as e:
            logging.error(f"Firestore 호출 실패 ({description}): {e}", exc_info=True)
            raise UnavailableError(f"저장소를 일시적으로 사용할 수 없습니다. ({description})") from e

    # --- 조회 ---
    def get(self, collection: str, doc_id: str, id_field: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """문서 하나를 딕셔너리로 반환합니다. 없으면 None."""
        doc = self._call(f"get {collection}/{doc_id}",
                         lambda: self._client().collection(collection).document(doc_id).get())
        if not doc.exists:
            return None
        return self._to_record(doc, id_field)

    def get_many(self, collection: str, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        여러 문서를 한 번의 배치 요청으로 가져와 {문서 ID: 데이터} 맵으로 반환합니다.
        중복 ID는 한 번만 요청하며, 존재하지 않는 문서는 맵에서 빠집니다.
        """
        unique_ids = list(dict.fromkeys(i for i in doc_ids if i))
        if not unique_ids:
            return {}

        def _fetch():
            collection_ref = self._client().collection(collection)
            refs = [collection_ref.document(doc_id) for doc_id in unique_ids]
            return list(self._client().get_all(refs))

        snapshots = self._call(f"get_all {collection} ({len(unique_ids)}건)", _fetch)
        return {snap.id: snap.to_dict() for snap in snapshots if snap.exists}

    def query(self,
              collection: str,
              filters: Optional[Dict[str, Any]] = None,
              array_contains: Optional[Tuple[str, Any]] = None,
              array_contains_any: Optional[Tuple[str, Sequence[Any]]] = None,
              order_by: Optional[str] = None,
              direction: str = DESCENDING,
              id_field: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        등호 필터(filters), 배열 포함 필터, 정렬을 조합한 쿼리를 실행합니다.

        :param filters: {필드: 값} 형태의 등호 조건. 값이 None인 항목은 무시합니다.
        :param array_contains: (필드, 값) - 배열 필드가 값을 포함하는 문서
        :param array_contains_any: (필드, 값 목록) - 배열 필드가 목록 중 하나라도 포함하는 문서 (최대 10개)
        :param order_by: 정렬 기준 필드
        :param id_field: 지정 시 결과 딕셔너리에 문서 ID를 해당 키로 넣어줍니다.
        """
        if array_contains_any is not None and len(array_contains_any[1]) > ARRAY_CONTAINS_ANY_LIMIT:
            raise ValidationError(
                f"array_contains_any 조건은 최대 {ARRAY_CONTAINS_ANY_LIMIT}개 값까지만 허용됩니다.")

        def _run():
            query = self._client().collection(collection)
            for field_path, value in (filters or {}).items():
                if value is None:
                    continue
                query = query.where(filter=FieldFilter(field_path, "==", value))
            if array_contains is not None:
                query = query.where(filter=FieldFilter(array_contains[0], "array_contains", array_contains[1]))
            if array_contains_any is not None:
                query = query.where(filter=FieldFilter(array_contains_any[0], "array_contains_any", list(array_contains_any[1])))
            if order_by:
                query = query.order_by(order_by, direction=direction)
            return list(query.stream())

        docs = self._call(f"query {collection}", _run)
        return [self._to_record(doc, id_field) for doc in docs]

    def list_subcollection(self, parent_collection: str, parent_id: str, sub_collection: str,
                           order_by: Optional[str] = None, direction: str = ASCENDING,
                           id_field: Optional[str] = None) -> List[Dict[str, Any]]:
        """서브컬렉션의 모든 문서를 정렬하여 반환합니다."""
        def _run():
            query = self._sub_ref(parent_collection, parent_id, sub_collection)
            if order_by:
                query = query.order_by(order_by, direction=direction)
            return list(query.stream())

        docs = self._call(f"list {parent_collection}/{parent_id}/{sub_collection}", _run)
        return [self._to_record(doc, id_field) for doc in docs]

    # --- 쓰기 ---
    def new_id(self, collection: str) -> str:
        """컬렉션에 새 문서 ID를 발급합니다. (쓰기는 하지 않음)"""
        return self._client().collection(collection).document().id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """문서 전체를 생성하거나 덮어씁니다."""
        self._call(f"set {collection}/{doc_id}",
                   lambda: self._client().collection(collection).document(doc_id).set(data))

    def update_fields(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """
        지정한 필드만 부분 업데이트합니다. 다른 필드는 건드리지 않습니다.
        문서가 없으면 NotFoundError가 발생합니다.
        """
        if not fields:
            logging.warning(f"업데이트할 필드가 없어 건너뜁니다 ({collection}/{doc_id}).")
            return
        self._call(f"update {collection}/{doc_id}",
                   lambda: self._client().collection(collection).document(doc_id).update(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        self._call(f"delete {collection}/{doc_id}",
                   lambda: self._client().collection(collection).document(doc_id).delete())

    def add(self, parent_collection: str, parent_id: str, sub_collection: str, data: Dict[str, Any]) -> str:
        """서브컬렉션에 문서를 추가하고 Firestore가 생성한 문서 ID를 반환합니다."""
        _, doc_ref = self._call(f"add {parent_collection}/{parent_id}/{sub_collection}",
                                lambda: self._sub_ref(parent_collection, parent_id, sub_collection).add(data))
        return doc_ref.id

    def delete_subcollection(self, parent_collection: str, parent_id: str, sub_collection: str) -> int:
        """서브컬렉션의 모든 문서를 삭제하고 삭제한 개수를 반환합니다."""
        def _run():
            count = 0
            for doc in self._sub_ref(parent_collection, parent_id, sub_collection).stream():
                doc.reference.delete()
                count += 1
            return count

        return self._call(f"delete {parent_collection}/{parent_id}/{sub_collection}", _run)

    # --- 내부 헬퍼 ---
    def _sub_ref(self, parent_collection: str, parent_id: str, sub_collection: str):
        return self._client().collection(parent_collection).document(parent_id).collection(sub_collection)

    @staticmethod
    def _to_record(doc, id_field: Optional[str]) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        if id_field:
            data[id_field] = doc.id
        return data
