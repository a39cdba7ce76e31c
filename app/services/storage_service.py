# app/services/storage_service.py
import os
import uuid
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse, unquote

from flask import Flask
from firebase_admin import storage
from marshmallow import ValidationError

from app.core.exceptions import MediaStoreError

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

@dataclass
class ImageUpload:
    """multipart 요청에서 읽어 들인 이미지 파일."""
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

class StorageService:
    """
    Firebase Storage에 게시글/프로필 이미지를 올리고 지우는 서비스 클래스입니다.
    업로드된 파일은 공개(public)로 전환되며, 공개 URL이 그대로 문서에 저장됩니다.
    삭제 시에는 URL 경로의 마지막 세그먼트에서 확장자를 뗀 값(public id)으로 파일을 찾습니다.
    """

    def __init__(self, bucket=None, folder: str = "barter_images"):
        """
        실제 버킷 객체는 init_app 메서드 또는 생성자로 주입됩니다.
        """
        self.bucket = bucket
        self.folder = folder

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        self.folder = app.config.get('MEDIA_FOLDER', self.folder)
        if self.bucket is not None:
            return

        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.bucket

    def upload_image(self, image: ImageUpload) -> str:
        """
        이미지를 업로드하고 공개 URL을 반환합니다.

        :param image: 업로드할 이미지 (바이트, 원본 파일명, MIME 타입)
        :return: 공개적으로 접근 가능한 URL
        """
        bucket = self._require_bucket()

        if image is None or not image.data:
            raise ValidationError("빈 파일은 업로드할 수 없습니다.")
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(f"'{image.content_type}'은(는) 지원하지 않는 이미지 형식입니다.")

        extension = ALLOWED_IMAGE_TYPES[image.content_type]
        destination_blob_name = f"{self.folder}/{uuid.uuid4().hex}.{extension}"

        try:
            blob = bucket.blob(destination_blob_name)
            blob.upload_from_string(image.data, content_type=image.content_type)
            blob.make_public()
            logging.info(f"이미지 업로드 성공: {destination_blob_name}")
            return blob.public_url
        except Exception as e:
            logging.error(f"이미지 업로드 실패 ({image.filename}): {e}", exc_info=True)
            raise MediaStoreError("이미지 업로드에 실패했습니다.") from e

    @staticmethod
    def extract_public_id(image_url: str) -> str:
        """
        공개 URL에서 public id(마지막 경로 세그먼트에서 확장자를 뗀 값)를 추출합니다.
        예) https://storage.googleapis.com/bucket/barter_images/abc123.jpg -> abc123
        """
        path = unquote(urlparse(image_url).path or "")
        last_segment = path.rstrip("/").split("/")[-1] if path.strip("/") else ""
        if not last_segment:
            raise MediaStoreError(f"이미지 URL 형식이 올바르지 않습니다: {image_url}")

        public_id, dot, extension = last_segment.rpartition(".")
        # 업로드된 이미지는 항상 '<id>.<확장자>' 형태입니다.
        if not dot or not public_id or not extension:
            raise MediaStoreError(f"이미지 URL 형식이 올바르지 않습니다: {image_url}")
        return public_id

    def delete_image(self, image_url: Optional[str]) -> None:
        """
        공개 URL로 업로드된 이미지를 삭제합니다.
        URL 형식이 잘못되었거나 해당 파일이 없으면 MediaStoreError가 발생합니다.
        """
        if not image_url or not image_url.strip():
            logging.warning("삭제할 이미지 URL이 비어 있어 건너뜁니다.")
            return

        bucket = self._require_bucket()
        public_id = self.extract_public_id(image_url)
        logging.info(f"이미지 삭제 시도 (public id: {public_id})")

        try:
            candidates = [
                blob for blob in bucket.list_blobs(prefix=f"{self.folder}/{public_id}")
                if os.path.splitext(blob.name.rsplit("/", 1)[-1])[0] == public_id
            ]
        except Exception as e:
            logging.error(f"이미지 조회 실패 (public id: {public_id}): {e}", exc_info=True)
            raise MediaStoreError("이미지 삭제 중 저장소 조회에 실패했습니다.") from e

        if not candidates:
            raise MediaStoreError(f"삭제할 이미지를 찾을 수 없습니다 (public id: {public_id}).")

        try:
            for blob in candidates:
                blob.delete()
            logging.info(f"이미지 삭제 성공 (public id: {public_id})")
        except Exception as e:
            logging.error(f"이미지 삭제 실패 (public id: {public_id}): {e}", exc_info=True)
            raise MediaStoreError("이미지 삭제에 실패했습니다.") from e

    def delete_image_quietly(self, image_url: Optional[str], context: str) -> bool:
        """
        연쇄 삭제/이미지 교체 시 사용하는 best-effort 삭제.
        실패해도 예외를 올리지 않고 경고 로그만 남깁니다.

        :param context: 로그에 남길 대상 설명 (예: "post abc")
        :return: 삭제 성공 여부
        """
        if not image_url:
            return False
        try:
            self.delete_image(image_url)
            return True
        except Exception as e:
            logging.warning(f"이미지 삭제 실패 - 무시하고 진행합니다 ({context}): {e}")
            return False
