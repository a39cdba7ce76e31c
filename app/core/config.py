# app/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 이미지가 업로드될 Firebase Storage 버킷 이름 (예: my-project.appspot.com)
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    # 버킷 안에서 게시글/프로필 이미지가 저장될 폴더
    MEDIA_FOLDER = os.getenv('MEDIA_FOLDER', 'barter_images')

    # 요청 본문 최대 크기. multipart 이미지 업로드의 상한 역할을 합니다. (기본 10MB)
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 10 * 1024 * 1024))

    # 게시글 목록 조회 페이지 크기
    POSTS_DEFAULT_PAGE_SIZE = int(os.getenv('POSTS_DEFAULT_PAGE_SIZE', 10))
    POSTS_MAX_PAGE_SIZE = int(os.getenv('POSTS_MAX_PAGE_SIZE', 100))

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    # 코드 변경 시 자동 재시작, 에러 발생 시 상세한 디버그 정보 표시
    DEBUG = True
    # 개발용 Firebase 프로젝트의 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False # 테스트 환경에서는 보통 디버그 모드를 끕니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', 'test-bucket')

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('PROD_FIREBASE_CREDENTIALS_PATH')

# config_by_name: FLASK_ENV 값과 설정 클래스를 매핑하는 딕셔너리입니다.
# app/__init__.py의 create_app 함수에서 적절한 설정을 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
