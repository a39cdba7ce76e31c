# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials

# - 설정 및 예외
from app.core.config import config_by_name
from app.core.exceptions import NotFoundError, AuthorizationError, UnavailableError

# - API 블루프린트
from app.api.posts.routes import posts_bp
from app.api.users.routes import users_bp
from app.api.reviews.routes import reviews_bp
from app.api.chats.routes import chats_bp
from app.api.images.routes import images_bp

# - 서비스 모듈
from app.services.firestore_service import FirestoreService
from app.services.storage_service import StorageService
from app.services.identity_service import IdentityService
from app.api.posts.services import PostService
from app.api.users.services import UserProfileService
from app.api.reviews.rating import RatingAggregator
from app.api.reviews.services import ReviewService
from app.api.chats.services import ChatService

def _init_firebase(app: Flask):
    """Firebase Admin SDK를 한 번만 초기화합니다."""
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })

def create_app(config_name=None, firestore_client=None, storage_bucket=None, auth_client=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV 환경 변수)
    :param firestore_client: Firestore 클라이언트 (테스트에서 가짜 클라이언트 주입용)
    :param storage_bucket: Storage 버킷 객체 (테스트용)
    :param auth_client: verify_id_token을 가진 인증 모듈 (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 외부 서비스 초기화 (주입된 클라이언트가 모두 있으면 Firebase 초기화를 건너뜀)
    # =====================================================================================
    if firestore_client is None or storage_bucket is None or auth_client is None:
        _init_firebase(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용/핵심 서비스 먼저 생성
    try:
        store = FirestoreService(client=firestore_client)
        store.init_app(app)
        app.services['store'] = store

        storage_instance = StorageService(bucket=storage_bucket)
        storage_instance.init_app(app)
        app.services['storage'] = storage_instance

        app.services['identity'] = IdentityService(auth_client=auth_client)
        logging.info("Core services initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize core services: {e}", exc_info=True)
        raise

    # 5-2. 핵심 서비스를 주입받는 도메인 서비스 생성
    app.services['users'] = UserProfileService(store=store, storage_service=storage_instance)
    app.services['posts'] = PostService(store=store, storage_service=storage_instance)
    app.services['ratings'] = RatingAggregator(store=store)
    app.services['reviews'] = ReviewService(store=store, rating_aggregator=app.services['ratings'])
    app.services['chats'] = ChatService(store=store)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(reviews_bp, url_prefix='/api/reviews')
    app.register_blueprint(chats_bp, url_prefix='/api/chats')
    app.register_blueprint(images_bp, url_prefix='/api/images')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(err):
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(err)}), 404

    @app.errorhandler(AuthorizationError)
    def handle_forbidden(err):
        return jsonify({"error_code": "FORBIDDEN", "message": str(err)}), 403

    @app.errorhandler(UnavailableError)
    def handle_backend_unavailable(err):
        logging.error(f"Backend call failed: {err}", exc_info=True)
        return jsonify({"error_code": "BACKEND_UNAVAILABLE", "message": str(err)}), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        # 404 라우트 없음, 405, 413(업로드 용량 초과) 등 Werkzeug 예외는 상태 코드를 유지
        error_code = (err.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify({"error_code": error_code, "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
