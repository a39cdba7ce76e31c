from functools import wraps
from flask import request, jsonify, g, current_app

def _extract_bearer_token():
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip()

def firebase_auth_required(optional: bool = False):
    """
    Authorization: Bearer <Firebase ID 토큰> 헤더를 검증하는 데코레이터.
    성공하면 g.user_id / g.user_email 에 인증된 사용자 정보를 넣습니다.

    :param optional: True이면 토큰이 없어도 통과시키고 g.user_id를 None으로 둡니다.
                     토큰이 있는데 유효하지 않으면 optional이어도 401을 반환합니다.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            g.user_id = None
            g.user_email = None

            token = _extract_bearer_token()
            if token is None:
                if optional:
                    return f(*args, **kwargs)
                return jsonify({"error_code": "UNAUTHENTICATED", "message": "Authorization header is missing or invalid"}), 401

            identity = current_app.services['identity'].verify_token(token)
            if not identity.valid:
                return jsonify({"error_code": "UNAUTHENTICATED", "message": "Invalid or expired token"}), 401

            g.user_id = identity.uid
            g.user_email = identity.email
            return f(*args, **kwargs)

        return decorated_function
    return decorator
