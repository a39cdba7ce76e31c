# app/api/users/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

class UserProfileCreateSchema(Schema):
    """
    POST /api/users
    'user' 파트(또는 JSON 본문)의 유효성을 검사합니다.
    rating은 서버가 관리하는 값이므로 요청에 있어도 무시합니다.
    """
    class Meta:
        unknown = EXCLUDE

    display_name = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    email = fields.Email(allow_none=True)
    location = fields.Str(allow_none=True, validate=validate.Length(max=200))
    bio = fields.Str(allow_none=True, validate=validate.Length(max=1000))
    skills_offered = fields.List(fields.Str(validate=validate.Length(min=1, max=50)), load_default=list)
    needs = fields.List(fields.Str(validate=validate.Length(min=1, max=50)), load_default=list)

class UserProfileUpdateSchema(UserProfileCreateSchema):
    """PUT /api/users/{user_id} - 전달된 필드만 검사합니다. (partial=True로 로드)"""
    skills_offered = fields.List(fields.Str(validate=validate.Length(min=1, max=50)))
    needs = fields.List(fields.Str(validate=validate.Length(min=1, max=50)))

class UserProfileResponseSchema(Schema):
    """사용자 프로필 응답 스키마."""
    user_id = fields.Str(dump_only=True)
    display_name = fields.Str()
    email = fields.Str(allow_none=True)
    location = fields.Str(allow_none=True)
    bio = fields.Str()
    skills_offered = fields.List(fields.Str())
    needs = fields.List(fields.Str())
    rating = fields.Float()
    created_at = fields.Str()
    profile_image_url = fields.Str(allow_none=True)
