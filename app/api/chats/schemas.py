# app/api/chats/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE

from app.models.chat import ChatType

class ChatCreateSchema(Schema):
    """POST /api/chats 요청 본문. 유형별 규칙(참여자 수, 이름)은 서비스에서 검사합니다."""
    class Meta:
        unknown = EXCLUDE

    participants = fields.List(fields.Str(validate=validate.Length(min=1)), required=True)
    type = fields.Str(load_default=ChatType.DIRECT.value, validate=validate.OneOf([t.value for t in ChatType]))
    name = fields.Str(allow_none=True, validate=validate.Length(max=100))

class MessageCreateSchema(Schema):
    """POST /api/chats/{chat_id}/messages 요청 본문."""
    class Meta:
        unknown = EXCLUDE

    text = fields.Str(required=True, validate=validate.Length(min=1, max=5000))

class LastMessageSchema(Schema):
    sender_id = fields.Str()
    text = fields.Str()
    created_at = fields.Str()

class ChatResponseSchema(Schema):
    chat_id = fields.Str(dump_only=True)
    participants = fields.List(fields.Str())
    type = fields.Str()
    name = fields.Str(allow_none=True)
    created_at = fields.Str()
    updated_at = fields.Str()
    last_message = fields.Nested(LastMessageSchema, allow_none=True)

class MessageResponseSchema(Schema):
    message_id = fields.Str(dump_only=True)
    chat_id = fields.Str()
    sender_id = fields.Str()
    text = fields.Str()
    created_at = fields.Str()
    sender_display_name = fields.Str(allow_none=True)
    sender_profile_image_url = fields.Str(allow_none=True)
