# app/api/chats/routes.py
from flask import Blueprint, jsonify, Response, current_app, g

from app.api.chats.schemas import ChatCreateSchema, MessageCreateSchema, ChatResponseSchema, MessageResponseSchema
from app.core.security import firebase_auth_required
from app.utils.request_utils import load_json_part

chats_bp = Blueprint('chats_bp', __name__)

@chats_bp.route('', methods=['POST'])
@firebase_auth_required()
def create_chat():
    """
    채팅방을 생성합니다.
    같은 두 사람의 1:1 채팅방이 이미 있으면 새로 만들지 않고 기존 방을 200으로 반환합니다.
    """
    data = ChatCreateSchema().load(load_json_part('chat'))
    chat, created = current_app.services['chats'].create_chat(
        g.user_id, data['participants'], data['type'], data.get('name')
    )
    return jsonify(ChatResponseSchema().dump(chat)), 201 if created else 200

@chats_bp.route('/user/<string:user_id>', methods=['GET'])
@firebase_auth_required()
def get_chats_for_user(user_id):
    chats = current_app.services['chats'].get_chats_for_user(user_id, g.user_id)
    return jsonify(ChatResponseSchema(many=True).dump(chats)), 200

@chats_bp.route('/<string:chat_id>', methods=['GET'])
@firebase_auth_required()
def get_chat(chat_id):
    chat = current_app.services['chats'].get_chat(chat_id, g.user_id)
    return jsonify(ChatResponseSchema().dump(chat)), 200

@chats_bp.route('/<string:chat_id>/messages', methods=['POST'])
@firebase_auth_required()
def add_message(chat_id):
    data = MessageCreateSchema().load(load_json_part('message'))
    message = current_app.services['chats'].add_message(chat_id, g.user_id, data['text'])
    return jsonify(MessageResponseSchema().dump(message)), 201

@chats_bp.route('/<string:chat_id>/messages', methods=['GET'])
@firebase_auth_required()
def get_messages(chat_id):
    messages = current_app.services['chats'].get_messages(chat_id, g.user_id)
    return jsonify(MessageResponseSchema(many=True).dump(messages)), 200

@chats_bp.route('/<string:chat_id>', methods=['DELETE'])
@firebase_auth_required()
def delete_chat(chat_id):
    current_app.services['chats'].delete_chat(chat_id, g.user_id)
    return Response(status=204)
