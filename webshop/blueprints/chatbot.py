"""Chatbot blueprint: FAQ assistant shown on every storefront page."""
import logging
from flask import Blueprint, request, jsonify, current_app

from webshop.exceptions import ValidationError
from webshop.services.chatbot_service import (
    BOT_NAME, WELCOME_MESSAGE, SUGGESTED_QUESTIONS, TextGenerationClient, answer_message
)
from webshop.blueprints.metrics import chatbot_replies_total

logger = logging.getLogger(__name__)

chatbot_bp = Blueprint('chatbot', __name__, url_prefix='/chatbot')

MAX_MESSAGE_LENGTH = 1000


@chatbot_bp.route('/config')
def config():
    return jsonify({
        'name': BOT_NAME,
        'welcome_message': WELCOME_MESSAGE,
        'suggested_questions': list(SUGGESTED_QUESTIONS),
    })


@chatbot_bp.route('/message', methods=['POST'])
def message():
    """Body: {"message": "Quels sont vos tarifs ?"}"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    text = data.get('message')
    text = text.strip() if isinstance(text, str) else ''
    if not text:
        raise ValidationError('message', 'Message requis.')
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError('message', 'Message trop long.')

    reply = answer_message(text, TextGenerationClient.from_config(current_app.config))
    chatbot_replies_total.labels(source=reply.source).inc()

    return jsonify({'reply': reply.text, 'source': reply.source})
