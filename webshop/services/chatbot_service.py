"""
FAQ chatbot: text generation edge function with a local keyword fallback.
"""
import logging
from typing import NamedTuple, Optional

import requests

logger = logging.getLogger(__name__)

BOT_NAME = 'Nexus Assistant'
WELCOME_MESSAGE = "Bonjour ! Je suis l'assistant virtuel de Nexus. Comment puis-je vous aider aujourd'hui ?"
SUGGESTED_QUESTIONS = (
    'Quels sont vos tarifs ?',
    'Combien de temps pour créer un site ?',
    'Offrez-vous la maintenance ?',
)

_PRICING_ANSWER = 'Nos tarifs démarrent à 1 000€ pour un site vitrine. Découvrez toutes nos offres sur la page Offres !'
_DELAY_ANSWER = 'Un site vitrine prend généralement 2-3 semaines. Un e-commerce peut prendre 4-6 semaines selon la complexité.'

# Checked in order, first substring match wins
LOCAL_FAQ = (
    ('tarif', _PRICING_ANSWER),
    ('prix', _PRICING_ANSWER),
    ('délai', _DELAY_ANSWER),
    ('temps', _DELAY_ANSWER),
    ('maintenance', 'Oui ! Nos abonnements incluent la maintenance, les mises à jour de sécurité et le support technique.'),
    ('paiement', 'Nous acceptons les cartes bancaires (Visa, Mastercard), PayPal, et les virements via Stripe.'),
    ('contact', 'Vous pouvez nous contacter via la page Contact ou par email à contact@nexus.com'),
)

DEFAULT_ANSWER = (
    "Merci pour votre message ! Pour une réponse personnalisée, n'hésitez pas à nous "
    "contacter via la page Contact ou à appeler notre équipe. 📞"
)

SHOP_CONTEXT = {
    'courseName': 'Nexus Web Agency',
    'courseDescription': (
        'Agence web premium créant des sites vitrines (à partir de 499€), e-commerce '
        '(à partir de 999€) et sur-mesure. Délai: 2-6 semaines.'
    ),
}


class ChatReply(NamedTuple):
    text: str
    source: str  # 'ai' or 'faq'


def match_faq(message: str) -> str:
    """Return the first FAQ answer whose keyword appears in the message."""
    lowered = (message or '').lower()
    for keyword, answer in LOCAL_FAQ:
        if keyword in lowered:
            return answer
    return DEFAULT_ANSWER


class TextGenerationClient:
    """Client for the text generation edge function."""

    def __init__(self, url: Optional[str], api_key: Optional[str], timeout: float = 8.0):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> 'TextGenerationClient':
        return cls(
            config.get('TEXTGEN_URL'),
            config.get('TEXTGEN_API_KEY'),
            config.get('TEXTGEN_TIMEOUT', 8.0),
        )

    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)

    def generate(self, message: str, context: Optional[dict] = None) -> Optional[str]:
        """
        Ask the edge function for an answer.

        Returns None when the service is not configured, times out, fails or
        answers without text; callers fall back to the local FAQ.
        """
        if not self.is_configured():
            logger.debug("[CHATBOT] Text generation not configured, using local FAQ")
            return None

        payload = {
            'action': 'chat',
            'messages': [{'role': 'user', 'content': message}],
            'courseContext': context or SHOP_CONTEXT,
            'options': {'maxTokens': 600, 'temperature': 0.7},
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {self.api_key}',
            'apikey': self.api_key,
        }

        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.Timeout:
            logger.warning(f"[CHATBOT] Text generation timed out after {self.timeout}s")
            return None
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"[CHATBOT] Text generation error: {e}")
            return None

        if isinstance(result, dict) and result.get('success') and result.get('data'):
            return str(result['data'])
        return None


def answer_message(message: str, client: TextGenerationClient) -> ChatReply:
    """Answer with the text generation service, or the local FAQ when it is unavailable."""
    generated = client.generate(message)
    if generated:
        return ChatReply(generated, 'ai')
    return ChatReply(match_faq(message), 'faq')
