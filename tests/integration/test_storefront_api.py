"""
Integration tests for the dashboard, chatbot, auth and service endpoints.
"""

import pytest

from webshop.services.chatbot_service import LOCAL_FAQ, WELCOME_MESSAGE

FAQ = dict(LOCAL_FAQ)


class TestDashboard:

    def test_orders_of_logged_in_customer(self, logged_in_client, order_factory):
        order_factory(order_reference='WS-2026-MINE', fulfillment_status='in_progress')
        order_factory(order_reference='WS-2026-THEM', customer_email='autre@example.com')

        orders = logged_in_client.get('/dashboard/orders').get_json()['orders']

        assert [order['reference'] for order in orders] == ['WS-2026-MINE']
        assert orders[0]['fulfillment_status'] == {
            'value': 'in_progress', 'label': 'En cours', 'color': '#8b5cf6'
        }
        assert orders[0]['total_display'] == '598,80\u00a0€'

    def test_order_detail(self, logged_in_client, order_42):
        data = logged_in_client.get('/dashboard/orders/WS-2026-TEST').get_json()

        assert data['id'] == 42
        assert data['items'][0]['product_id'] == 'site-vitrine'

    def test_other_customer_order_is_hidden(self, logged_in_client, order_factory):
        order_factory(order_reference='WS-2026-THEM', customer_email='autre@example.com')

        response = logged_in_client.get('/dashboard/orders/WS-2026-THEM')

        assert response.status_code == 404
        assert response.get_json()['kind'] == 'order_not_found'

    def test_requires_login(self, client):
        assert client.get('/dashboard/orders').status_code == 401


class TestChatbot:

    def test_config(self, client):
        data = client.get('/chatbot/config').get_json()

        assert data['welcome_message'] == WELCOME_MESSAGE
        assert len(data['suggested_questions']) == 3

    def test_local_faq_answer(self, client):
        response = client.post('/chatbot/message', json={'message': 'Quels sont vos tarifs ?'})

        assert response.status_code == 200
        assert response.get_json() == {'reply': FAQ['tarif'], 'source': 'faq'}

    def test_empty_message(self, client):
        response = client.post('/chatbot/message', json={'message': '   '})

        assert response.status_code == 400
        assert response.get_json()['field'] == 'message'

    @pytest.mark.parametrize('body', [{'message': ['tarif']}, {'message': 42}, ['tarif'], 'tarif'])
    def test_malformed_message(self, client, body):
        response = client.post('/chatbot/message', json=body)

        assert response.status_code == 400
        assert response.get_json()['field'] == 'message'


class TestDemoAuthEndpoints:

    def test_login_then_me_then_logout(self, client):
        response = client.post('/auth/demo/login', json={
            'email': 'camille@example.com', 'password': 'secret1'
        })
        assert response.status_code == 200

        assert client.get('/auth/me').get_json()['user']['email'] == 'camille@example.com'

        client.post('/auth/logout')
        assert client.get('/auth/me').get_json() == {'user': None}

    def test_login_with_form_post(self, client):
        response = client.post('/auth/demo/login', data={
            'email': 'camille@example.com', 'password': 'secret1'
        })
        assert response.status_code == 200

    def test_bad_password(self, client):
        response = client.post('/auth/demo/login', json={'email': 'camille@example.com', 'password': '1'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Mot de passe incorrect'

    @pytest.mark.parametrize('body, field', [
        ({'email': ['camille@example.com'], 'password': 'secret1'}, 'email'),
        ({'email': 'camille@example.com', 'password': ['secret1']}, 'password'),
        ({'email': 'camille@example.com', 'password': 1234567}, 'password'),
        (['camille@example.com', 'secret1'], 'email'),
    ])
    def test_login_with_wrong_types(self, client, body, field):
        response = client.post('/auth/demo/login', json=body)

        assert response.status_code == 400
        assert response.get_json()['field'] == field

    def test_signup_with_non_string_first_name(self, client):
        response = client.post('/auth/demo/signup', json={
            'email': 'camille@example.com', 'password': 'secret1', 'firstname': ['Camille']
        })

        assert response.status_code == 400
        assert response.get_json()['field'] == 'firstname'

    def test_signup(self, client):
        response = client.post('/auth/demo/signup', json={
            'email': 'camille@example.com',
            'password': 'secret1',
            'firstname': 'Camille',
            'lastname': 'Martin',
        })

        assert response.status_code == 201
        assert response.get_json()['user']['name'] == 'Camille Martin'


class TestServiceEndpoints:

    def test_health(self, client):
        assert client.get('/health').get_json() == {'status': 'healthy', 'database': 'connected'}

    def test_csrf_token(self, client):
        assert client.get('/csrf-token').get_json()['csrf_token']

    def test_unknown_route_is_json(self, client):
        response = client.get('/nope')

        assert response.status_code == 404
        assert response.get_json()['status'] == 'error'

    def test_metrics(self, client):
        response = client.get('/metrics')

        assert response.status_code == 200
        assert b'http_requests_total' in response.data
