"""
Integration tests for the session cart endpoints.
"""

import pytest


class TestCatalog:

    def test_list_products(self, client):
        products = client.get('/catalog/products').get_json()['products']

        assert len(products) == 6
        assert products[0] == {
            'id': 'site-vitrine',
            'name': 'Site Vitrine',
            'price': '499.00',
            'icon': products[0]['icon'],
            'description': products[0]['description'],
        }


class TestCartEndpoints:

    def test_empty_cart(self, client):
        data = client.get('/cart').get_json()

        assert data['items'] == []
        assert data['total'] == '0.00'

    def test_add_item_is_kept_in_session(self, client):
        response = client.post('/cart/items', json={'product_id': 'maintenance', 'quantity': 2})
        assert response.status_code == 201

        data = client.get('/cart').get_json()
        assert data['item_count'] == 2
        assert data['subtotal'] == '99.98'
        assert data['tax'] == '20.00'
        assert data['total'] == '119.98'

    def test_add_defaults_to_one(self, client):
        client.post('/cart/items', json={'product_id': 'seo-audit'})
        assert client.get('/cart').get_json()['item_count'] == 1

    def test_add_unknown_product(self, client):
        response = client.post('/cart/items', json={'product_id': 'hosting'})

        assert response.status_code == 404
        data = response.get_json()
        assert data['kind'] == 'unknown_product'
        assert data['product_id'] == 'hosting'

    @pytest.mark.parametrize('product_id', [['site-vitrine'], {'id': 'site-vitrine'}, 12])
    def test_add_non_string_product(self, client, product_id):
        response = client.post('/cart/items', json={'product_id': product_id})

        assert response.status_code == 400
        assert response.get_json()['field'] == 'product_id'

    @pytest.mark.parametrize('body', [['site-vitrine'], 'site-vitrine', 3])
    def test_non_object_body(self, client, body):
        response = client.post('/cart/items', json=body)

        assert response.status_code == 400
        assert response.get_json()['field'] == 'product_id'

    @pytest.mark.parametrize('quantity', ['²', '--2', [1]])
    def test_update_invalid_quantity(self, client, quantity):
        client.post('/cart/items', json={'product_id': 'logo-design'})

        response = client.patch('/cart/items/logo-design', json={'quantity': quantity})

        assert response.status_code == 400
        assert response.get_json()['kind'] == 'invalid_quantity'

    def test_add_without_product(self, client):
        response = client.post('/cart/items', json={'quantity': 1})

        assert response.status_code == 400
        assert response.get_json()['field'] == 'product_id'

    @pytest.mark.parametrize('quantity', [0, -3, 'deux', True, '²', '--2', '', [2], {'n': 2}])
    def test_add_invalid_quantity(self, client, quantity):
        response = client.post('/cart/items', json={'product_id': 'seo-audit', 'quantity': quantity})

        assert response.status_code == 400
        assert response.get_json()['kind'] == 'invalid_quantity'
        assert client.get('/cart').get_json()['items'] == []

    def test_update_quantity(self, client):
        client.post('/cart/items', json={'product_id': 'logo-design'})

        response = client.patch('/cart/items/logo-design', json={'quantity': '3'})

        assert response.status_code == 200
        assert response.get_json()['subtotal'] == '449.70'

    def test_update_to_zero_removes_line(self, client):
        client.post('/cart/items', json={'product_id': 'logo-design'})
        client.patch('/cart/items/logo-design', json={'quantity': 0})

        assert client.get('/cart').get_json()['items'] == []

    def test_remove_item(self, client):
        client.post('/cart/items', json={'product_id': 'logo-design'})
        client.post('/cart/items', json={'product_id': 'seo-audit'})

        data = client.delete('/cart/items/logo-design').get_json()

        assert [item['product_id'] for item in data['items']] == ['seo-audit']

    def test_clear_cart(self, client):
        client.post('/cart/items', json={'product_id': 'logo-design'})
        client.post('/cart/promo', json={'code': 'BIENVENUE10'})

        data = client.delete('/cart').get_json()

        assert data['items'] == []
        assert data['promo_code'] is None


class TestPromoEndpoints:

    def test_apply_code(self, client):
        client.post('/cart/items', json={'product_id': 'site-vitrine'})

        data = client.post('/cart/promo', json={'code': 'BIENVENUE10'}).get_json()

        assert data['success'] is True
        assert data['message'] == 'Réduction de 10% appliquée !'
        assert data['cart']['discount'] == '49.90'
        assert client.get('/cart').get_json()['promo_code'] == 'BIENVENUE10'

    def test_invalid_code_answers_inline(self, client):
        client.post('/cart/items', json={'product_id': 'site-vitrine'})

        response = client.post('/cart/promo', json={'code': 'FAKE'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is False
        assert data['kind'] == 'code_not_found'
        assert data['message'] == 'Code promo invalide'

    def test_expired_code(self, client):
        client.post('/cart/items', json={'product_id': 'site-vitrine'})

        data = client.post('/cart/promo', json={'code': 'LANCEMENT2024'}).get_json()

        assert data['kind'] == 'code_expired'

    def test_remove_code(self, client):
        client.post('/cart/items', json={'product_id': 'site-vitrine'})
        client.post('/cart/promo', json={'code': 'REMISE50'})

        data = client.delete('/cart/promo').get_json()

        assert data['promo_code'] is None
        assert data['discount'] == '0.00'

    @pytest.mark.parametrize('code', [['BIENVENUE10'], {'code': 'BIENVENUE10'}, 10])
    def test_non_string_code_answers_inline(self, client, code):
        client.post('/cart/items', json={'product_id': 'site-vitrine'})

        response = client.post('/cart/promo', json={'code': code})

        assert response.status_code == 200
        assert response.get_json()['kind'] == 'code_not_found'
