"""
Integration tests for the database CLI commands and the database catalog.
"""

from webshop.models import Product, Promotion


class TestSeedCatalog:

    def test_seed_then_reseed(self, app, session):
        runner = app.test_cli_runner()

        first = runner.invoke(args=['seed-catalog'])
        second = runner.invoke(args=['seed-catalog'])

        assert first.exit_code == 0
        assert '10 rows inserted' in first.output
        assert '0 rows inserted' in second.output
        assert session.query(Product).count() == 6
        assert session.query(Promotion).count() == 4

    def test_init_db_is_repeatable(self, app):
        result = app.test_cli_runner().invoke(args=['init-db'])

        assert result.exit_code == 0
        assert 'Tables created' in result.output


class TestDatabaseCatalog:

    def test_cart_uses_seeded_tables(self, app, client, session):
        app.test_cli_runner().invoke(args=['seed-catalog'])
        session.get(Product, 'seo-audit').active = False
        session.commit()
        app.config['CATALOG_BACKEND'] = 'database'

        ids = [product['id'] for product in client.get('/catalog/products').get_json()['products']]
        assert 'seo-audit' not in ids
        assert ids[0] == 'site-vitrine'

        client.post('/cart/items', json={'product_id': 'site-ecommerce'})
        client.post('/cart/items', json={'product_id': 'maintenance'})
        data = client.post('/cart/promo', json={'code': 'NEXUS20'}).get_json()

        assert data['success'] is True
        assert data['cart']['discount'] == '209.80'
        assert client.post('/cart/items', json={'product_id': 'seo-audit'}).status_code == 404
