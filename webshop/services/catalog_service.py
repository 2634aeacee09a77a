"""
Catalog and promotion code providers.

Both lookups have two variants: a static one built from the default offer list
(used when no database catalog is configured, like the storefront demo mode)
and a database one reading the `product` and `promotion` tables. Callers only
use `get_product` / `get_promotion`.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from webshop.models import Product, Promotion, PromotionKind

logger = logging.getLogger(__name__)


DEFAULT_PRODUCTS = [
    {'id': 'site-vitrine', 'name': 'Site Vitrine', 'price': Decimal('499.00'), 'icon': '🌐',
     'description': "Site vitrine responsive jusqu'à 5 pages, livré en 2-3 semaines."},
    {'id': 'site-ecommerce', 'name': 'Site E-commerce', 'price': Decimal('999.00'), 'icon': '🛒',
     'description': 'Boutique en ligne complète avec paiement sécurisé.'},
    {'id': 'sur-mesure', 'name': 'Projet Sur-mesure', 'price': Decimal('2499.00'), 'icon': '🚀',
     'description': 'Application web développée selon votre cahier des charges.'},
    {'id': 'maintenance', 'name': 'Maintenance mensuelle', 'price': Decimal('49.99'), 'icon': '🛠️',
     'description': 'Mises à jour de sécurité, sauvegardes et support technique.'},
    {'id': 'seo-audit', 'name': 'Audit SEO', 'price': Decimal('299.00'), 'icon': '📈',
     'description': 'Audit technique et plan d’action de référencement.'},
    {'id': 'logo-design', 'name': 'Création de logo', 'price': Decimal('149.90'), 'icon': '🎨',
     'description': 'Trois propositions de logo et fichiers sources.'},
]

DEFAULT_PROMOTIONS = [
    {'code': 'BIENVENUE10', 'kind': PromotionKind.PERCENTAGE.value, 'value': Decimal('10'),
     'description': 'Réduction de 10%'},
    {'code': 'NEXUS20', 'kind': PromotionKind.PERCENTAGE.value, 'value': Decimal('20'),
     'description': 'Réduction de 20%', 'minimum_subtotal': Decimal('1000.00')},
    {'code': 'REMISE50', 'kind': PromotionKind.FIXED.value, 'value': Decimal('50.00'),
     'description': 'Remise de 50 €'},
    {'code': 'LANCEMENT2024', 'kind': PromotionKind.PERCENTAGE.value, 'value': Decimal('15'),
     'description': 'Offre de lancement -15%', 'expires_on': date(2024, 12, 31)},
]


class CatalogProvider:
    """Synchronous product lookup."""

    def get_product(self, product_id: str) -> Optional[Product]:
        raise NotImplementedError

    def list_products(self) -> List[Product]:
        raise NotImplementedError


class StaticCatalog(CatalogProvider):
    """Catalog held in memory. Products are transient model instances."""

    def __init__(self, products: Optional[Iterable[dict]] = None):
        rows = DEFAULT_PRODUCTS if products is None else products
        self._products: Dict[str, Product] = {}
        for position, row in enumerate(rows):
            product = Product(active=True, sort_order=position, **row)
            self._products[product.id] = product

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def list_products(self) -> List[Product]:
        return list(self._products.values())


class DatabaseCatalog(CatalogProvider):
    """Catalog read from the `product` table (active products only)."""

    def __init__(self, session):
        self.session = session

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.session.query(Product).filter(
            Product.id == product_id,
            Product.active == True  # noqa: E712
        ).first()

    def list_products(self) -> List[Product]:
        return (self.session.query(Product)
                .filter(Product.active == True)  # noqa: E712
                .order_by(Product.sort_order, Product.name)
                .all())


class PromotionRegistry:
    """Synchronous promotion code lookup (exact, case-sensitive)."""

    def get_promotion(self, code: str) -> Optional[Promotion]:
        raise NotImplementedError


class StaticPromotionRegistry(PromotionRegistry):
    """Promotion codes held in memory."""

    def __init__(self, promotions: Optional[Iterable[dict]] = None):
        rows = DEFAULT_PROMOTIONS if promotions is None else promotions
        self._promotions: Dict[str, Promotion] = {}
        for row in rows:
            promotion = Promotion(active=True, **row)
            self._promotions[promotion.code] = promotion

    def get_promotion(self, code: str) -> Optional[Promotion]:
        return self._promotions.get(code)


class DatabasePromotionRegistry(PromotionRegistry):
    """Promotion codes read from the `promotion` table."""

    def __init__(self, session):
        self.session = session

    def get_promotion(self, code: str) -> Optional[Promotion]:
        return self.session.query(Promotion).filter(
            Promotion.code == code,
            Promotion.active == True  # noqa: E712
        ).first()


_static_catalog = None
_static_promotions = None


def get_catalog(app_config, session=None) -> CatalogProvider:
    """Return the catalog provider configured by CATALOG_BACKEND."""
    global _static_catalog
    if app_config.get('CATALOG_BACKEND') == 'database':
        return DatabaseCatalog(session)
    if _static_catalog is None:
        _static_catalog = StaticCatalog()
    return _static_catalog


def get_promotions(app_config, session=None) -> PromotionRegistry:
    """Return the promotion registry configured by CATALOG_BACKEND."""
    global _static_promotions
    if app_config.get('CATALOG_BACKEND') == 'database':
        return DatabasePromotionRegistry(session)
    if _static_promotions is None:
        _static_promotions = StaticPromotionRegistry()
    return _static_promotions


def seed_catalog(session) -> int:
    """
    Insert the default products and promotion codes that are not in the
    database yet. Returns the number of inserted rows.
    """
    inserted = 0
    for position, row in enumerate(DEFAULT_PRODUCTS):
        if session.get(Product, row['id']) is None:
            session.add(Product(active=True, sort_order=position, **row))
            inserted += 1
    for row in DEFAULT_PROMOTIONS:
        if session.get(Promotion, row['code']) is None:
            session.add(Promotion(active=True, **row))
            inserted += 1
    session.commit()
    logger.info(f"[CATALOG] Seeded {inserted} rows")
    return inserted
