"""Application tests for category and product commands."""

import pytest
from protean import current_domain

from marketplace.catalogue.category import Category
from marketplace.catalogue.management import AddVariant, CreateCategory, CreateProduct, UpdateCategoryTaxRate
from marketplace.catalogue.product import Product
from marketplace.identity.management import UpgradePlan
from marketplace.shared.errors import ConflictError, PermissionDenied


class TestCategories:
    def test_platform_admin_creates_category(self, platform_admin):
        category_id = current_domain.process(
            CreateCategory(name="Electronics", tax_rate=15.0, **platform_admin.as_command_fields()),
            asynchronous=False,
        )
        assert current_domain.repository_for(Category).get(category_id).tax_rate == 15.0

    def test_duplicate_category_conflicts(self, platform_admin):
        command = CreateCategory(name="Electronics", **platform_admin.as_command_fields())
        current_domain.process(command, asynchronous=False)
        with pytest.raises(ConflictError):
            current_domain.process(command, asynchronous=False)

    def test_seller_cannot_create_category(self, onboard_seller):
        seller = onboard_seller("seller-1")
        with pytest.raises(PermissionDenied):
            current_domain.process(
                CreateCategory(name="Electronics", **seller.as_command_fields()),
                asynchronous=False,
            )

    def test_tax_rate_update(self, platform_admin):
        fields = platform_admin.as_command_fields()
        category_id = current_domain.process(CreateCategory(name="Books", **fields), asynchronous=False)
        current_domain.process(
            UpdateCategoryTaxRate(category_id=category_id, tax_rate=5.0, **fields),
            asynchronous=False,
        )
        assert current_domain.repository_for(Category).tax_rates() == {"Books": 5.0}


class TestProducts:
    def test_seller_lists_product_with_variants(self, onboard_seller, list_product):
        seller = onboard_seller("seller-1")
        product = list_product(
            seller,
            variants=[
                {"color": "Red", "size": "M", "price": 110.0, "stock": 3},
                {"color": "Blue", "size": "L", "price": 110.0, "stock": 2},
            ],
        )
        assert product.branch_id == seller.branch_id
        assert product.stock == 5
        assert len(product.variants) == 2

    def test_seller_cannot_list_in_another_branch(self, onboard_seller, list_product):
        first = onboard_seller("seller-1")
        other = onboard_seller("seller-2")
        with pytest.raises(PermissionDenied):
            current_domain.process(
                CreateProduct(branch_id=first.branch_id, name="Knock-off", price=1.0, **other.as_command_fields()),
                asynchronous=False,
            )

    def test_free_plan_product_limit(self, onboard_seller, list_product):
        seller = onboard_seller("seller-1")
        for i in range(10):
            list_product(seller, name=f"Item {i}")

        with pytest.raises(ConflictError):
            list_product(seller, name="One too many")

    def test_pro_plan_lifts_limit(self, onboard_seller, list_product):
        seller = onboard_seller("seller-1")
        for i in range(10):
            list_product(seller, name=f"Item {i}")
        current_domain.process(UpgradePlan(user_id=seller.id, **seller.as_command_fields()), asynchronous=False)

        assert list_product(seller, name="Item 11").name == "Item 11"

    def test_add_variant(self, onboard_seller, list_product):
        seller = onboard_seller("seller-1")
        product = list_product(seller, variants=[{"color": "Red", "size": "M", "price": 110.0, "stock": 3}])

        current_domain.process(
            AddVariant(product_id=product.id, color="Green", size="S", price=105.0, stock=4, **seller.as_command_fields()),
            asynchronous=False,
        )

        product = current_domain.repository_for(Product).get(product.id)
        assert len(product.variants) == 2
        assert product.stock == 7
