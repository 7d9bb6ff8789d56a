"""Catalogue management: category and product commands and handlers."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.category import Category
from marketplace.catalogue.product import NAME_MAX_LENGTH, VARIANT_ATTRIBUTE_MAX_LENGTH, Product
from marketplace.domain import marketplace
from marketplace.identity.account import Account
from marketplace.shared.actor import Actor, Role, owner_id_for
from marketplace.shared.errors import ConflictError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100)
    tax_rate: Float(default=0.0, min_value=0.0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Category")
class UpdateCategoryTaxRate:
    category_id: Identifier(required=True)
    tax_rate: Float(required=True, min_value=0.0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Product")
class CreateProduct:
    """List a new product in a branch catalogue.

    ``variants`` is a JSON list of ``{"color", "size", "price", "stock"}``.
    """

    branch_id: Identifier(required=True)
    name: String(required=True, max_length=NAME_MAX_LENGTH)
    category: String(max_length=100)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    variants: Text()
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    color: String(max_length=VARIANT_ATTRIBUTE_MAX_LENGTH)
    size: String(max_length=VARIANT_ATTRIBUTE_MAX_LENGTH)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Category)
        if repo.find_by_name(command.name) is not None:
            raise ConflictError({"name": [f"Category `{command.name}` already exists"]})

        category = Category.create(name=command.name, tax_rate=command.tax_rate)
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategoryTaxRate)
    def update_category_tax_rate(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.change_tax_rate(command.tax_rate)
        repo.add(category)


@marketplace.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        Actor.from_command(command).require_branch_or_platform(command.branch_id)

        owner = current_domain.repository_for(Account).get(owner_id_for(command.branch_id))
        repo = current_domain.repository_for(Product)
        listed = repo.count_for_branch(command.branch_id)
        if listed >= owner.product_limit:
            raise ConflictError(
                {"plan": [f"The {owner.plan} plan allows {owner.product_limit} products; upgrade to list more"]}
            )

        variants = json.loads(command.variants) if command.variants else []
        product = Product.create(
            branch_id=command.branch_id,
            name=command.name,
            category=command.category,
            price=command.price,
            stock=command.stock or 0,
            variants=variants,
        )
        repo.add(product)
        logger.info("Product listed", product_id=str(product.id), branch_id=str(command.branch_id))
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        Actor.from_command(command).require_branch_or_platform(product.branch_id)

        variant = product.add_variant(
            color=command.color,
            size=command.size,
            price=command.price,
            stock=command.stock or 0,
        )
        repo.add(product)
        return str(variant.id)
