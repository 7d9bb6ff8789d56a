"""Domain events for the Category and Product aggregates."""

from protean.fields import Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Category")
class CategoryCreated:
    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    tax_rate: Float()


@marketplace.event(part_of="Category")
class CategoryTaxRateChanged:
    """A category's tax rate changed. Orders already carrying a tax amount are unaffected."""

    __version__ = 1

    category_id: Identifier(required=True)
    previous_tax_rate: Float()
    new_tax_rate: Float(required=True)


@marketplace.event(part_of="Product")
class ProductCreated:
    __version__ = 1

    product_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    name: String(required=True)
    category: String()
    price: Float(required=True)
    stock: Integer()
    variant_count: Integer()


@marketplace.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    color: String()
    size: String()
    price: Float(required=True)
    stock: Integer()
