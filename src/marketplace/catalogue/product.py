"""Product aggregate with Variant entities.

When a product has variants, its ``stock`` is the sum of its variants'
stock. Every writer that touches a variant recomputes the total inside the
same change, so the invariant holds after each write.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.shared.errors import InsufficientStock

NAME_MAX_LENGTH = 255
VARIANT_ATTRIBUTE_MAX_LENGTH = 50
# Longest "<name> (<color> / <size>)" that label_for can produce
LABEL_MAX_LENGTH = NAME_MAX_LENGTH + 2 * VARIANT_ATTRIBUTE_MAX_LENGTH + len(" ( / )")


class StockPolicy:
    REJECT = "reject"
    CLAMP = "clamp"


@marketplace.entity(part_of="Product")
class Variant:
    """A priced, stocked colour/size combination of a product."""

    color: String(max_length=VARIANT_ATTRIBUTE_MAX_LENGTH)
    size: String(max_length=VARIANT_ATTRIBUTE_MAX_LENGTH)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)

    @property
    def label(self) -> str:
        parts = [p for p in (self.color, self.size) if p]
        return " / ".join(parts)


@marketplace.aggregate
class Product:
    branch_id: Identifier(required=True)
    name: String(required=True, max_length=NAME_MAX_LENGTH)
    category: String(max_length=100)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    variants: HasMany(Variant)
    created_at: DateTime()

    @invariant.post
    def stock_is_sum_of_variant_stock(self):
        if not self.variants:
            return
        total = sum(v.stock or 0 for v in self.variants)
        if self.stock != total:
            raise ValidationError({"stock": [f"Product stock {self.stock} must equal variant total {total}"]})

    @classmethod
    def create(cls, branch_id, name, price, category=None, stock=0, variants=None):
        from marketplace.catalogue.events import ProductCreated

        variants = variants or []
        product = cls(
            branch_id=branch_id,
            name=name,
            category=category,
            price=price,
            stock=stock if not variants else sum(int(v.get("stock", 0)) for v in variants),
            variants=[
                Variant(
                    color=v.get("color"),
                    size=v.get("size"),
                    price=v.get("price", price),
                    stock=int(v.get("stock", 0)),
                )
                for v in variants
            ],
            created_at=datetime.now(UTC),
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                branch_id=str(branch_id),
                name=name,
                category=category,
                price=price,
                stock=product.stock,
                variant_count=len(variants),
            )
        )
        return product

    def find_variant(self, variant_id) -> Variant:
        variant = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found on product {self.id}"]})
        return variant

    def price_for(self, variant_id=None) -> float:
        if variant_id:
            return self.find_variant(variant_id).price
        return self.price

    def label_for(self, variant_id=None) -> str:
        """Name snapshot recorded on order lines and ledger entries."""
        if variant_id:
            label = self.find_variant(variant_id).label
            if label:
                return f"{self.name} ({label})"
        return self.name

    def stock_for(self, variant_id=None) -> int:
        if variant_id:
            return self.find_variant(variant_id).stock or 0
        return self.stock or 0

    def add_variant(self, color, size, price, stock=0):
        from marketplace.catalogue.events import VariantAdded

        variant = Variant(color=color, size=size, price=price, stock=stock)
        with atomic_change(self):
            self.add_variants(variant)
            self._recompute_stock()

        self.raise_(
            VariantAdded(
                product_id=self.id,
                variant_id=variant.id,
                color=color,
                size=size,
                price=price,
                stock=stock,
            )
        )
        return variant

    def deduct(self, quantity: int, variant_id=None, policy: str = StockPolicy.REJECT) -> int:
        """Take ``quantity`` units out of the variant (or base) stock.

        Returns the resulting stock of the decremented unit. Under the
        ``reject`` policy an oversized decrement raises ``InsufficientStock``
        and nothing changes; under ``clamp`` the stock floors at zero.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        current = self.stock_for(variant_id)
        if quantity > current and policy != StockPolicy.CLAMP:
            raise InsufficientStock(
                product_id=str(self.id),
                variant_id=str(variant_id) if variant_id else None,
                requested=quantity,
                available=current,
            )
        return self._set_stock(max(0, current - quantity), variant_id)

    def adjust(self, change: int, variant_id=None) -> int:
        """Apply a manual signed correction and return the resulting stock."""
        if change == 0:
            raise ValidationError({"change_amount": ["Adjustment cannot be zero"]})

        new_stock = self.stock_for(variant_id) + change
        if new_stock < 0:
            raise ValidationError({"change_amount": ["Adjustment would make stock negative"]})
        return self._set_stock(new_stock, variant_id)

    def _set_stock(self, new_stock: int, variant_id=None) -> int:
        if variant_id:
            variant = self.find_variant(variant_id)
            with atomic_change(self):
                variant.stock = new_stock
                self._recompute_stock()
        else:
            if self.variants:
                raise ValidationError({"variant_id": ["Products with variants are stocked per variant"]})
            self.stock = new_stock
        return new_stock

    def _recompute_stock(self):
        self.stock = sum(v.stock or 0 for v in self.variants)


@marketplace.repository(part_of=Product)
class ProductRepository:
    def for_branch(self, branch_id) -> list[Product]:
        return self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items

    def count_for_branch(self, branch_id) -> int:
        return len(self.for_branch(branch_id))
