"""Category aggregate: carries the per-category tax rate used by tax accrual."""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, String

from marketplace.domain import marketplace


@marketplace.aggregate
class Category:
    """A product grouping. ``tax_rate`` is a percentage applied to line totals."""

    name: String(required=True, max_length=100)
    tax_rate: Float(default=0.0, min_value=0.0)
    created_at: DateTime()

    @classmethod
    def create(cls, name, tax_rate=0.0):
        from marketplace.catalogue.events import CategoryCreated

        now = datetime.now(UTC)
        category = cls(name=name.strip(), tax_rate=tax_rate or 0.0, created_at=now)
        category.raise_(CategoryCreated(category_id=category.id, name=category.name, tax_rate=category.tax_rate))
        return category

    def change_tax_rate(self, tax_rate):
        from marketplace.catalogue.events import CategoryTaxRateChanged

        previous = self.tax_rate
        self.tax_rate = tax_rate
        self.raise_(
            CategoryTaxRateChanged(
                category_id=self.id,
                previous_tax_rate=previous,
                new_tax_rate=self.tax_rate,
            )
        )


@marketplace.repository(part_of=Category)
class CategoryRepository:
    def find_by_name(self, name: str) -> Category | None:
        results = self._dao.query.filter(name=name.strip()).limit(None).all().items
        return results[0] if results else None

    def tax_rates(self) -> dict[str, float]:
        """Category name -> tax rate for every category."""
        return {c.name: c.tax_rate or 0.0 for c in self._dao.query.limit(None).all().items}
