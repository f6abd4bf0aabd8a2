from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from product_reviews.domain import reviews


@reviews.event(part_of="ProductRating")
class ProductRatingUpdated:
    """A product's rating rollup was recomputed from its approved reviews."""

    __version__ = 1

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    total_reviews = Integer(required=True)
    rating_distribution = Text(required=True)  # JSON list, index 0 = 1 star
    verified_review_count = Integer(required=True)
    correlation_id = String()
    updated_at = DateTime(required=True)


@reviews.event(part_of="ProductRating")
class ProductRatingRemoved:
    """A purged product's rating rollup was deleted."""

    __version__ = 1

    product_id = Identifier(required=True)
    correlation_id = String()
    removed_at = DateTime(required=True)
