"""VoteOnReview: cast, switch or retract a helpfulness vote.

Cannot vote on own review. Voting the same way twice retracts the vote.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from product_reviews.domain import reviews
from product_reviews.review.review import Review


@reviews.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    vote_type = String(required=True)  # "Helpful" or "NotHelpful"
    correlation_id = String()


@reviews.command_handler(part_of=Review)
class VoteOnReviewHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        outcome = review.vote(
            customer_id=command.customer_id,
            vote_type=command.vote_type,
            correlation_id=command.correlation_id,
        )

        repo.add(review)
        return outcome.value
