"""
Review moderation and rating aggregation
"""

import logging
from models import db, Idea, IdeaReview
from forms import ReviewForm, validate_form
from utils.error_handling import NotFound

logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


class ReviewService:
    """Service class for idea reviews"""

    @staticmethod
    def _get_review(review_id):
        review = db.session.get(IdeaReview, review_id)
        if not review:
            raise NotFound(f"Review not found with id: {review_id}")
        return review

    @staticmethod
    def submit_review(idea_id, payload):
        """Store a review pending moderation"""
        form = validate_form(ReviewForm, payload)
        if not db.session.get(Idea, idea_id):
            raise NotFound(f"Idea not found with id: {idea_id}")

        review = IdeaReview(
            idea_id=idea_id,
            reviewer_name=form.reviewerName.data.strip(),
            reviewer_email=(form.reviewerEmail.data or '').strip() or None,
            reviewer_website=(form.reviewerWebsite.data or '').strip() or None,
            comment=form.comment.data.strip(),
            rating=form.rating.data,
            is_recommended=bool(payload.get('isRecommended', False)),
            is_approved=False
        )
        db.session.add(review)
        db.session.commit()
        logger.info(f"Review {review.id} submitted for idea {idea_id}, awaiting approval")
        return review

    @staticmethod
    def get_approved_reviews(idea_id):
        return IdeaReview.query.filter_by(idea_id=idea_id, is_approved=True).order_by(
            IdeaReview.created_at.desc(), IdeaReview.id.desc()
        ).all()

    @staticmethod
    def get_pending_reviews():
        return IdeaReview.query.filter_by(is_approved=False).order_by(
            IdeaReview.created_at.desc(), IdeaReview.id.desc()
        ).all()

    @staticmethod
    def approve_review(review_id):
        review = ReviewService._get_review(review_id)
        review.is_approved = True
        db.session.commit()
        logger.info(f"Review {review_id} approved")
        return review

    @staticmethod
    def delete_review(review_id):
        review = ReviewService._get_review(review_id)
        db.session.delete(review)
        db.session.commit()
        logger.info(f"Review {review_id} deleted")

    @staticmethod
    def reject_review(review_id):
        """Rejected reviews are removed from the moderation queue"""
        ReviewService.delete_review(review_id)

    @staticmethod
    def vote(review_id, helpful):
        """Increment one vote counter in a single UPDATE"""
        column = IdeaReview.helpful_votes if helpful else IdeaReview.unhelpful_votes
        updated = IdeaReview.query.filter_by(id=review_id).update(
            {column: column + 1}, synchronize_session=False
        )
        if not updated:
            db.session.rollback()
            raise NotFound(f"Review not found with id: {review_id}")
        db.session.commit()
        return db.session.get(IdeaReview, review_id)

    @staticmethod
    def rating_summary(idea_id):
        """Average, count and 1..5 distribution over approved reviews"""
        rows = db.session.query(IdeaReview.rating, db.func.count(IdeaReview.id)).filter(
            IdeaReview.idea_id == idea_id,
            IdeaReview.is_approved.is_(True)
        ).group_by(IdeaReview.rating).all()

        distribution = {str(value): 0 for value in RATING_VALUES}
        total = 0
        rating_sum = 0
        for rating, count in rows:
            distribution[str(rating)] = count
            total += count
            rating_sum += rating * count

        return {
            'averageRating': round(rating_sum / total, 2) if total else 0.0,
            'totalReviews': total,
            'ratingDistribution': distribution,
        }
