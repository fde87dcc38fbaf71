"""
User dashboard: saved ideas, proposed ideas and rewards
"""

import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from models import db, Idea, SavedIdea, ProposedIdea, UserReward
from forms import ProposedIdeaForm, validate_form
from utils.error_handling import NotFound, Conflict, ValidationError

logger = logging.getLogger(__name__)

PROPOSAL_STATUSES = ('PENDING', 'APPROVED', 'REJECTED')


class DashboardService:
    """Service class for per-user dashboard data"""

    @staticmethod
    def get_saved_ideas(user_id):
        return SavedIdea.query.filter_by(user_id=user_id).order_by(SavedIdea.saved_at.desc(), SavedIdea.id.desc()).all()

    @staticmethod
    def save_idea(user_id, idea_id, notes=None):
        idea = db.session.get(Idea, idea_id)
        if not idea or not idea.active:
            raise NotFound(f"Idea not found with id: {idea_id}")
        saved = SavedIdea(user_id=user_id, idea_id=idea_id, notes=notes)
        db.session.add(saved)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise Conflict('Idea is already saved')
        return saved

    @staticmethod
    def unsave_idea(user_id, idea_id):
        deleted = SavedIdea.query.filter_by(user_id=user_id, idea_id=idea_id).delete(synchronize_session=False)
        db.session.commit()
        if not deleted:
            raise NotFound('Saved idea not found')

    @staticmethod
    def get_proposals(user_id=None, status=None):
        query = ProposedIdea.query
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        if status:
            query = query.filter_by(status=status.upper())
        return query.order_by(ProposedIdea.submitted_at.desc(), ProposedIdea.id.desc()).all()

    @staticmethod
    def propose_idea(user_id, payload):
        form = validate_form(ProposedIdeaForm, payload)
        proposal = ProposedIdea(
            user_id=user_id,
            title=form.title.data.strip(),
            description=form.description.data.strip(),
            category=(form.category.data or '').strip() or None,
            investment_needed=form.investmentNeeded.data,
            difficulty_level=form.difficultyLevel.data or None,
            status='PENDING'
        )
        db.session.add(proposal)
        db.session.commit()
        logger.info(f"User {user_id} proposed idea {proposal.id}: {proposal.title}")
        return proposal

    @staticmethod
    def review_proposal(proposal_id, status, admin_notes, reviewer):
        status = (status or '').upper()
        if status not in ('APPROVED', 'REJECTED'):
            raise ValidationError('status must be APPROVED or REJECTED')
        proposal = db.session.get(ProposedIdea, proposal_id)
        if not proposal:
            raise NotFound(f"Proposal not found with id: {proposal_id}")
        proposal.status = status
        proposal.admin_notes = admin_notes
        proposal.reviewed_at = datetime.utcnow()
        proposal.reviewed_by = reviewer
        db.session.commit()
        logger.info(f"Proposal {proposal_id} {status.lower()} by {reviewer}")
        return proposal

    @staticmethod
    def get_rewards(user_id):
        return UserReward.query.filter_by(user_id=user_id).order_by(UserReward.earned_at.desc(), UserReward.id.desc()).all()

    @staticmethod
    def get_stats(user_id):
        rewards = DashboardService.get_rewards(user_id)
        return {
            'savedIdeas': SavedIdea.query.filter_by(user_id=user_id).count(),
            'proposedIdeas': ProposedIdea.query.filter_by(user_id=user_id).count(),
            'totalRewards': len(rewards),
            'totalPoints': sum(reward.points_value or 0 for reward in rewards),
        }
