"""
Idea detail sub-resources: SWOT factors, investment breakdown, schemes and bank loans
"""

import logging
from models import db, Idea, IdeaInternalFactor, IdeaInvestment, IdeaScheme, IdeaBankLoan
from forms import InternalFactorForm, InvestmentForm, SchemeForm, BankLoanForm, validate_form
from utils.error_handling import NotFound
from utils.idea_service import split_list_value
from utils.review_service import ReviewService

logger = logging.getLogger(__name__)


def _text(payload, key):
    value = payload.get(key)
    if isinstance(value, str):
        value = value.strip()
    return value if value not in ('', None) else None


class IdeaDetailService:
    """Service class for per-idea detail records"""

    @staticmethod
    def _require_idea(idea_id):
        idea = db.session.get(Idea, idea_id)
        if not idea:
            raise NotFound(f"Idea not found with id: {idea_id}")
        return idea

    @staticmethod
    def _delete(model, record_id, label):
        record = db.session.get(model, record_id)
        if not record:
            raise NotFound(f"{label} not found with id: {record_id}")
        db.session.delete(record)
        db.session.commit()
        logger.info(f"Deleted {label.lower()} {record_id}")

    # Internal factors

    @staticmethod
    def get_internal_factors(idea_id):
        return IdeaInternalFactor.query.filter_by(idea_id=idea_id).order_by(IdeaInternalFactor.id).all()

    @staticmethod
    def add_internal_factors(idea_id, payload):
        form = validate_form(InternalFactorForm, payload)
        IdeaDetailService._require_idea(idea_id)
        record = IdeaInternalFactor(
            idea_id=idea_id,
            factor_type=form.factorType.data,
            factors=split_list_value(payload.get('factors')),
            color_code=_text(payload, 'colorCode'),
            icon_code=_text(payload, 'iconCode')
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def delete_internal_factors(record_id):
        IdeaDetailService._delete(IdeaInternalFactor, record_id, 'Internal factors')

    # Investments

    @staticmethod
    def get_investments(idea_id):
        return IdeaInvestment.query.filter_by(idea_id=idea_id).order_by(
            IdeaInvestment.amount.desc(), IdeaInvestment.id
        ).all()

    @staticmethod
    def investment_summary(idea_id):
        investments = IdeaDetailService.get_investments(idea_id)
        total = sum((item.amount for item in investments if item.amount is not None), 0)
        return {
            'investments': [item.to_dict() for item in investments],
            'totalInvestment': float(total),
            'investmentCount': len(investments),
        }

    @staticmethod
    def add_investment(idea_id, payload):
        form = validate_form(InvestmentForm, payload)
        IdeaDetailService._require_idea(idea_id)
        record = IdeaInvestment(
            idea_id=idea_id,
            investment_category=form.investmentCategory.data.strip(),
            amount=form.amount.data,
            description=_text(payload, 'description'),
            priority_level=_text(payload, 'priorityLevel'),
            is_optional=bool(payload.get('isOptional', False)),
            payment_terms=_text(payload, 'paymentTerms'),
            supplier_info=_text(payload, 'supplierInfo')
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def delete_investment(record_id):
        IdeaDetailService._delete(IdeaInvestment, record_id, 'Investment')

    # Government schemes

    @staticmethod
    def get_schemes(idea_id, scheme_type=None):
        query = IdeaScheme.query.filter_by(idea_id=idea_id, is_active=True)
        if scheme_type:
            query = query.filter(IdeaScheme.scheme_type == scheme_type.upper())
        return query.order_by(IdeaScheme.scheme_name).all()

    @staticmethod
    def add_scheme(idea_id, payload):
        form = validate_form(SchemeForm, payload)
        IdeaDetailService._require_idea(idea_id)
        scheme_type = _text(payload, 'schemeType')
        record = IdeaScheme(
            idea_id=idea_id,
            scheme_name=form.schemeName.data.strip(),
            scheme_type=scheme_type.upper() if scheme_type else None,
            scheme_category=_text(payload, 'schemeCategory'),
            region_state=_text(payload, 'regionState'),
            description=_text(payload, 'description'),
            eligibility_criteria=_text(payload, 'eligibilityCriteria'),
            maximum_amount=form.maximumAmount.data,
            interest_rate=form.interestRate.data,
            repayment_period=_text(payload, 'repaymentPeriod'),
            application_deadline=_text(payload, 'applicationDeadline'),
            contact_info=_text(payload, 'contactInfo'),
            website_url=_text(payload, 'websiteUrl'),
            is_active=bool(payload.get('isActive', True))
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def delete_scheme(record_id):
        IdeaDetailService._delete(IdeaScheme, record_id, 'Scheme')

    # Bank loans

    @staticmethod
    def get_bank_loans(idea_id, loan_type=None):
        query = IdeaBankLoan.query.filter_by(idea_id=idea_id, is_active=True)
        if loan_type:
            query = query.filter(IdeaBankLoan.loan_type == loan_type)
        return query.order_by(IdeaBankLoan.bank_name).all()

    @staticmethod
    def add_bank_loan(idea_id, payload):
        form = validate_form(BankLoanForm, payload)
        IdeaDetailService._require_idea(idea_id)
        record = IdeaBankLoan(
            idea_id=idea_id,
            bank_name=form.bankName.data.strip(),
            loan_type=_text(payload, 'loanType'),
            loan_name=_text(payload, 'loanName'),
            description=_text(payload, 'description'),
            min_amount=form.minAmount.data,
            max_amount=form.maxAmount.data,
            interest_rate_min=form.interestRateMin.data,
            interest_rate_max=form.interestRateMax.data,
            tenure_min=form.tenureMin.data,
            tenure_max=form.tenureMax.data,
            processing_fee=_text(payload, 'processingFee'),
            eligibility_criteria=_text(payload, 'eligibilityCriteria'),
            required_documents=_text(payload, 'requiredDocuments'),
            contact_info=_text(payload, 'contactInfo'),
            website_url=_text(payload, 'websiteUrl'),
            is_active=bool(payload.get('isActive', True))
        )
        db.session.add(record)
        db.session.commit()
        return record

    @staticmethod
    def delete_bank_loan(record_id):
        IdeaDetailService._delete(IdeaBankLoan, record_id, 'Bank loan')

    # Aggregate

    @staticmethod
    def get_complete_details(idea_id):
        idea = IdeaDetailService._require_idea(idea_id)
        return {
            'idea': idea.to_dict(),
            'internalFactors': [item.to_dict() for item in IdeaDetailService.get_internal_factors(idea_id)],
            'investments': IdeaDetailService.investment_summary(idea_id),
            'schemes': [item.to_dict() for item in IdeaDetailService.get_schemes(idea_id)],
            'bankLoans': [item.to_dict() for item in IdeaDetailService.get_bank_loans(idea_id)],
            'ratingSummary': ReviewService.rating_summary(idea_id),
            'reviews': [review.to_dict() for review in ReviewService.get_approved_reviews(idea_id)],
        }
