from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()

DIFFICULTY_LEVELS = ('Easy', 'Medium', 'Hard')
LOCATIONS = ('Urban', 'Rural', 'Both')
FACTOR_TYPES = ('STRENGTHS', 'WEAKNESSES', 'OPPORTUNITIES', 'THREATS')


def _iso(value):
    return value.isoformat() if value else None


def _money(value):
    return float(value) if value is not None else None


class Idea(db.Model):
    """Business idea in the catalog"""
    __tablename__ = 'ideas'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    category = db.Column(db.String(100), nullable=False, index=True)
    sector = db.Column(db.String(100), nullable=False, index=True)
    investment_needed = db.Column(db.Numeric(15, 2), nullable=False, default=0)

    # Guidance
    expertise_needed = db.Column(db.Text)
    training_needed = db.Column(db.Text)
    resources = db.Column(db.Text)
    success_examples = db.Column(db.Text)
    video_url = db.Column(db.String(500))
    government_subsidies = db.Column(db.Text)
    funding_options = db.Column(db.Text)
    bank_assistance = db.Column(db.Text)

    difficulty_level = db.Column(db.String(20))  # Easy, Medium, Hard
    time_to_market = db.Column(db.String(100))
    location = db.Column(db.String(20))  # Urban, Rural, Both
    image_url = db.Column(db.String(500))

    active = db.Column(db.Boolean, default=True, nullable=False)
    upload_batch_id = db.Column(db.String(36), index=True)  # Null for manually created ideas

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Tag sets
    target_audience_tags = db.relationship('IdeaTargetAudience', backref='idea', lazy=True,
                                           cascade='all, delete-orphan', order_by='IdeaTargetAudience.id')
    special_advantage_tags = db.relationship('IdeaSpecialAdvantage', backref='idea', lazy=True,
                                             cascade='all, delete-orphan', order_by='IdeaSpecialAdvantage.id')

    @property
    def target_audience(self):
        return [tag.value for tag in self.target_audience_tags]

    @property
    def special_advantages(self):
        return [tag.value for tag in self.special_advantage_tags]

    def set_target_audience(self, values):
        """Replace the target audience set"""
        self.target_audience_tags = [IdeaTargetAudience(value=v) for v in _clean_tags(values)]

    def set_special_advantages(self, values):
        """Replace the special advantage set"""
        self.special_advantage_tags = [IdeaSpecialAdvantage(value=v) for v in _clean_tags(values)]

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'sector': self.sector,
            'investmentNeeded': _money(self.investment_needed),
            'expertiseNeeded': self.expertise_needed,
            'trainingNeeded': self.training_needed,
            'resources': self.resources,
            'successExamples': self.success_examples,
            'videoUrl': self.video_url,
            'governmentSubsidies': self.government_subsidies,
            'fundingOptions': self.funding_options,
            'bankAssistance': self.bank_assistance,
            'targetAudience': self.target_audience,
            'specialAdvantages': self.special_advantages,
            'difficultyLevel': self.difficulty_level,
            'timeToMarket': self.time_to_market,
            'location': self.location,
            'imageUrl': self.image_url,
            'active': self.active,
            'uploadBatchId': self.upload_batch_id,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Idea {self.id} {self.title}>'


def _clean_tags(values):
    cleaned = []
    for value in values or []:
        value = str(value).strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class IdeaTargetAudience(db.Model):
    __tablename__ = 'idea_target_audiences'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    value = db.Column(db.String(100), nullable=False)

    def __repr__(self):
        return f'<IdeaTargetAudience idea_id={self.idea_id} {self.value}>'


class IdeaSpecialAdvantage(db.Model):
    __tablename__ = 'idea_special_advantages'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    value = db.Column(db.String(100), nullable=False)

    def __repr__(self):
        return f'<IdeaSpecialAdvantage idea_id={self.idea_id} {self.value}>'


class Category(db.Model):
    """Two-level category directory entry"""
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    main_category = db.Column(db.String(100), nullable=False, index=True)
    sub_category = db.Column(db.String(100), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'mainCategory': self.main_category,
            'subCategory': self.sub_category,
            'active': self.active,
        }

    def __repr__(self):
        return f'<Category {self.main_category} / {self.sub_category}>'


class UploadHistory(db.Model):
    """One row per bulk upload batch"""
    __tablename__ = 'upload_history'

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    batch_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    upload_timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    ideas_count = db.Column(db.Integer, default=0, nullable=False)
    file_size = db.Column(db.BigInteger)
    content_type = db.Column(db.String(100))
    uploaded_by = db.Column(db.String(100))
    status = db.Column(db.String(20), default='PROCESSING')  # PROCESSING, COMPLETED, FAILED

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'batchId': self.batch_id,
            'uploadTimestamp': _iso(self.upload_timestamp),
            'ideasCount': self.ideas_count,
            'fileSize': self.file_size,
            'contentType': self.content_type,
            'uploadedBy': self.uploaded_by,
            'status': self.status,
        }

    def __repr__(self):
        return f'<UploadHistory {self.batch_id} {self.filename} ideas={self.ideas_count}>'


class IdeaReview(db.Model):
    """Public review of an idea, visible once approved"""
    __tablename__ = 'idea_reviews'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    reviewer_name = db.Column(db.String(100), nullable=False)
    reviewer_email = db.Column(db.String(100))
    reviewer_website = db.Column(db.String(100))
    comment = db.Column(db.String(500), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    helpful_votes = db.Column(db.Integer, default=0, nullable=False)
    unhelpful_votes = db.Column(db.Integer, default=0, nullable=False)
    is_recommended = db.Column(db.Boolean, default=False)
    is_approved = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    idea = db.relationship('Idea', backref=db.backref('reviews', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'ideaId': self.idea_id,
            'reviewerName': self.reviewer_name,
            'reviewerEmail': self.reviewer_email,
            'reviewerWebsite': self.reviewer_website,
            'comment': self.comment,
            'rating': self.rating,
            'helpfulVotes': self.helpful_votes,
            'unhelpfulVotes': self.unhelpful_votes,
            'isRecommended': self.is_recommended,
            'isApproved': self.is_approved,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<IdeaReview idea_id={self.idea_id} rating={self.rating} approved={self.is_approved}>'


class IdeaInvestment(db.Model):
    """Line item of the startup investment breakdown"""
    __tablename__ = 'idea_investments'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    investment_category = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Numeric(15, 2), nullable=False)
    description = db.Column(db.Text)
    priority_level = db.Column(db.String(20))  # HIGH, MEDIUM, LOW
    is_optional = db.Column(db.Boolean, default=False)
    payment_terms = db.Column(db.String(255))
    supplier_info = db.Column(db.Text)

    def to_dict(self):
        return {
            'id': self.id,
            'ideaId': self.idea_id,
            'investmentCategory': self.investment_category,
            'amount': _money(self.amount),
            'description': self.description,
            'priorityLevel': self.priority_level,
            'isOptional': self.is_optional,
            'paymentTerms': self.payment_terms,
            'supplierInfo': self.supplier_info,
        }

    def __repr__(self):
        return f'<IdeaInvestment {self.investment_category} {self.amount}>'


class IdeaScheme(db.Model):
    """Government scheme relevant to an idea"""
    __tablename__ = 'idea_schemes'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    scheme_name = db.Column(db.String(255), nullable=False)
    scheme_type = db.Column(db.String(50))  # CENTRAL, STATE, ...
    scheme_category = db.Column(db.String(100))
    region_state = db.Column(db.String(100))
    description = db.Column(db.Text)
    eligibility_criteria = db.Column(db.Text)
    maximum_amount = db.Column(db.Numeric(15, 2))
    interest_rate = db.Column(db.Numeric(5, 2))
    repayment_period = db.Column(db.String(100))
    application_deadline = db.Column(db.String(100))
    contact_info = db.Column(db.Text)
    website_url = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'ideaId': self.idea_id,
            'schemeName': self.scheme_name,
            'schemeType': self.scheme_type,
            'schemeCategory': self.scheme_category,
            'regionState': self.region_state,
            'description': self.description,
            'eligibilityCriteria': self.eligibility_criteria,
            'maximumAmount': _money(self.maximum_amount),
            'interestRate': _money(self.interest_rate),
            'repaymentPeriod': self.repayment_period,
            'applicationDeadline': self.application_deadline,
            'contactInfo': self.contact_info,
            'websiteUrl': self.website_url,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<IdeaScheme {self.scheme_name}>'


class IdeaBankLoan(db.Model):
    """Bank loan product relevant to an idea"""
    __tablename__ = 'idea_bank_loans'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    bank_name = db.Column(db.String(255), nullable=False)
    loan_type = db.Column(db.String(100))
    loan_name = db.Column(db.String(255))
    description = db.Column(db.Text)
    min_amount = db.Column(db.Numeric(15, 2))
    max_amount = db.Column(db.Numeric(15, 2))
    interest_rate_min = db.Column(db.Numeric(5, 2))
    interest_rate_max = db.Column(db.Numeric(5, 2))
    tenure_min = db.Column(db.Integer)  # months
    tenure_max = db.Column(db.Integer)
    processing_fee = db.Column(db.String(100))
    eligibility_criteria = db.Column(db.Text)
    required_documents = db.Column(db.Text)
    contact_info = db.Column(db.Text)
    website_url = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'ideaId': self.idea_id,
            'bankName': self.bank_name,
            'loanType': self.loan_type,
            'loanName': self.loan_name,
            'description': self.description,
            'minAmount': _money(self.min_amount),
            'maxAmount': _money(self.max_amount),
            'interestRateMin': _money(self.interest_rate_min),
            'interestRateMax': _money(self.interest_rate_max),
            'tenureMin': self.tenure_min,
            'tenureMax': self.tenure_max,
            'processingFee': self.processing_fee,
            'eligibilityCriteria': self.eligibility_criteria,
            'requiredDocuments': self.required_documents,
            'contactInfo': self.contact_info,
            'websiteUrl': self.website_url,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<IdeaBankLoan {self.bank_name} {self.loan_type}>'


class IdeaInternalFactor(db.Model):
    """SWOT quadrant for an idea"""
    __tablename__ = 'idea_internal_factors'

    id = db.Column(db.Integer, primary_key=True)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False, index=True)
    factor_type = db.Column(db.String(20), nullable=False)  # STRENGTHS, WEAKNESSES, OPPORTUNITIES, THREATS
    factors = db.Column(db.JSON, default=list)
    color_code = db.Column(db.String(20))
    icon_code = db.Column(db.String(50))

    def to_dict(self):
        return {
            'id': self.id,
            'ideaId': self.idea_id,
            'factorType': self.factor_type,
            'factors': self.factors or [],
            'colorCode': self.color_code,
            'iconCode': self.icon_code,
        }

    def __repr__(self):
        return f'<IdeaInternalFactor idea_id={self.idea_id} {self.factor_type}>'


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255))
    google_id = db.Column(db.String(100), unique=True)
    role = db.Column(db.String(20), default='USER', nullable=False)  # USER, ADMIN
    full_name = db.Column(db.String(100))
    profile_image_url = db.Column(db.String(500))
    bio = db.Column(db.Text)
    phone_number = db.Column(db.String(20))
    location = db.Column(db.String(100))
    is_active = db.Column(db.Boolean, default=True)
    email_verified = db.Column(db.Boolean, default=False)
    auth_provider = db.Column(db.String(20), default='EMAIL')  # EMAIL, GOOGLE

    verification_token = db.Column(db.String(100), unique=True)
    verification_token_expiry = db.Column(db.DateTime)
    reset_password_token = db.Column(db.String(100), unique=True)
    reset_password_token_expiry = db.Column(db.DateTime)

    last_admin_login = db.Column(db.DateTime)
    admin_session_id = db.Column(db.String(36))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    admin_sessions = db.relationship('AdminSession', backref='user', lazy='dynamic')

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == 'ADMIN'

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'fullName': self.full_name,
            'role': self.role,
            'profileImageUrl': self.profile_image_url,
            'bio': self.bio,
            'phoneNumber': self.phone_number,
            'location': self.location,
            'active': self.is_active,
            'emailVerified': self.email_verified,
            'authProvider': self.auth_provider,
            'createdAt': _iso(self.created_at),
            'lastLogin': _iso(self.last_login),
        }

    def __repr__(self):
        return f'<User {self.username}>'


class AdminSession(db.Model):
    """Server-side record behind an admin bearer token"""
    __tablename__ = 'admin_sessions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)

    def is_valid(self, now=None):
        return self.active and (now or datetime.utcnow()) < self.expires_at

    def __repr__(self):
        return f'<AdminSession user_id={self.user_id} active={self.active}>'


class SavedIdea(db.Model):
    """Ideas bookmarked by users"""
    __tablename__ = 'saved_ideas'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    idea_id = db.Column(db.Integer, db.ForeignKey('ideas.id'), nullable=False)
    saved_at = db.Column(db.DateTime, default=datetime.utcnow)
    notes = db.Column(db.Text)

    idea = db.relationship('Idea')

    # Unique constraint to prevent duplicate saves
    __table_args__ = (db.UniqueConstraint('user_id', 'idea_id'),)

    def to_dict(self):
        return {
            'id': self.id,
            'savedAt': _iso(self.saved_at),
            'notes': self.notes,
            'idea': self.idea.to_dict() if self.idea else None,
        }

    def __repr__(self):
        return f'<SavedIdea user_id={self.user_id} idea_id={self.idea_id}>'


class ProposedIdea(db.Model):
    """Idea submitted by a user for admin review"""
    __tablename__ = 'proposed_ideas'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.String(2000), nullable=False)
    category = db.Column(db.String(100))
    investment_needed = db.Column(db.Numeric(15, 2))
    difficulty_level = db.Column(db.String(20))
    status = db.Column(db.String(20), default='PENDING')  # PENDING, APPROVED, REJECTED
    admin_notes = db.Column(db.Text)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow)
    reviewed_at = db.Column(db.DateTime)
    reviewed_by = db.Column(db.String(100))

    user = db.relationship('User', backref=db.backref('proposed_ideas', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'investmentNeeded': _money(self.investment_needed),
            'difficultyLevel': self.difficulty_level,
            'status': self.status,
            'adminNotes': self.admin_notes,
            'submittedAt': _iso(self.submitted_at),
            'reviewedAt': _iso(self.reviewed_at),
            'reviewedBy': self.reviewed_by,
        }

    def __repr__(self):
        return f'<ProposedIdea {self.title} status={self.status}>'


class UserReward(db.Model):
    __tablename__ = 'user_rewards'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    reward_name = db.Column(db.String(100), nullable=False)
    reward_description = db.Column(db.String(500))
    reward_type = db.Column(db.String(50))  # BADGE, POINTS, ...
    points_value = db.Column(db.Integer, default=0)
    icon_url = db.Column(db.String(500))
    earned_at = db.Column(db.DateTime, default=datetime.utcnow)
    is_claimed = db.Column(db.Boolean, default=False)
    claimed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'rewardName': self.reward_name,
            'rewardDescription': self.reward_description,
            'rewardType': self.reward_type,
            'pointsValue': self.points_value,
            'iconUrl': self.icon_url,
            'earnedAt': _iso(self.earned_at),
            'isClaimed': self.is_claimed,
            'claimedAt': _iso(self.claimed_at),
        }

    def __repr__(self):
        return f'<UserReward user_id={self.user_id} {self.reward_name}>'
