from decimal import Decimal
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, TextAreaField, DecimalField, IntegerField, BooleanField, PasswordField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, NumberRange, AnyOf, Regexp
from wtforms import ValidationError as FieldValidationError
from models import DIFFICULTY_LEVELS, LOCATIONS, FACTOR_TYPES
from utils.error_handling import ValidationError

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


def finite_amount(form, field):
    """Reject NaN and infinite decimals"""
    if isinstance(field.data, Decimal) and not field.data.is_finite():
        raise FieldValidationError('Amount must be a finite number.')


class ApiForm(FlaskForm):
    """Base form fed from a JSON payload instead of request.form"""

    class Meta:
        csrf = False


class IdeaForm(ApiForm):
    title = StringField('Title', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[Optional()])
    category = StringField('Category', validators=[DataRequired(), Length(max=100)])
    sector = StringField('Sector', validators=[DataRequired(), Length(max=100)])
    investmentNeeded = DecimalField('Investment Needed', validators=[InputRequired(), finite_amount, NumberRange(min=0)])
    videoUrl = StringField('Video URL', validators=[Optional(), Length(max=500)])
    imageUrl = StringField('Image URL', validators=[Optional(), Length(max=500)])
    difficultyLevel = StringField('Difficulty Level', validators=[Optional(), AnyOf(DIFFICULTY_LEVELS)])
    location = StringField('Location', validators=[Optional(), AnyOf(LOCATIONS)])
    timeToMarket = StringField('Time To Market', validators=[Optional(), Length(max=100)])


class ReviewForm(ApiForm):
    reviewerName = StringField('Reviewer Name', validators=[DataRequired(), Length(max=100)])
    reviewerEmail = StringField('Reviewer Email', validators=[Optional(), Length(max=100), Regexp(EMAIL_PATTERN, message='Invalid email address.')])
    reviewerWebsite = StringField('Reviewer Website', validators=[Optional(), Length(max=100)])
    comment = TextAreaField('Comment', validators=[DataRequired(), Length(max=500)])
    rating = IntegerField('Rating', validators=[InputRequired(), NumberRange(min=1, max=5)])
    isRecommended = BooleanField('Recommended')


class SignupForm(ApiForm):
    fullName = StringField('Full Name', validators=[DataRequired(), Length(max=100)])
    email = StringField('Email', validators=[DataRequired(), Length(max=120), Regexp(EMAIL_PATTERN, message='Invalid email address.')])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6, max=128)])


class LoginForm(ApiForm):
    email = StringField('Email', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


class AdminLoginForm(ApiForm):
    usernameOrEmail = StringField('Username or Email', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


class ResetPasswordForm(ApiForm):
    token = StringField('Token', validators=[DataRequired()])
    newPassword = PasswordField('New Password', validators=[DataRequired(), Length(min=6, max=128)])


class ProfileForm(ApiForm):
    fullName = StringField('Full Name', validators=[Optional(), Length(max=100)])
    bio = TextAreaField('Bio', validators=[Optional(), Length(max=1000)])
    phoneNumber = StringField('Phone Number', validators=[Optional(), Length(max=20)])
    location = StringField('Location', validators=[Optional(), Length(max=100)])


class ProposedIdeaForm(ApiForm):
    title = StringField('Title', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(max=2000)])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    investmentNeeded = DecimalField('Investment Needed', validators=[Optional(), finite_amount, NumberRange(min=0)])
    difficultyLevel = StringField('Difficulty Level', validators=[Optional(), AnyOf(DIFFICULTY_LEVELS)])


class CategoryForm(ApiForm):
    mainCategory = StringField('Main Category', validators=[DataRequired(), Length(max=100)])
    subCategory = StringField('Sub Category', validators=[DataRequired(), Length(max=100)])


class InvestmentForm(ApiForm):
    investmentCategory = StringField('Investment Category', validators=[DataRequired(), Length(max=100)])
    amount = DecimalField('Amount', validators=[InputRequired(), finite_amount, NumberRange(min=0)])
    priorityLevel = StringField('Priority Level', validators=[Optional(), AnyOf(('HIGH', 'MEDIUM', 'LOW'))])


class SchemeForm(ApiForm):
    schemeName = StringField('Scheme Name', validators=[DataRequired(), Length(max=255)])
    schemeType = StringField('Scheme Type', validators=[Optional(), Length(max=50)])
    maximumAmount = DecimalField('Maximum Amount', validators=[Optional(), finite_amount, NumberRange(min=0)])
    interestRate = DecimalField('Interest Rate', validators=[Optional(), finite_amount, NumberRange(min=0)])


class BankLoanForm(ApiForm):
    bankName = StringField('Bank Name', validators=[DataRequired(), Length(max=255)])
    loanType = StringField('Loan Type', validators=[Optional(), Length(max=100)])
    minAmount = DecimalField('Minimum Amount', validators=[Optional(), finite_amount, NumberRange(min=0)])
    maxAmount = DecimalField('Maximum Amount', validators=[Optional(), finite_amount, NumberRange(min=0)])
    interestRateMin = DecimalField('Minimum Interest Rate', validators=[Optional(), finite_amount, NumberRange(min=0)])
    interestRateMax = DecimalField('Maximum Interest Rate', validators=[Optional(), finite_amount, NumberRange(min=0)])
    tenureMin = IntegerField('Minimum Tenure', validators=[Optional(), NumberRange(min=0)])
    tenureMax = IntegerField('Maximum Tenure', validators=[Optional(), NumberRange(min=0)])


class InternalFactorForm(ApiForm):
    factorType = StringField('Factor Type', validators=[DataRequired(), AnyOf(FACTOR_TYPES)])
    colorCode = StringField('Color Code', validators=[Optional(), Length(max=20)])
    iconCode = StringField('Icon Code', validators=[Optional(), Length(max=50)])


def _as_formdata(payload):
    formdata = MultiDict()
    for key, value in (payload or {}).items():
        if value is None or isinstance(value, (list, dict)):
            continue
        if isinstance(value, bool):
            if value:
                formdata.add(key, 'y')
            continue
        formdata.add(key, str(value))
    return formdata


def validate_form(form_class, payload):
    """Validate a JSON payload with a form class, raising ValidationError on failure"""
    if payload is not None and not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    form = form_class(formdata=_as_formdata(payload))
    if not form.validate():
        field_name, messages = next(iter(form.errors.items()))
        raise ValidationError(f"{field_name}: {messages[0]}", errors=form.errors)
    return form
