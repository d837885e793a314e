"""
User account services and the generic association-replacement helper.
"""
import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from .emails import send_password_reset_email
from .exceptions import ConflictError, NotFoundError, ValidationError
from .models import UsersAudit
from .utils import record_user_audit

logger = logging.getLogger(__name__)

User = get_user_model()

AUDITED_USER_FIELDS = (
    'username', 'email', 'first_name', 'last_name', 'user_phone',
    'user_type', 'is_admin', 'is_active',
)


# Associations

def normalize_ids(ids, field_name):
    if ids is None:
        return []
    if not isinstance(ids, (list, tuple, set)):
        raise ValidationError(errors=[{'path': field_name, 'msg': f'{field_name} must be a list of ids'}])
    normalized = []
    for value in ids:
        try:
            normalized.append(int(value))
        except (TypeError, ValueError):
            raise ValidationError(errors=[{'path': field_name, 'msg': f'Invalid id: {value}'}])
    return list(dict.fromkeys(normalized))


def require_existing_ids(queryset, ids, field_name):
    """Every id must exist in ``queryset``; nothing is written when one is missing."""
    ids = normalize_ids(ids, field_name)
    found = set(queryset.filter(pk__in=ids).values_list('pk', flat=True))
    missing = [i for i in ids if i not in found]
    if missing:
        raise ValidationError(
            f'{field_name} contains unknown ids: {missing}',
            errors=[{'path': field_name, 'msg': f'{field_name} {i} does not exist'} for i in missing],
        )
    return ids


@transaction.atomic
def replace_associations(model, owner_field, owner, target_field, target_ids, remove_missing=True, defaults=None):
    """
    Make the ``target_field`` associations of ``owner`` match ``target_ids``.

    Ids must already be validated. Calling twice with the same ids is a no-op.
    Returns ``{"added": [...], "removed": [...], "kept": [...]}``.
    """
    target_key = f'{target_field}_id'
    requested = set(target_ids)
    existing = set(model.objects.filter(**{owner_field: owner}).values_list(target_key, flat=True))

    to_add = sorted(requested - existing)
    to_remove = sorted(existing - requested) if remove_missing else []

    if to_add:
        model.objects.bulk_create([
            model(**{owner_field: owner, target_key: target_id, **(defaults or {})})
            for target_id in to_add
        ])
    if to_remove:
        model.objects.filter(**{owner_field: owner, f'{target_key}__in': to_remove}).delete()

    return {'added': to_add, 'removed': to_remove, 'kept': sorted(existing & requested)}


# Users

def user_snapshot(user):
    return {field: getattr(user, field) for field in AUDITED_USER_FIELDS}


def _check_password(password, user=None):
    try:
        validate_password(password, user)
    except DjangoValidationError as e:
        raise ValidationError(
            'Password does not meet requirements',
            errors=[{'path': 'password', 'msg': m} for m in e.messages],
        )


@transaction.atomic
def create_user(data, changed_by=None, request=None):
    data = dict(data)
    if User.objects.filter(username=data.get('username')).exists():
        raise ConflictError('Username already exists')
    if User.objects.filter(email__iexact=data.get('email')).exists():
        raise ConflictError('Email already exists')

    password = data.pop('password')
    user = User(**data)
    _check_password(password, user)
    user.set_password(password)
    user.save()

    record_user_audit(user, UsersAudit.ACTION_CREATE, changed_by, after=user_snapshot(user), request=request)
    logger.info(f"User {user.username} created by {getattr(changed_by, 'pk', None)}")
    return user


@transaction.atomic
def update_user(user_id, data, changed_by=None, request=None):
    user = User.objects.select_for_update().filter(pk=user_id).first()
    if user is None:
        raise NotFoundError('User not found')

    email = data.get('email')
    if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
        raise ConflictError('Email already exists')
    username = data.get('username')
    if username and User.objects.filter(username=username).exclude(pk=user.pk).exists():
        raise ConflictError('Username already exists')

    before = user_snapshot(user)
    for field, value in data.items():
        if field in AUDITED_USER_FIELDS and field != 'is_active':
            setattr(user, field, value)
    user.save()

    record_user_audit(user, UsersAudit.ACTION_UPDATE, changed_by, before=before, after=user_snapshot(user), request=request)
    return user


@transaction.atomic
def set_user_active(user_id, active, changed_by=None, request=None):
    user = User.objects.select_for_update().filter(pk=user_id).first()
    if user is None:
        raise NotFoundError('User not found')
    if user.is_active == active:
        raise ValidationError('User is already active' if active else 'User is already inactive')

    before = user_snapshot(user)
    user.is_active = active
    user.save(update_fields=['is_active', 'updated_at'])

    action = UsersAudit.ACTION_ACTIVATE if active else UsersAudit.ACTION_DEACTIVATE
    record_user_audit(user, action, changed_by, before=before, after=user_snapshot(user), request=request)
    logger.info(f"User {user.pk} {'activated' if active else 'deactivated'} by {getattr(changed_by, 'pk', None)}")
    return user


@transaction.atomic
def change_password(user_id, new_password, changed_by=None, request=None, current_password=None):
    """Set a new password. ``current_password`` is checked when given."""
    user = User.objects.select_for_update().filter(pk=user_id).first()
    if user is None:
        raise NotFoundError('User not found')
    if current_password is not None and not user.check_password(current_password):
        raise ValidationError(
            'Current password is incorrect',
            errors=[{'path': 'current_password', 'msg': 'Current password is incorrect'}],
        )

    _check_password(new_password, user)
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])

    record_user_audit(user, UsersAudit.ACTION_PASSWORD_CHANGE, changed_by, after={'password_changed': True}, request=request)
    return user


def request_password_reset(email):
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise NotFoundError('No user is registered with that email')
    if not user.is_active:
        raise ValidationError('User is inactive')

    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    send_password_reset_email(user, uid, token)
    logger.info(f"Password reset requested for user {user.pk}")
    return user


@transaction.atomic
def reset_password(uid, token, new_password, request=None):
    try:
        user_id = force_str(urlsafe_base64_decode(uid))
        user = User.objects.select_for_update().get(pk=user_id)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    # The token embeds the password hash, so it stops working once used.
    if user is None or not default_token_generator.check_token(user, token):
        logger.warning("Rejected password reset with an invalid or expired token")
        raise ValidationError('Invalid or expired token')
    if not user.is_active:
        raise ValidationError('User is inactive')

    _check_password(new_password, user)
    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])
    record_user_audit(user, UsersAudit.ACTION_PASSWORD_CHANGE, user, after={'password_reset': True}, request=request)
    return user
