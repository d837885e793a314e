"""Request helpers: client IP, acting company resolution and user audit."""
import logging

from .exceptions import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

COMPANY_HEADER = 'HTTP_X_COMPANY_ID'


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_user_company_ids(user):
    from erp.companies.models import UsersCompanies

    return list(
        UsersCompanies.objects.filter(user=user, company__company_status=1)
        .order_by('company_id')
        .values_list('company_id', flat=True)
    )


def get_company_id(request):
    """
    Resolve the company the request acts on.

    A non-admin member of exactly one company may omit the ``X-Company-Id``
    header. Everyone else must send it, and non-admins may only name one of
    their own companies.
    """
    cached = getattr(request, '_erp_company_id', None)
    if cached is not None:
        return cached

    from erp.companies.models import Company

    user = request.user
    raw_value = request.META.get(COMPANY_HEADER)

    if raw_value in (None, ''):
        if not user.is_global_admin:
            company_ids = get_user_company_ids(user)
            if len(company_ids) == 1:
                request._erp_company_id = company_ids[0]
                return company_ids[0]
        raise ValidationError('Company ID is required')

    try:
        company_id = int(raw_value)
    except (TypeError, ValueError):
        raise ValidationError('Invalid Company ID')

    if user.is_global_admin:
        if not Company.objects.filter(pk=company_id).exists():
            raise NotFoundError('Company not found')
    elif company_id not in get_user_company_ids(user):
        logger.warning(f"User {user.pk} attempted to access company {company_id} without membership")
        raise PermissionDeniedError('Invalid Company ID')

    request._erp_company_id = company_id
    return company_id


def is_company_admin(user, company_id):
    """Global admins and members flagged as admin of the company."""
    if user.is_global_admin:
        return True
    from erp.companies.models import UsersCompanies

    return UsersCompanies.objects.filter(user=user, company_id=company_id, is_admin=True).exists()


def record_user_audit(user, action_type, changed_by=None, before=None, after=None, request=None):
    """Write a UsersAudit row. Failures propagate so the surrounding transaction rolls back."""
    from .models import UsersAudit

    changes = {}
    if before is not None:
        changes['before'] = before
    if after is not None:
        changes['after'] = after
    return UsersAudit.objects.create(
        user=user,
        changed_by=changed_by if changed_by is not None and changed_by.is_authenticated else None,
        action_type=action_type,
        changes_data=changes,
        ip_address=get_client_ip(request),
    )


def require_company_admin(request, company_id):
    if not is_company_admin(request.user, company_id):
        logger.warning(f"User {request.user.pk} denied admin action on company {company_id}")
        raise PermissionDeniedError('Company administrator privileges required')


def get_int_param(request, name):
    """Optional integer query parameter. Non-integers are a 400, not a 500."""
    value = request.query_params.get(name)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(errors=[{'path': name, 'msg': f'{name} must be an integer'}])
