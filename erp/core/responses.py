"""Success envelope and list pagination shared by every API view."""
from django.core.paginator import EmptyPage, Paginator
from rest_framework import status
from rest_framework.response import Response

from .exceptions import ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def api_response(data=None, message='Success', status_code=status.HTTP_200_OK, pagination=None):
    body = {'success': True, 'message': message, 'data': data}
    if pagination is not None:
        body['pagination'] = pagination
    return Response(body, status=status_code)


def _positive_int(value, name, minimum=1):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(errors=[{'path': name, 'msg': f'{name} must be an integer'}])
    if number < minimum:
        raise ValidationError(errors=[{'path': name, 'msg': f'{name} must be at least {minimum}'}])
    return number


def paginate(request, queryset, default_limit=DEFAULT_PAGE_SIZE):
    """
    Slice ``queryset`` using ``page``/``limit`` or ``offset``/``limit`` query
    parameters. Returns the items for the page and the pagination metadata.
    """
    params = request.query_params
    limit = min(_positive_int(params.get('limit', default_limit), 'limit'), MAX_PAGE_SIZE)

    if 'offset' in params:
        offset = _positive_int(params.get('offset'), 'offset', minimum=0)
        total = queryset.count()
        items = list(queryset[offset:offset + limit])
        return items, {
            'total': total,
            'limit': limit,
            'offset': offset,
            'current_page': offset // limit + 1,
            'last_page': max((total + limit - 1) // limit, 1),
        }

    page_number = _positive_int(params.get('page', 1), 'page')
    paginator = Paginator(queryset, limit)
    try:
        page = paginator.page(page_number)
        items = list(page.object_list)
    except EmptyPage:
        items = []
    return items, {
        'total': paginator.count,
        'limit': limit,
        'offset': (page_number - 1) * limit,
        'current_page': page_number,
        'last_page': paginator.num_pages,
    }


def paginated_response(request, queryset, serializer_class, message='Success', context=None):
    items, pagination = paginate(request, queryset)
    serializer = serializer_class(items, many=True, context=context or {'request': request})
    return api_response(serializer.data, message=message, pagination=pagination)
