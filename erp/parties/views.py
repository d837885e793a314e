from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from erp.core.responses import api_response, paginated_response
from erp.core.utils import get_company_id
from . import services
from .filters import CustomerFilter
from .models import Customer
from .serializers import CustomerSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def customer_list_create(request):
    """List the company's customers or create a new customer"""
    company_id = get_company_id(request)

    if request.method == 'GET':
        queryset = CustomerFilter(request.query_params, queryset=Customer.objects.filter(company_id=company_id)).qs
        return paginated_response(request, queryset.order_by('-created_at', '-id'), CustomerSerializer)

    serializer = CustomerSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    customer = services.create_customer(company_id, serializer.validated_data)
    return api_response(CustomerSerializer(customer).data, message='Customer created successfully',
                        status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve, update or deactivate a customer"""
    company_id = get_company_id(request)
    customer = services.get_customer(company_id, pk)

    if request.method == 'GET':
        return api_response(CustomerSerializer(customer).data)
    if request.method == 'DELETE':
        customer.cust_status = 0
        customer.save(update_fields=['cust_status', 'updated_at'])
        return api_response(message='Customer deactivated successfully')

    serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    customer = services.update_customer(customer, serializer.validated_data)
    return api_response(CustomerSerializer(customer).data, message='Customer updated successfully')
