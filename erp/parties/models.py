from django.db import models

from erp.companies.models import STATUS_CHOICES, Company


class Customer(models.Model):
    """Customers of a company"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='customers')
    cust_code = models.CharField(max_length=20)
    cust_id_fiscal = models.CharField(max_length=20)
    cust_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    cust_description = models.CharField(max_length=200)
    cust_address = models.CharField(max_length=200, blank=True, default='')
    cust_address_complement = models.CharField(max_length=100, blank=True, default='')
    cust_address_city = models.CharField(max_length=100, blank=True, default='')
    cust_address_state = models.CharField(max_length=100, blank=True, default='')
    cust_exempt = models.BooleanField(default=False, help_text="Exempt from taxes")
    cust_email = models.EmailField(max_length=200, blank=True, default='')
    cust_telephone1 = models.CharField(max_length=20, blank=True, default='')
    cust_telephone2 = models.CharField(max_length=20, blank=True, default='')
    cust_cellphone = models.CharField(max_length=20, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.cust_code} - {self.cust_description}"

    class Meta:
        db_table = 'customers'
        unique_together = [['company', 'cust_code']]
        indexes = [
            models.Index(fields=['company', 'cust_id_fiscal'], name='customers_fiscal_idx'),
        ]
