import pytest
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
class TestProductEndpoints:
    """Tests for /api/catalog/products/"""

    def test_list_products(self, admin_client, products):
        url = reverse('catalog:product-list')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 5

    def test_low_stock(self, settings, admin_client, products):
        settings.LOW_STOCK_THRESHOLD = 10
        url = reverse('catalog:product-low-stock')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 4
        by_name = {p['name']: p for p in response.data['results']}
        assert set(by_name) == {'Calathea', 'Cutting', 'Monstera', 'Pothos'}
        assert by_name['Calathea']['reorder_level'] == 10
        assert by_name['Cutting']['supplier_name'] is None
        assert by_name['Monstera']['supplier_name'] == 'Green Leaf Nursery'

    def test_low_stock_is_paginated(self, settings, admin_client, products):
        settings.LOW_STOCK_THRESHOLD = 10
        url = reverse('catalog:product-low-stock')
        response = admin_client.get(url, {'page_size': 2})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 4
        assert [p['name'] for p in response.data['results']] == ['Calathea', 'Cutting']
        assert response.data['next'] is not None

    def test_customer_forbidden(self, customer_client, products):
        url = reverse('catalog:product-list')
        response = customer_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_suppliers(self, admin_client, supplier):
        url = reverse('catalog:supplier-list')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [s['name'] for s in response.data['results']] == ['Green Leaf Nursery']
