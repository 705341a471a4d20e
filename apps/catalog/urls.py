from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalog'

router = DefaultRouter()
router.register(r'products', views.ProductViewSet, basename='product')
router.register(r'suppliers', views.SupplierViewSet, basename='supplier')

urlpatterns = [
    # GET /api/catalog/products/            - List products
    # GET /api/catalog/products/{id}/       - Product detail
    # GET /api/catalog/products/low-stock/  - Products needing reorder
    # GET /api/catalog/suppliers/           - List suppliers
    path('', include(router.urls)),
]
