from django.urls import path
from . import views

app_name = 'purchasing'

urlpatterns = [
    # GET   /api/purchasing/purchase-orders/             - List orders
    # POST  /api/purchasing/purchase-orders/             - Draft an order by hand
    # PATCH /api/purchasing/purchase-orders/             - Approve {id, adminId}
    path('purchase-orders/', views.purchase_orders, name='purchase-orders'),
    path('purchase-orders/auto-draft/', views.auto_draft, name='auto-draft'),
    path('purchase-orders/delete/', views.purchase_order_delete, name='purchase-order-delete'),
    path('purchase-orders/<uuid:purchase_order_id>/', views.purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<uuid:purchase_order_id>/supplier/', views.purchase_order_supplier, name='purchase-order-supplier'),
    path('purchase-orders/<uuid:purchase_order_id>/quantity/', views.purchase_order_quantity, name='purchase-order-quantity'),
]
