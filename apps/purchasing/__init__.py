"""
Purchasing App - Supplier purchase orders.

Drafts purchase orders from low stock (one single-item draft per product,
never duplicating an open draft), lets admins draft orders by hand, and
approves drafts. Every draft and approval notifies the owning admin.

Architecture:
- Models: PurchaseOrder, PurchaseOrderItem
- Services: replenishment (auto-draft), purchase_orders (lifecycle)
- Views: function-based API views, purchasing staff only
"""
