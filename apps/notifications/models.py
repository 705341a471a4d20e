from django.db import models
import uuid


class NotificationType(models.TextChoices):
    PO_DRAFT = 'po-draft', 'Purchase order drafted'
    PO_APPROVED = 'po-approved', 'Purchase order approved'
    EXPENSE_APPROVAL = 'expense-approval', 'Expense awaiting approval'


class Notification(models.Model):
    """In-app notification for a back office user."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=32, choices=NotificationType.choices)
    message = models.CharField(max_length=500)
    link = models.CharField(max_length=300, blank=True)
    read = models.BooleanField(default=False)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'read'], name='notificatio_user_id_3f9c2a_idx'),
            models.Index(fields=['created_at'], name='notificatio_created_6d1e0b_idx'),
        ]
        ordering = ['-created_at']
    
    def __str__(self):
        return f"[{self.type}] {self.message}"
