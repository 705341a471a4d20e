from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['type', 'user', 'message', 'read', 'created_at']
    list_filter = ['type', 'read', 'created_at']
    search_fields = ['message', 'user__email']
    readonly_fields = ['created_at', 'updated_at']

    @admin.action(description='Mark selected notifications as read')
    def mark_read(self, request, queryset):
        count = queryset.update(read=True)
        self.message_user(request, f'Marked {count} notification(s) as read.')

    actions = ['mark_read']
