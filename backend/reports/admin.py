from django.contrib import admin
from .models import Report


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['id', 'request', 'reporter', 'reporter_name', 'reporter_phone', 'created_at']
    search_fields = ['reporter__username', 'reporter_name', 'reporter_email', 'description']
    ordering = ['-created_at']
    raw_id_fields = ['request', 'reporter']
    readonly_fields = ['created_at']
