from django.contrib import admin
from .models import Professional


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    list_display = ['name', 'role', 'default_commission_rate', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'role']
    ordering = ['name']
