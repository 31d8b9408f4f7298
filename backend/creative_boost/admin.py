from django.contrib import admin
from .models import OutputType, CreativeBoostClient, ClientMonth, ClientMonthOutput, SettingsChange


@admin.register(OutputType)
class OutputTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'base_credits', 'is_active', 'sort_order']
    list_filter = ['category', 'is_active']
    search_fields = ['name']


@admin.register(CreativeBoostClient)
class CreativeBoostClientAdmin(admin.ModelAdmin):
    list_display = ['client', 'is_active', 'default_min_credits', 'default_max_credits', 'default_price_per_credit']
    list_filter = ['is_active']
    search_fields = ['client__name', 'client__brand_name']


@admin.register(ClientMonth)
class ClientMonthAdmin(admin.ModelAdmin):
    list_display = ['client', 'year', 'month', 'min_credits', 'max_credits', 'price_per_credit', 'colleague', 'status']
    list_filter = ['year', 'month', 'status']
    search_fields = ['client__name', 'client__brand_name']


@admin.register(ClientMonthOutput)
class ClientMonthOutputAdmin(admin.ModelAdmin):
    list_display = ['client', 'year', 'month', 'output_type', 'normal_count', 'express_count', 'colleague']
    list_filter = ['year', 'month', 'output_type']
    search_fields = ['client__name']


@admin.register(SettingsChange)
class SettingsChangeAdmin(admin.ModelAdmin):
    list_display = ['client', 'year', 'month', 'change_type', 'old_value', 'new_value', 'changed_by_name', 'changed_at']
    list_filter = ['change_type']
    readonly_fields = ['client_month', 'client', 'year', 'month', 'change_type', 'field_name',
                       'old_value', 'new_value', 'changed_by', 'changed_by_name', 'changed_at']
