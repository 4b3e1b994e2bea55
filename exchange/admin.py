"""
Django admin registrations for the exchange models.

Lets superusers inspect hospitals, their inventory rows and requests at
``/admin/`` during development and support.
"""

from django.contrib import admin

from .models import (
    User,
    Hospital,
    BloodStock,
    OrganOffer,
    ResourceRequest,
    KnowledgeArticle,
    AuditEvent,
)


class BloodStockInline(admin.TabularInline):
    model = BloodStock
    extra = 0


class OrganOfferInline(admin.TabularInline):
    model = OrganOffer
    extra = 0


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'email')


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'email', 'phone', 'oxygen_cylinders', 'created_at')
    search_fields = ('name', 'email', 'address')
    inlines = [BloodStockInline, OrganOfferInline]


@admin.register(ResourceRequest)
class ResourceRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'request_type', 'status', 'requesting_hospital', 'providing_hospital', 'created_at')
    list_filter = ('status', 'request_type')
    search_fields = ('id', 'requesting_hospital__name', 'providing_hospital__name', 'description')
    # status only moves through the lifecycle service
    readonly_fields = ('status', 'providing_hospital', 'requesting_hospital')


@admin.register(KnowledgeArticle)
class KnowledgeArticleAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'category', 'posting_hospital', 'created_at')
    list_filter = ('category',)
    search_fields = ('title', 'posting_hospital__name')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
