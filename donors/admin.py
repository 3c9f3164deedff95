from django.contrib import admin

from bloodrequests.dispatch import unlink

from .models import Donor, DonorRequestLink
from .utils import delete_donor


class DonorRequestLinkInline(admin.TabularInline):
    model = DonorRequestLink
    extra = 0
    fields = ['blood_request', 'status', 'created_at', 'updated_at']
    readonly_fields = fields
    can_delete = False


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display    = ['name', 'blood_type', 'phone', 'city', 'donation_count', 'is_available']
    list_filter     = ['blood_type', 'is_available', 'gender', 'last_donation']
    search_fields   = ['name', 'phone', 'city']
    ordering        = ['-created_at']
    readonly_fields = ['password', 'donation_count', 'created_at', 'updated_at']
    inlines         = [DonorRequestLinkInline]

    fieldsets = (
        ('Personal Info', {
            'fields': ('name', 'age', 'gender', 'phone', 'blood_type')
        }),
        ('Location', {
            'fields': ('country', 'state', 'city', 'latitude', 'longitude')
        }),
        ('Health', {
            'fields': ('smoking', 'drinking', 'last_donation'),
        }),
        ('Donation Stats', {
            'fields': ('donation_count', 'is_available')
        }),
        ('Timestamps', {
            'fields': ('password', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def delete_model(self, request, obj):
        delete_donor(obj.pk)

    def delete_queryset(self, request, queryset):
        for donor_id in list(queryset.values_list('pk', flat=True)):
            delete_donor(donor_id)


@admin.register(DonorRequestLink)
class DonorRequestLinkAdmin(admin.ModelAdmin):
    list_display  = ['donor', 'blood_request', 'status', 'created_at', 'updated_at']
    list_filter   = ['status']
    search_fields = ['donor__name', 'donor__phone']
    ordering      = ['-updated_at']
    readonly_fields = ['donor', 'blood_request', 'status', 'created_at', 'updated_at']

    # Links are written in pairs with their request-side entry by bloodrequests.dispatch
    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        unlink(obj.blood_request_id, obj.donor_id)

    def delete_queryset(self, request, queryset):
        for request_id, donor_id in list(queryset.values_list('blood_request_id', 'donor_id')):
            unlink(request_id, donor_id)
