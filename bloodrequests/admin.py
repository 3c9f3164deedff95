from django.contrib import admin

from .dispatch import unlink
from .models import BloodRequest, DonorRequestEntry


class DonorRequestEntryInline(admin.TabularInline):
    model = DonorRequestEntry
    extra = 0
    fields = ['donor', 'status', 'created_at', 'updated_at']
    readonly_fields = fields
    can_delete = False


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display    = ['name', 'blood_type', 'hospital_name', 'city', 'urgency', 'overall_status', 'created_at']
    list_filter     = ['overall_status', 'blood_type', 'urgency']
    search_fields   = ['name', 'phone', 'hospital_name', 'city']
    ordering        = ['-created_at']
    readonly_fields = ['overall_status', 'created_at', 'updated_at']
    inlines         = [DonorRequestEntryInline]


@admin.register(DonorRequestEntry)
class DonorRequestEntryAdmin(admin.ModelAdmin):
    list_display  = ['blood_request', 'donor', 'status', 'created_at', 'updated_at']
    list_filter   = ['status']
    search_fields = ['donor__name', 'blood_request__name', 'blood_request__hospital_name']
    ordering      = ['-updated_at']
    readonly_fields = ['blood_request', 'donor', 'status', 'created_at', 'updated_at']

    # Entries are written in pairs with their donor-side link by bloodrequests.dispatch
    def has_add_permission(self, request):
        return False

    def delete_model(self, request, obj):
        unlink(obj.blood_request_id, obj.donor_id)

    def delete_queryset(self, request, queryset):
        for request_id, donor_id in list(queryset.values_list('blood_request_id', 'donor_id')):
            unlink(request_id, donor_id)
