from django.contrib import admin

from outlets.models import BusinessOutlet, OutletFarmer


class OutletFarmerInline(admin.TabularInline):
    model = OutletFarmer
    extra = 0
    raw_id_fields = ('farmer',)


@admin.register(BusinessOutlet)
class BusinessOutletAdmin(admin.ModelAdmin):
    list_display = ('business_name', 'owner', 'created_at', 'deleted_at')
    search_fields = ('business_name', 'owner__username', 'owner__phone')
    raw_id_fields = ('owner',)
    inlines = [OutletFarmerInline]
