from django.contrib import admin

from reports.models import FixedInvestment, InvestmentType, InvestmentTypeTranslation


class InvestmentTypeTranslationInline(admin.TabularInline):
    model = InvestmentTypeTranslation
    extra = 0


@admin.register(InvestmentType)
class InvestmentTypeAdmin(admin.ModelAdmin):
    list_display = ('name',)
    search_fields = ('name',)
    inlines = [InvestmentTypeTranslationInline]


@admin.register(FixedInvestment)
class FixedInvestmentAdmin(admin.ModelAdmin):
    list_display = ('owner', 'investment_type', 'amount', 'installed_on', 'deleted_at')
    list_filter = ('investment_type',)
    raw_id_fields = ('owner',)
