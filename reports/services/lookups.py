from django.conf import settings

from reports.models import InvestmentTypeTranslation


class InvestmentTypeNameLookup:
    """
    Display names of investment types in one language.

    Falls back to the type's own name when no translation exists.
    """

    def __init__(self, language=None):
        self.language = language or settings.REPORT_DEFAULT_LANGUAGE
        self._cache = None

    def _translations(self):
        if self._cache is None:
            self._cache = dict(
                InvestmentTypeTranslation.objects.filter(
                    language_code=self.language
                ).values_list('investment_type_id', 'name')
            )
        return self._cache

    def __call__(self, investment_type):
        return self._translations().get(investment_type.id, investment_type.name)
