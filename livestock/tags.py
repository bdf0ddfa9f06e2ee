"""
Question Tag Table

Every question carries a numeric tag that gives its answers a meaning the
reports understand. This module is the single, versioned mapping from tag to
meaning, payload shape and report role.

Payload shapes:
- PRICED:  JSON list of {"amount": .., "price": ..} entries
- QUALITY: JSON list of {"name": ..} entries (fat / SNF readings)
- SCALAR:  plain text answer (dates, yes/no, numbers, identifiers)
"""

from enum import Enum

from django.db import models

from livestock.exceptions import UnknownTagError


class Tag(models.IntegerChoices):
    EXPENSE = 1, 'Expense'
    INCOME = 2, 'Income'
    ANIMAL_NUMBER = 6, 'Animal number'
    GENDER = 8, 'Gender'
    DATE_OF_BIRTH = 9, 'Date of birth'
    MOTHER_NUMBER = 11, 'Mother number'
    SEMEN_COMPANY = 14, 'Semen company name'
    PREGNANT = 15, 'Pregnant'
    LACTATING = 16, 'Lactating'
    MORNING_FAT = 17, 'Morning fat'
    MORNING_SNF = 18, 'Morning SNF'
    EVENING_FAT = 19, 'Evening fat'
    EVENING_SNF = 20, 'Evening SNF'
    PURCHASE_PRICE = 22, 'Purchase price'
    AI_DATE = 23, 'Date of AI'
    MORNING_MILK = 26, 'Morning milk'
    EVENING_MILK = 27, 'Evening milk'
    SELLING_PRICE = 28, 'Selling price'
    MANURE = 29, 'Manure'
    GREEN_FEED = 30, 'Green feed'
    CATTLE_FEED = 31, 'Cattle feed'
    DRY_FEED = 32, 'Dry feed'
    SUPPLEMENT = 33, 'Supplement'
    BULL_NUMBER = 35, 'Bull number'
    BREEDING_EXPENSE = 36, 'Breeding expense'
    TREATMENT_COST = 37, 'Treatment cost'
    HEALTH_DATE = 38, 'Date of health issue'
    DISEASE = 39, 'Disease'
    TREATMENT_DETAILS = 40, 'Treatment details'
    MILK_LOSS = 41, 'Milk loss'
    MOTHER_YIELD = 42, 'Mother yield at peak'
    PREGNANCY_CYCLE = 59, 'Pregnancy cycle'
    LIFE_STAGE = 60, 'Life stage'
    HEAT_DATE = 64, 'Heat date'
    DELIVERY_DATE = 65, 'Delivery date'
    DELIVERY_TYPE = 66, 'Delivery type'


class PayloadShape(Enum):
    PRICED = 'priced'
    QUALITY = 'quality'
    SCALAR = 'scalar'


TAG_SHAPES = {
    Tag.EXPENSE: PayloadShape.PRICED,
    Tag.INCOME: PayloadShape.PRICED,
    Tag.PURCHASE_PRICE: PayloadShape.PRICED,
    Tag.SELLING_PRICE: PayloadShape.PRICED,
    Tag.MORNING_MILK: PayloadShape.PRICED,
    Tag.EVENING_MILK: PayloadShape.PRICED,
    Tag.MANURE: PayloadShape.PRICED,
    Tag.GREEN_FEED: PayloadShape.PRICED,
    Tag.CATTLE_FEED: PayloadShape.PRICED,
    Tag.DRY_FEED: PayloadShape.PRICED,
    Tag.SUPPLEMENT: PayloadShape.PRICED,
    Tag.TREATMENT_COST: PayloadShape.PRICED,

    Tag.MORNING_FAT: PayloadShape.QUALITY,
    Tag.MORNING_SNF: PayloadShape.QUALITY,
    Tag.EVENING_FAT: PayloadShape.QUALITY,
    Tag.EVENING_SNF: PayloadShape.QUALITY,

    Tag.ANIMAL_NUMBER: PayloadShape.SCALAR,
    Tag.GENDER: PayloadShape.SCALAR,
    Tag.DATE_OF_BIRTH: PayloadShape.SCALAR,
    Tag.MOTHER_NUMBER: PayloadShape.SCALAR,
    Tag.SEMEN_COMPANY: PayloadShape.SCALAR,
    Tag.PREGNANT: PayloadShape.SCALAR,
    Tag.LACTATING: PayloadShape.SCALAR,
    Tag.AI_DATE: PayloadShape.SCALAR,
    Tag.BULL_NUMBER: PayloadShape.SCALAR,
    Tag.BREEDING_EXPENSE: PayloadShape.SCALAR,
    Tag.HEALTH_DATE: PayloadShape.SCALAR,
    Tag.DISEASE: PayloadShape.SCALAR,
    Tag.TREATMENT_DETAILS: PayloadShape.SCALAR,
    Tag.MILK_LOSS: PayloadShape.SCALAR,
    Tag.MOTHER_YIELD: PayloadShape.SCALAR,
    Tag.PREGNANCY_CYCLE: PayloadShape.SCALAR,
    Tag.LIFE_STAGE: PayloadShape.SCALAR,
    Tag.HEAT_DATE: PayloadShape.SCALAR,
    Tag.DELIVERY_DATE: PayloadShape.SCALAR,
    Tag.DELIVERY_TYPE: PayloadShape.SCALAR,
}


def payload_shape(tag):
    """Return the PayloadShape for a tag, failing loudly on unmapped tags."""
    try:
        return TAG_SHAPES[Tag(int(tag))]
    except (ValueError, TypeError, KeyError):
        raise UnknownTagError(tag)


# =============================================================================
# REPORT ROLES
# =============================================================================

class Role(Enum):
    INCOME = 'income'
    EXPENSE = 'expense'
    INCOME_WITH_SALE = 'income_with_sale'
    EXPENSE_WITH_PURCHASE = 'expense_with_purchase'
    FEED = 'feed'
    MILK = 'milk'
    MILK_QUALITY = 'milk_quality'
    SALE = 'sale'
    PURCHASE = 'purchase'
    BREEDING_EXPENSE = 'breeding_expense'
    TREATMENT_COST = 'treatment_cost'


TAG_ROLES = {
    Role.INCOME: (Tag.INCOME,),
    Role.EXPENSE: (Tag.EXPENSE,),
    Role.INCOME_WITH_SALE: (Tag.INCOME, Tag.SELLING_PRICE),
    Role.EXPENSE_WITH_PURCHASE: (Tag.EXPENSE, Tag.PURCHASE_PRICE),
    Role.FEED: (Tag.GREEN_FEED, Tag.CATTLE_FEED, Tag.DRY_FEED, Tag.SUPPLEMENT),
    Role.MILK: (Tag.MORNING_MILK, Tag.EVENING_MILK),
    Role.MILK_QUALITY: (Tag.MORNING_FAT, Tag.MORNING_SNF, Tag.EVENING_FAT, Tag.EVENING_SNF),
    Role.SALE: (Tag.SELLING_PRICE,),
    Role.PURCHASE: (Tag.PURCHASE_PRICE,),
    Role.BREEDING_EXPENSE: (Tag.BREEDING_EXPENSE,),
    Role.TREATMENT_COST: (Tag.TREATMENT_COST,),
}


def tags_for(role):
    return TAG_ROLES[role]


# =============================================================================
# SECONDARY (LOGIC) VALUES
# =============================================================================

# Answer text in any supported language -> language-independent logic value
LOGIC_VALUES = {
    'cow': 'cow',
    'गाय': 'cow',
    'ఆవు': 'cow',
    'calf': 'calf',
    'कालवड': 'calf',
    'बछड़ा': 'calf',
    'దూడ': 'calf',
    'रेडी': 'calf',
    'buffalo': 'buffalo',
    'म्हैस': 'buffalo',
    'भैंस': 'buffalo',
    'గేదె': 'buffalo',
}


def logic_value_for(answer):
    """Map an answer's text to its logic value, or None when it has none."""
    if answer is None:
        return None
    return LOGIC_VALUES.get(str(answer).strip().lower())
