"""
Tests for the question tag table.
"""
import pytest

from livestock.exceptions import UnknownTagError
from livestock.tags import (
    TAG_ROLES,
    PayloadShape,
    Role,
    Tag,
    logic_value_for,
    payload_shape,
    tags_for,
)


class TestPayloadShape:

    def test_every_tag_has_a_shape(self):
        for tag in Tag:
            assert isinstance(payload_shape(tag), PayloadShape)

    @pytest.mark.parametrize('tag,shape', [
        (Tag.INCOME, PayloadShape.PRICED),
        (29, PayloadShape.PRICED),
        (Tag.EVENING_SNF, PayloadShape.QUALITY),
        ('36', PayloadShape.SCALAR),
    ])
    def test_known_tags(self, tag, shape):
        assert payload_shape(tag) is shape

    @pytest.mark.parametrize('tag', [999, 0, 'milk', None])
    def test_unknown_tag_fails(self, tag):
        with pytest.raises(UnknownTagError):
            payload_shape(tag)

    def test_unknown_tag_is_a_key_error(self):
        with pytest.raises(KeyError):
            payload_shape(999)


class TestRoles:

    def test_every_role_is_mapped(self):
        assert set(TAG_ROLES) == set(Role)

    def test_sale_variant_extends_plain_income(self):
        assert set(tags_for(Role.INCOME)) < set(tags_for(Role.INCOME_WITH_SALE))
        assert set(tags_for(Role.EXPENSE)) < set(tags_for(Role.EXPENSE_WITH_PURCHASE))

    def test_priced_roles_use_priced_tags(self):
        for role in (Role.INCOME_WITH_SALE, Role.EXPENSE_WITH_PURCHASE, Role.FEED, Role.MILK):
            assert all(payload_shape(tag) is PayloadShape.PRICED for tag in tags_for(role))


class TestLogicValues:

    @pytest.mark.parametrize('answer,expected', [
        ('Cow', 'cow'),
        ('गाय', 'cow'),
        (' कालवड ', 'calf'),
        ('దూడ', 'calf'),
        ('भैंस', 'buffalo'),
    ])
    def test_translated_answers(self, answer, expected):
        assert logic_value_for(answer) == expected

    def test_unmapped_answer(self):
        assert logic_value_for('yes') is None
        assert logic_value_for(None) is None
