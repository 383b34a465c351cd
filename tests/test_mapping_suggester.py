"""Tests for import-column to target-field mapping suggestions."""
import pytest

from src.field_mapper import MappingSuggester, TargetField, suggest_mapping, suggest_mapping_detailed


# ======================================================================
# Fixtures
# ======================================================================


@pytest.fixture
def suggester():
    return MappingSuggester()


@pytest.fixture
def person_fields():
    return [
        {"id": "field_firstName", "name": "First Name", "required": True},
        {"id": "field_lastName", "name": "Last Name", "required": True},
        {"id": "field_email", "name": "Email Address", "required": True},
        {"id": "field_age", "name": "Age", "required": False},
    ]


# ======================================================================
# Tests: tiers
# ======================================================================


class TestTiers:

    def test_snake_case_columns(self, person_fields):
        details = suggest_mapping_detailed(["first_name", "last_name"], person_fields[:2])
        assert {d.target_field_id: d.source_column for d in details} == {
            "field_firstName": "first_name",
            "field_lastName": "last_name",
        }
        assert all(d.match_type == "snake_case" and d.confidence == 0.9 for d in details)

    def test_exact_names(self, person_fields):
        mapping = suggest_mapping(["First Name", "Last Name", "Email Address", "Age"], person_fields)
        assert mapping == {
            "field_firstName": "First Name",
            "field_lastName": "Last Name",
            "field_email": "Email Address",
            "field_age": "Age",
        }

    def test_exact_ignores_case(self, suggester):
        details = suggester.suggest_mapping_detailed(["AGE"], [{"id": "f_age", "name": "Age"}])
        assert details[0].match_type == "exact"
        assert details[0].confidence == 1.0

    def test_exact_on_field_id(self, suggester):
        details = suggester.suggest_mapping_detailed(["sku"], [{"id": "sku", "name": "Product Code"}])
        assert details[0].match_type == "exact"

    def test_camel_case_columns(self, person_fields):
        details = suggest_mapping_detailed(["firstName", "lastName"], person_fields[:2])
        assert all(d.match_type == "camel_case" and d.confidence == 0.85 for d in details)

    def test_id_with_prefix(self, suggester):
        mapping = suggester.suggest_mapping(["user_id"], [{"id": "field_user_id", "name": "User"}])
        assert mapping == {"field_user_id": "user_id"}

    def test_fuzzy_confidence_scaled(self, suggester):
        details = suggester.suggest_mapping_detailed(["email_adress"], [{"id": "f", "name": "Email Address"}])
        assert details[0].match_type == "fuzzy"
        assert 0.3 <= details[0].confidence <= 0.7

    def test_unrelated_column_left_out(self, suggester):
        assert suggester.suggest_mapping(["zip"], [{"id": "f", "name": "Email Address"}]) == {}


# ======================================================================
# Tests: assignment rules
# ======================================================================


class TestAssignment:

    def test_column_used_once(self, suggester):
        fields = [{"id": "f1", "name": "Name"}, {"id": "f2", "name": "Full Name"}]
        mapping = suggester.suggest_mapping(["name"], fields)
        assert mapping == {"f1": "name"}

    def test_mapping_is_injective(self, suggester):
        columns = ["name", "full_name", "fullName", "nm", "Name ", "first"]
        fields = [
            {"id": "a", "name": "Name"},
            {"id": "b", "name": "Full Name"},
            {"id": "c", "name": "First Name"},
            {"id": "d", "name": "Nickname"},
        ]
        mapping = suggester.suggest_mapping(columns, fields)
        assert len(set(mapping.values())) == len(mapping)
        assert set(mapping.values()) <= set(columns)

    def test_required_fields_served_first(self, suggester):
        fields = [
            {"id": "optional_name", "name": "Name", "required": False},
            {"id": "required_name", "name": "Name", "required": True},
        ]
        assert suggester.suggest_mapping(["name"], fields) == {"required_name": "name"}

    def test_stronger_tier_wins_across_fields(self, suggester):
        fields = [
            {"id": "typo", "name": "Emial", "required": True},
            {"id": "clean", "name": "Email", "required": False},
        ]
        assert suggester.suggest_mapping(["email"], fields) == {"clean": "email"}

    @pytest.mark.parametrize("columns, fields", [([], [{"id": "f", "name": "F"}]), (["a"], [])])
    def test_empty_inputs(self, suggester, columns, fields):
        assert suggester.suggest_mapping(columns, fields) == {}

    def test_detailed_sorted_by_confidence(self, suggester, person_fields):
        details = suggester.suggest_mapping_detailed(["first_name", "Email Address"], person_fields)
        assert [d.source_column for d in details] == ["Email Address", "first_name"]

    def test_accepts_target_field_objects(self, suggester):
        fields = [TargetField("f_age", "Age"), {"id": "f_name", "name": "Name"}]
        assert suggester.suggest_mapping(["age", "name"], fields) == {"f_age": "age", "f_name": "name"}


# ======================================================================
# Tests: report()
# ======================================================================


class TestReport:

    def test_unmapped_columns_and_required(self, suggester, person_fields):
        report = suggester.report(["first_name", "zip", "Age"], person_fields)
        assert report.mapping == {"field_firstName": "first_name", "field_age": "Age"}
        assert report.unmapped_columns == ["zip"]
        assert report.unmapped_required_fields == ["field_lastName", "field_email"]


# ======================================================================
# Tests: token-builder aliases
# ======================================================================


class TestAliases:

    def test_common_short_forms_map_exactly(self, suggester):
        fields = [
            {"id": "field_firstName", "name": "First Name", "required": True},
            {"id": "field_lastName", "name": "Last Name", "required": True},
            {"id": "field_userId", "name": "User ID"},
        ]
        details = suggester.suggest_mapping_detailed(["fname", "surname", "uid"], fields)
        assert {d.target_field_id: d.source_column for d in details} == {
            "field_firstName": "fname",
            "field_lastName": "surname",
            "field_userId": "uid",
        }
        assert all(d.match_type == "exact" and d.confidence == 1.0 for d in details)

    def test_field_type_drives_aliases(self, suggester):
        typed = {"id": "contact", "name": "Contact", "type": "email"}
        details = suggester.suggest_mapping_detailed(["e_mail"], [typed])
        assert details[0].match_type == "exact"
        untyped = {"id": "contact", "name": "Contact"}
        assert suggester.suggest_mapping(["e_mail"], [untyped]) == {}

    def test_spelling_variants_stay_structural(self, suggester):
        details = suggester.suggest_mapping_detailed(["firstName"], [{"id": "f", "name": "First Name"}])
        assert details[0].match_type == "camel_case"

    def test_id_keyword_needs_word_start(self, suggester):
        assert suggester.suggest_mapping(["pk"], [{"id": "f_width", "name": "Width"}]) == {}
        assert suggester.suggest_mapping(["pk"], [{"id": "f_order_id", "name": "Order ID"}]) == {"f_order_id": "pk"}
