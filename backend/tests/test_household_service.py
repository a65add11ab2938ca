import pytest

from homestock.errors import LocationNotFound, UnknownPresetError
from homestock.models import Household
from homestock.services import household_service
from homestock.services.hierarchy_service import default_engine, list_rules


class TestHouseholdService:

    def test_create_seeds_custom_rule_set(self, db_session):
        household = household_service.create_household("Hjemme", preset="extended")
        assert household.rule_set_name == f"household-{household.id}"
        assert len(list_rules(household.rule_set_name)) == 26
        assert default_engine.is_allowed(household.rule_set_name, "DRAWER", "SHELF") is True

    def test_custom_rule_sets_are_per_household(self, household, other_household):
        matrix = default_engine.get_matrix(household.rule_set_name)
        matrix["CABINET"]["SHELF"] = False
        default_engine.validate_and_apply_matrix(household.rule_set_name, matrix)

        assert default_engine.is_allowed(household.rule_set_name, "CABINET", "SHELF") is False
        assert default_engine.is_allowed(other_household.rule_set_name, "CABINET", "SHELF") is True

    def test_unknown_preset_creates_nothing(self, db_session):
        with pytest.raises(UnknownPresetError):
            household_service.create_household("Hjemme", preset="maximal")
        assert db_session.query(Household).count() == 0

    def test_name_required(self, db_session):
        with pytest.raises(household_service.HouseholdError):
            household_service.create_household("  ")

    def test_list_households_sorted_by_name(self, household, other_household):
        assert [h.name for h in household_service.list_households()] == ["Hjemme", "Hytta"]

    def test_set_rule_set(self, household):
        default_engine.apply_preset("minimal")
        updated = household_service.set_rule_set(household.id, "minimal")
        assert updated.rule_set_name == "minimal"

    def test_set_rule_set_missing_household(self, db_session):
        with pytest.raises(LocationNotFound):
            household_service.set_rule_set(12345, "minimal")
