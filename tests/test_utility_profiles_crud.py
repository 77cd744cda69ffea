import uuid

import pytest

from tenancy_service.app.core.exceptions import MeterProfileNotFound
from tenancy_service.app.crud.payments import utility_profiles_crud


class TestSaveMeter:

    def test_saves_with_default_label(self, db, tenant):
        profile = utility_profiles_crud.save_meter(
            db, tenant.id, "ikeja-electric-prepaid", "45011234567")

        assert profile.type == "electricity"
        assert profile.provider == "ikeja-electric-prepaid"
        assert profile.identifier == "45011234567"
        assert profile.label == "ikeja-electric-prepaid Meter"

    def test_same_meter_is_saved_once_per_tenant(self, db, tenant, second_tenant):
        first = utility_profiles_crud.save_meter(
            db, tenant.id, "ikeja-electric-prepaid", "45011234567", "My Flat")
        again = utility_profiles_crud.save_meter(
            db, tenant.id, "ikeja-electric-prepaid", "45011234567", "Renamed")
        theirs = utility_profiles_crud.save_meter(
            db, second_tenant.id, "ikeja-electric-prepaid", "45011234567")

        assert again.id == first.id
        assert again.label == "My Flat"
        assert theirs.id != first.id
        assert len(utility_profiles_crud.get_for_user(db, tenant.id)) == 1


class TestDeleteMeter:

    def test_deletes_own_profile(self, db, tenant):
        profile = utility_profiles_crud.save_meter(db, tenant.id, "abuja-water", "77001234")

        utility_profiles_crud.delete_for_user(db, tenant.id, profile.id)

        assert utility_profiles_crud.get_for_user(db, tenant.id) == []

    def test_cannot_delete_another_tenants_profile(self, db, tenant, second_tenant):
        profile = utility_profiles_crud.save_meter(db, tenant.id, "abuja-water", "77001234")

        with pytest.raises(MeterProfileNotFound):
            utility_profiles_crud.delete_for_user(db, second_tenant.id, profile.id)
        assert len(utility_profiles_crud.get_for_user(db, tenant.id)) == 1

    def test_unknown_profile(self, db, tenant):
        with pytest.raises(MeterProfileNotFound):
            utility_profiles_crud.delete_for_user(db, tenant.id, uuid.uuid4())
