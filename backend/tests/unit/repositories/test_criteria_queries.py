from datetime import datetime, timedelta, timezone

import pytest

from tourhub.core.booking_status import BookingStatus
from tourhub.core.exceptions import RepositoryException
from tourhub.models.special_offer import SpecialOffer
from tourhub.repositories.factory import RepositoryFactory
from tourhub.services.admin_booking_filters import build_tenant_stage
from tourhub.services.tenant_service import TenantService, build_strict_tenant_query, build_tenant_query
from tourhub.services.tour_service import TourService

from tests.factories.builders import create_booking, create_tour


def _titles(tours):
    return sorted(tour.title for tour in tours)


class TestTenantCriteria:
    @pytest.fixture
    def catalogue(self, db):
        create_tour(db, "default", title="Default Tour")
        create_tour(db, "acme", title="Acme Tour")
        create_tour(db, "other", title="Other Tour")
        create_tour(db, "shared", title="Shared Tour")

    def test_tenant_plus_default(self, db, catalogue):
        repository = RepositoryFactory.create_tour_repository(db)
        tours = repository.find_by_criteria(build_tenant_query({}, "acme"))
        assert _titles(tours) == ["Acme Tour", "Default Tour"]

    def test_shared_rows_on_request(self, db, catalogue):
        repository = RepositoryFactory.create_tour_repository(db)
        tours = repository.find_by_criteria(build_tenant_query({}, "acme", include_shared=True))
        assert _titles(tours) == ["Acme Tour", "Default Tour", "Shared Tour"]

    def test_strict(self, db, catalogue):
        repository = RepositoryFactory.create_tour_repository(db)
        assert _titles(repository.find_by_criteria(build_strict_tenant_query({}, "acme"))) == ["Acme Tour"]

    def test_booking_matches_through_tour_tenant(self, db, test_customer):
        acme_tour = create_tour(db, "acme", title="Acme Tour")
        # Legacy row: booking stamped with the default tenant, tour owned by acme
        create_booking(db, acme_tour, test_customer, tenant_id="default")
        create_booking(db, create_tour(db, "other"), test_customer)
        repository = RepositoryFactory.create_booking_repository(db)

        criteria = {"$and": build_tenant_stage("acme")}

        assert repository.count_by_criteria(criteria) == 1


class TestOperators:
    def test_range_and_membership(self, db, test_tour, test_customer):
        now = datetime.now(timezone.utc)
        create_booking(db, test_tour, test_customer, status=BookingStatus.PENDING.value)
        create_booking(db, test_tour, test_customer, status=BookingStatus.CANCELLED.value)
        repository = RepositoryFactory.create_booking_repository(db)

        assert repository.count_by_criteria({"status": {"$in": ["Pending", "Confirmed"]}}) == 1
        assert repository.count_by_criteria({"status": {"$in": []}}) == 0
        assert repository.count_by_criteria({"date": {"$gte": now, "$lte": now + timedelta(days=31)}}) == 2
        assert repository.count_by_criteria({"payment_id": None}) == 2

    def test_unknown_operator(self, db):
        repository = RepositoryFactory.create_booking_repository(db)
        with pytest.raises(RepositoryException):
            repository.count_by_criteria({"status": {"$regex": "Pend"}})


class TestFindActiveOffers:
    def _offer(self, db, **overrides):
        now = datetime.now(timezone.utc)
        values = {
            "tenant_id": "default",
            "name": "Offer",
            "type": "percentage",
            "discount_value": 10,
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=5),
        }
        values.update(overrides)
        offer = SpecialOffer(**values)
        db.add(offer)
        db.commit()
        return offer

    def test_filters_and_order(self, db):
        self._offer(db, name="Low", discount_value=5)
        self._offer(db, name="High", discount_value=25)
        self._offer(db, name="Top priority", discount_value=1, priority=10)
        self._offer(db, name="Inactive", is_active=False)
        self._offer(db, name="Used up", usage_limit=3, used_count=3)
        self._offer(db, name="Future", start_date=datetime.now(timezone.utc) + timedelta(days=2))
        self._offer(db, name="Other tenant", tenant_id="acme")

        offers = RepositoryFactory.create_special_offer_repository(db).find_active_offers("default")

        assert [offer.name for offer in offers] == ["Top priority", "High", "Low"]

    def test_tour_and_category_targeting(self, db):
        self._offer(db, name="Everywhere")
        self._offer(db, name="Tour A only", applicable_tours=["A"])
        self._offer(db, name="Excludes A", excluded_tours=["A"])
        self._offer(db, name="Desert only", applicable_categories=["desert"])
        repository = RepositoryFactory.create_special_offer_repository(db)

        for_a = {offer.name for offer in repository.find_active_offers("default", tour_id="A")}
        for_b_sea = {offer.name for offer in repository.find_active_offers("default", tour_id="B", category_id="sea")}

        assert for_a == {"Everywhere", "Tour A only", "Desert only"}
        assert for_b_sea == {"Everywhere", "Excludes A"}


def test_tenant_config_is_cached_until_cleared(db, test_tenant):
    service = TenantService(db)
    assert service.get_tenant_config("default")["name"] == "Default Tours"

    test_tenant.name = "Renamed Tours"
    db.commit()
    assert service.get_tenant_config("default")["name"] == "Default Tours"

    service.clear_tenant_cache("default")
    assert service.get_tenant_config("default")["name"] == "Renamed Tours"


def test_ensure_option_ids_assigns_stable_ids(db):
    tour = create_tour(db, booking_options=[{"type": "standard", "price": 50}, {"id": "keep", "type": "vip", "price": 90}])
    service = TourService(db)

    service.ensure_option_ids(tour)
    db.commit()
    first_ids = [option["id"] for option in tour.booking_options]
    service.ensure_option_ids(tour)

    assert len(first_ids[0]) == 26
    assert first_ids[1] == "keep"
    assert [option["id"] for option in tour.booking_options] == first_ids
