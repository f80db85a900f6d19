from datetime import datetime, time, timezone
from decimal import Decimal

import pytest

from venue_pricing.core import clock
from venue_pricing.enums.rule_status import RuleStatus
from venue_pricing.models.pricing_rule import PricingRule
from venue_pricing.models.product import Product
from venue_pricing.schemas.pricing_rule import PricingRuleCreate, PricingRuleUpdate
from venue_pricing.services.pricing_engine.rules import InvalidRuleError
from venue_pricing.services.pricing_service.calculate_price import calculate_final_price
from venue_pricing.services.pricing_service.pricing_service import (
    create_pricing_rule,
    get_candidate_rules,
    get_pricing_rules,
    update_pricing_rule,
)
from conftest import FRIDAY


def _create_test_product(db, prod_id="BEER_IPA_01", style="IPA", base_price="6.00"):
    product = Product(
        product_id=prod_id,
        name="Test IPA pint",
        style=style,
        base_price=Decimal(base_price),
        currency="USD",
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def _late_night_rule(**overrides):
    payload = dict(
        name="Late night IPA",
        discount_percent=20,
        priority="high",
        days_of_week=["viernes"],
        time_start="22:00",
        time_end="02:00",
        scope="IPA",
    )
    payload.update(overrides)
    return PricingRuleCreate(**payload)


@pytest.mark.order(1)
def test_create_pricing_rule_service(db):
    rule = create_pricing_rule(db, _late_night_rule())

    assert rule.id is not None
    assert rule.multiplier == Decimal("0.8")
    assert rule.days_of_week == [4]
    assert rule.time_start == time(22) and rule.time_end == time(2)
    assert rule.priority == "high"


@pytest.mark.order(2)
def test_create_rejects_invalid_schema():
    with pytest.raises(ValueError):
        _late_night_rule(discount_percent=0)
    with pytest.raises(ValueError):
        _late_night_rule(scope="   ")
    with pytest.raises(ValueError):
        _late_night_rule(
            valid_from=datetime(2026, 12, 1), valid_to=datetime(2026, 11, 1)
        )


@pytest.mark.order(3)
def test_update_revalidates_merged_rule(db):
    rule = create_pricing_rule(
        db, _late_night_rule(valid_to=datetime(2026, 11, 30))
    )
    with pytest.raises(InvalidRuleError):
        update_pricing_rule(
            db, rule.id, PricingRuleUpdate(valid_from=datetime(2026, 12, 1))
        )

    updated = update_pricing_rule(db, rule.id, PricingRuleUpdate(discount_percent=30))
    assert updated.multiplier == Decimal("0.7")
    assert updated.valid_to == datetime(2026, 11, 30)


@pytest.mark.order(4)
def test_calculate_price_across_midnight(db):
    product = _create_test_product(db)
    create_pricing_rule(db, _late_night_rule())
    create_pricing_rule(db, _late_night_rule(name="House discount", discount_percent=5, priority="low", scope=None, days_of_week=[], time_start=None, time_end=None))

    saturday_early = datetime(2026, 10, 17, 1, 30)
    res = calculate_final_price(db=db, product=product, now=saturday_early, quantity=2)
    assert res["final_price"] == Decimal("4.80")
    assert res["discount_percent"] == 20
    assert res["applied_rule_name"] == "Late night IPA"
    assert res["total_price"] == Decimal("9.60")

    saturday_morning = datetime(2026, 10, 17, 9)
    res = calculate_final_price(db=db, product=product, now=saturday_morning)
    assert res["final_price"] == Decimal("5.70")
    assert res["applied_rule_name"] == "House discount"


@pytest.mark.order(5)
def test_stored_invalid_rule_is_skipped(db):
    product = _create_test_product(db)
    db.add(PricingRule(name="Corrupt", multiplier=Decimal("1.5"), priority="high", days_of_week=[]))
    db.add(PricingRule(name="Bad day", multiplier=Decimal("0.5"), priority="high", days_of_week=[12]))
    db.commit()

    assert get_candidate_rules(db, product.style) == []
    res = calculate_final_price(db=db, product=product, now=FRIDAY)
    assert res["final_price"] == Decimal("6.00")
    assert res["applied_rule_id"] is None
    assert res["discount_percent"] == 0

    items, total = get_pricing_rules(db, now=FRIDAY)
    assert total == 2
    assert all(status is RuleStatus.inactive for _, status in items)


@pytest.mark.order(6)
def test_untagged_product_only_gets_universal_rules(db):
    product = _create_test_product(db, prod_id="MYSTERY", style=None)
    create_pricing_rule(db, _late_night_rule())
    assert get_candidate_rules(db, product.style) == []


def test_to_venue_local(monkeypatch):
    monkeypatch.setattr(clock.settings, "VENUE_TIMEZONE", "Etc/GMT+3")
    aware = datetime(2026, 10, 17, 2, 30, tzinfo=timezone.utc)
    assert clock.to_venue_local(aware) == datetime(2026, 10, 16, 23, 30)

    naive = datetime(2026, 10, 16, 23, 30)
    assert clock.to_venue_local(naive) is naive
    assert clock.to_venue_local().tzinfo is None


class TestRoutes:
    def test_rule_crud_round(self, client):
        created = client.post(
            "/pricing-rules/",
            json={
                "name": "Friday late night",
                "discount_percent": 25,
                "priority": "high",
                "days_of_week": ["viernes"],
                "time_start": "22:00",
                "time_end": "02:00",
                "scope": "Stout",
            },
        )
        assert created.status_code == 200
        body = created.json()
        assert body["days_of_week"] == ["friday"]
        assert body["discount_percent"] == 25
        assert body["status"] in {"active", "scheduled"}
        rule_id = body["id"]

        fetched = client.get(f"/pricing-rules/{rule_id}", params={"at": "2026-10-17T01:00:00"})
        assert fetched.status_code == 200
        assert fetched.json()["status"] == "active"

        patched = client.patch(f"/pricing-rules/{rule_id}", json={"discount_percent": 10})
        assert patched.json()["discount_percent"] == 10

        off = client.post(f"/pricing-rules/{rule_id}/deactivate")
        assert off.json()["enabled"] is False
        assert off.json()["status"] == "inactive"
        on = client.post(f"/pricing-rules/{rule_id}/activate")
        assert on.json()["enabled"] is True

        assert client.delete(f"/pricing-rules/{rule_id}").status_code == 200
        assert client.get(f"/pricing-rules/{rule_id}").status_code == 404
        assert client.delete(f"/pricing-rules/{rule_id}").status_code == 404

    def test_invalid_payloads(self, client):
        bad_percent = client.post("/pricing-rules/", json={"name": "x", "discount_percent": 150})
        assert bad_percent.status_code == 422
        bad_day = client.post("/pricing-rules/", json={"name": "x", "discount_percent": 10, "days_of_week": ["funday"]})
        assert bad_day.status_code == 422

        created = client.post(
            "/pricing-rules/",
            json={"name": "Ends soon", "discount_percent": 10, "valid_to": "2026-11-01T00:00:00"},
        ).json()
        clash = client.patch(f"/pricing-rules/{created['id']}", json={"valid_from": "2026-12-01T00:00:00"})
        assert clash.status_code == 400
        assert client.patch("/pricing-rules/9999", json={"name": "nope"}).status_code == 404

    def test_list_filters_by_derived_status(self, client):
        for name, start, end in [("Brunch", "10:00", "12:00"), ("Night", "22:00", "02:00"), ("All day", None, None)]:
            client.post(
                "/pricing-rules/",
                json={"name": name, "discount_percent": 10, "time_start": start, "time_end": end},
            )

        at = "2026-10-16T23:30:00"
        active = client.get("/pricing-rules/", params={"status": "active", "at": at}).json()
        assert sorted(r["name"] for r in active["rules"]) == ["All day", "Night"]
        assert active["total"] == 2

        scheduled = client.get("/pricing-rules/", params={"status": "scheduled", "at": at}).json()
        assert [r["name"] for r in scheduled["rules"]] == ["Brunch"]

        page = client.get("/pricing-rules/", params={"per_page": 2, "page": 2, "order_dir": "desc"}).json()
        assert page["total"] == 3
        assert [r["name"] for r in page["rules"]] == ["All day"]

        found = client.get("/pricing-rules/", params={"search": "brun"}).json()
        assert [r["name"] for r in found["rules"]] == ["Brunch"]

    def test_calculate_price_route(self, client, db):
        _create_test_product(db)
        client.post(
            "/pricing-rules/",
            json={"name": "IPA night", "discount_percent": 20, "days_of_week": ["friday"],
                  "time_start": "22:00", "time_end": "02:00", "scope": "ipa"},
        )

        res = client.get(
            "/products/BEER_IPA_01/calculate-price",
            params={"quantity": 2, "at": "2026-10-17T01:30:00+00:00"},
        )
        assert res.status_code == 200
        body = res.json()
        assert body["base_price"] == "6.00"
        assert body["final_price"] == "4.80"
        assert body["total_price"] == "9.60"
        assert body["discount_percent"] == 20
        assert body["applied_rule_name"] == "IPA night"

        later = client.get(
            "/products/BEER_IPA_01/calculate-price",
            params={"at": "2026-10-17T03:00:00"},
        ).json()
        assert later["final_price"] == "6.00"
        assert later["applied_rule_id"] is None

        assert client.get("/products/BEER_IPA_01/calculate-price", params={"quantity": 0}).status_code == 400
        assert client.get("/products/NOPE/calculate-price").status_code == 404

    def test_corrupt_stored_rules_are_listed_as_inactive(self, client, db):
        bad_rows = [
            PricingRule(name="Bad day", multiplier=Decimal("0.5"), priority="high", days_of_week=[12]),
            PricingRule(name="Bad priority", multiplier=Decimal("0.5"), priority="urgent", days_of_week=[]),
            PricingRule(
                name="Inverted validity",
                multiplier=Decimal("0.5"),
                priority="medium",
                days_of_week=[],
                valid_from=datetime(2026, 12, 1),
                valid_to=datetime(2026, 11, 1),
            ),
        ]
        db.add_all(bad_rows)
        db.commit()
        client.post("/pricing-rules/", json={"name": "Good one", "discount_percent": 10})

        listing = client.get("/pricing-rules/", params={"at": "2026-10-16T12:00:00"})
        assert listing.status_code == 200
        by_name = {r["name"]: r for r in listing.json()["rules"]}
        assert by_name["Good one"]["status"] == "active"
        for row in bad_rows:
            assert by_name[row.name]["status"] == "inactive"
        assert by_name["Bad day"]["days_of_week"] == [12]
        assert by_name["Bad priority"]["priority"] == "urgent"

        active = client.get("/pricing-rules/", params={"status": "active", "at": "2026-10-16T12:00:00"})
        assert [r["name"] for r in active.json()["rules"]] == ["Good one"]

        for row in bad_rows:
            single = client.get(f"/pricing-rules/{row.id}")
            assert single.status_code == 200
            assert single.json()["status"] == "inactive"

        toggled = client.post(f"/pricing-rules/{bad_rows[1].id}/deactivate")
        assert toggled.status_code == 200
        assert toggled.json()["enabled"] is False

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["db_ok"] is True
