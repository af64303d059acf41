"""
Tests for discount combination optimization.
"""
import pytest

from clinic_pricing.engine.models import ConflictKind, OptionKind, PackageType
from clinic_pricing.engine.optimizer import NO_DISCOUNT_LABEL


def assert_ranked(result):
    amounts = [o.discount_amount for o in result.all_options]
    assert amounts == sorted(amounts, reverse=True)
    assert result.best_option is result.all_options[0]
    assert result.can_auto_apply == (not result.best_option.requires_approval)


class TestOptimize:

    def test_regular_customer_gets_package_options_only(self, engine, make_service, make_customer, make_input):
        result = engine.optimize(make_input(make_service(base_price=80000), make_customer(), "package4"))

        assert result.original_price == 320000
        assert [(o.kind, o.package_type, o.discount_amount) for o in result.all_options] == [
            (OptionKind.PACKAGE_ONLY, PackageType.PACKAGE8, 128000),
            (OptionKind.PACKAGE_ONLY, PackageType.PACKAGE4, 32000),
            (OptionKind.CUSTOMER_ONLY, PackageType.PACKAGE4, 0),
        ]
        best = result.best_option
        assert best.final_price == 192000
        assert best.discount_rate == 128000 / 320000
        assert best.requires_approval is False
        assert result.can_auto_apply is True
        assert_ranked(result)

    def test_no_discount_leaves_only_floor(self, engine, make_service, make_customer, make_input):
        # Overrides equal to the standard price give no package saving
        service = make_service(base_price=50000, package4_price=200000, package8_price=400000)
        result = engine.optimize(make_input(service, make_customer()))

        assert len(result.all_options) == 1
        floor = result.best_option
        assert floor.kind == OptionKind.CUSTOMER_ONLY
        assert floor.label == NO_DISCOUNT_LABEL
        assert floor.breakdown.total == 0
        assert floor.discount_amount == 0
        assert floor.final_price == result.original_price == 50000
        assert floor.conflicts == []
        assert result.can_auto_apply is True

    def test_vip_combinations_require_approval(self, engine, make_service, make_customer, make_input):
        service = make_service(name="VIP Vascular Cleanse", base_price=150000)
        result = engine.optimize(make_input(service, make_customer("VIP")))

        assert result.original_price == 150000
        summary = [(o.kind, o.package_type, o.discount_amount) for o in result.all_options]
        assert summary == [
            (OptionKind.COMBINATION, PackageType.PACKAGE8, 1200000),
            (OptionKind.COMBINATION, PackageType.PACKAGE4, 600000),
            (OptionKind.PACKAGE_ONLY, PackageType.PACKAGE8, 240000),
            (OptionKind.CUSTOMER_ONLY, PackageType.SINGLE, 150000),
            (OptionKind.PACKAGE_ONLY, PackageType.PACKAGE4, 60000),
            (OptionKind.CUSTOMER_ONLY, PackageType.SINGLE, 0),
        ]

        best = result.best_option
        assert best.requires_approval is True
        assert best.final_price == 0
        assert best.breakdown.vip == 960000 and best.breakdown.package == 240000
        assert [c.kind for c in best.conflicts] == [
            ConflictKind.PACKAGE_WITH_FREE_TIER, ConflictKind.HIGH_DISCOUNT_RATE
        ]
        assert result.can_auto_apply is False

        vip_only = next(o for o in result.all_options if o.kind == OptionKind.CUSTOMER_ONLY)
        assert [c.kind for c in vip_only.conflicts] == [ConflictKind.HIGH_DISCOUNT_RATE]
        assert vip_only.requires_approval is False
        assert_ranked(result)

    def test_combination_flagged_even_without_conflicts(self, engine, make_service, make_customer, make_input):
        service = make_service(name="Gut Restore", base_price=50000)
        result = engine.optimize(make_input(service, make_customer("EMPLOYEE")))

        combos = [o for o in result.all_options if o.kind == OptionKind.COMBINATION]
        assert combos
        for option in combos:
            assert option.conflicts == []
            assert option.requires_approval is True

    def test_package10_gated_to_allow_list(self, engine, make_service, make_customer, make_input):
        other = engine.optimize(make_input(make_service(name="Gut Restore"), make_customer("EMPLOYEE")))
        assert all(o.package_type != PackageType.PACKAGE10 for o in other.all_options)

        chelation = make_service(name="Chelation", base_price=90000, package10_price=650000)
        result = engine.optimize(make_input(chelation, make_customer("EMPLOYEE")))
        tiers = {(o.kind, o.package_type): o.discount_amount for o in result.all_options}

        assert tiers[(OptionKind.PACKAGE_ONLY, PackageType.PACKAGE10)] == 250000
        # 650000 - 250000 = 400000 post-package, half of it for the employee
        assert tiers[(OptionKind.COMBINATION, PackageType.PACKAGE10)] == 450000
        assert result.best_option.package_type == PackageType.PACKAGE10
        assert_ranked(result)

    def test_birthday_at_cap_has_no_birthday_options(self, engine, make_service, make_customer, make_input):
        customer = make_customer("BIRTHDAY", usage_count=8)
        result = engine.optimize(make_input(make_service(name="Premium Recovery", base_price=120000), customer))

        assert all(o.breakdown.birthday == 0 for o in result.all_options)
        assert {o.kind for o in result.all_options} == {OptionKind.PACKAGE_ONLY, OptionKind.CUSTOMER_ONLY}

    def test_ties_keep_generation_order(self, engine, make_service, make_customer, make_input):
        # Employee half of 100000 and the 4-pack override saving are both 50000
        service = make_service(base_price=100000, package4_price=350000, package8_price=800000)
        result = engine.optimize(make_input(service, make_customer("EMPLOYEE")))

        assert [(o.kind, o.discount_amount) for o in result.all_options] == [
            (OptionKind.COMBINATION, 200000),
            (OptionKind.CUSTOMER_ONLY, 50000),
            (OptionKind.PACKAGE_ONLY, 50000),
            (OptionKind.CUSTOMER_ONLY, 0),
        ]

    @pytest.mark.parametrize("discount_class", ["REGULAR", "VIP", "BIRTHDAY", "EMPLOYEE"])
    @pytest.mark.parametrize("name", ["VIP White Jade", "Premium Immunity", "Premium Chelation", "Gut Restore"])
    def test_ranking_invariants(self, engine, make_service, make_customer, make_input, discount_class, name):
        result = engine.optimize(make_input(make_service(name=name, base_price=70000),
                                            make_customer(discount_class), "package8", 2))
        assert_ranked(result)
        assert result.all_options[-1].discount_amount >= 0
        assert any(o.label == NO_DISCOUNT_LABEL for o in result.all_options)
        for option in result.all_options:
            assert option.final_price == max(0, result.original_price - option.discount_amount)

    def test_labels(self, engine, make_service, make_customer, make_input):
        result = engine.optimize(make_input(make_service(name="Gut Restore"), make_customer("EMPLOYEE")))
        labels = [o.label for o in result.all_options]
        assert "Employee discount (50%)" in labels
        assert "4-visit package (10%) + Employee discount (50%)" in labels
        assert labels[-1] == "No discount"

    def test_floor_uses_customer_only_kind(self, engine, make_service, make_customer, make_input):
        result = engine.optimize(make_input(make_service(base_price=80000), make_customer()))
        floor = result.all_options[-1]

        assert set(OptionKind) == {OptionKind.CUSTOMER_ONLY, OptionKind.PACKAGE_ONLY, OptionKind.COMBINATION}
        assert floor.label == NO_DISCOUNT_LABEL
        assert floor.kind == OptionKind.CUSTOMER_ONLY
        assert floor.package_type == PackageType.SINGLE
