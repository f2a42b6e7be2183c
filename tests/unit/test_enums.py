from cardledger.domain.enums import AllocationMethod, EventKind, Finish, LotSource, PriceProvider


class TestEnums:
    def test_finish_values(self):
        assert {f.value for f in Finish} == {"nonfoil", "foil", "etched"}
        assert Finish.FOIL.is_foil
        assert Finish.ETCHED.is_foil
        assert not Finish.NONFOIL.is_foil

    def test_lot_source_values(self):
        assert {s.value for s in LotSource} == {"purchase", "provisional", "adjustment"}

    def test_allocation_method_values(self):
        assert {m.value for m in AllocationMethod} == {
            "equal_per_card", "proportional_to_market_value", "manual",
        }

    def test_providers(self):
        assert PriceProvider("cardmarket.priceguide") == PriceProvider.CARDMARKET_PRICEGUIDE
        assert PriceProvider.SCRYFALL.value == "scryfall"

    def test_str_enum_compares_to_value(self):
        assert EventKind.SELL == "sell"
        assert LotSource.PROVISIONAL == "provisional"
