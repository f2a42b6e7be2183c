from enum import Enum


class PriceProvider(str, Enum):
    """Known price-data providers, highest precedence first."""

    CARDMARKET_PRICEGUIDE = "cardmarket.priceguide"
    MTGJSON_CARDMARKET = "mtgjson.cardmarket"
    SCRYFALL = "scryfall"
