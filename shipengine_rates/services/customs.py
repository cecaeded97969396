import logging
from typing import Any, Dict, List, Optional

from shipengine_rates.schemas.shipment import ShipmentItem, ShipmentRequest

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "merchandise": "Merchandise",
    "documents": "Documents",
    "gift": "Gift",
    "returned_goods": "Returned Goods",
    "sample": "Sample",
}
DEFAULT_CONTENT_TYPE = next(iter(CONTENT_TYPES))

NON_DELIVERY = "return_to_sender"
MAX_DESCRIPTION_LENGTH = 45


class CustomsMapper:
    def __init__(self, default_tariff: Optional[str] = None):
        self.default_tariff = default_tariff

    def prepare_customs(self, request: ShipmentRequest, currency: str) -> Dict[str, Any]:
        customs: Dict[str, Any] = {"non_delivery": NON_DELIVERY}

        if request.contents and request.contents in CONTENT_TYPES:
            customs["contents"] = request.contents
        else:
            customs["contents"] = DEFAULT_CONTENT_TYPE

        if request.items:
            origin_country = ""
            if request.origin is not None and request.origin.country:
                origin_country = request.origin.country.upper()
            customs["customs_items"] = self.prepare_customs_items(request.items, origin_country, currency)

        logger.debug("Customs info: %s", customs)
        return customs

    def prepare_customs_items(
        self,
        items: List[ShipmentItem],
        origin_country: str,
        currency: str,
    ) -> List[Dict[str, Any]]:
        customs_items = []
        for item in items:
            customs_item = self.prepare_customs_item(item, origin_country, currency)
            if customs_item is not None:
                customs_items.append(customs_item)
        return customs_items

    def prepare_customs_item(
        self,
        item: ShipmentItem,
        origin_country: str,
        currency: str,
    ) -> Optional[Dict[str, Any]]:
        # value may be zero but has to be there
        if not item.name or not item.quantity or item.value is None:
            logger.debug("Customs item is incomplete, skipping it: %s", item.model_dump())
            return None

        return {
            "description": item.name[:MAX_DESCRIPTION_LENGTH],
            "quantity": item.quantity,
            "value": {
                "amount": round(item.value, 3),
                "currency": currency,
            },
            "country_of_origin": item.country or origin_country,
            "harmonized_tariff_code": item.tariff or self.default_tariff,
        }
