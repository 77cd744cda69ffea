from enum import Enum


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"


class PaymentType(str, Enum):
    rent = "rent"
    utility_token = "utility_token"


class PaymentAction(str, Enum):
    NEW_LEASE = "NEW_LEASE"
    RENT_RENEWAL = "RENT_RENEWAL"
    UTILITY_PURCHASE = "UTILITY_PURCHASE"


class UtilityType(str, Enum):
    electricity = "electricity"
    water = "water"
    waste = "waste"
    service_charge = "service_charge"


class VendingStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# VTPass service ids carry the utility kind in their slug,
# e.g. "ikeja-electric-prepaid"
SERVICE_KEYWORD_TO_UTILITY = {
    "electric": UtilityType.electricity,
    "water": UtilityType.water,
    "waste": UtilityType.waste,
}


def utility_type_for_service(service_id: str) -> UtilityType:
    for keyword, utility in SERVICE_KEYWORD_TO_UTILITY.items():
        if keyword in service_id:
            return utility
    return UtilityType.service_charge
