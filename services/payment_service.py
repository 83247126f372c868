from infrastructure.http.booking_api_client import BookingApiClient
from use_cases.domain_models import PaymentDomain, PaymentMethod, PaymentReceipt


def _pay(client: BookingApiClient, domain: PaymentDomain, method: PaymentMethod, **target) -> PaymentReceipt:
    payload = {"domainType": domain.value, "paymentMethod": method.value}
    payload.update(target)
    return PaymentReceipt.from_api(client.post("/payments", json=payload))


def pay_lottery_entry(client: BookingApiClient, entry_id: str, method: PaymentMethod) -> PaymentReceipt:
    return _pay(client, PaymentDomain.LOTTERY, method, entryId=entry_id)


def pay_reservation(client: BookingApiClient, reservation_id: int, method: PaymentMethod) -> PaymentReceipt:
    return _pay(client, PaymentDomain.RESERVATION, method, domainId=reservation_id)


def pay_prereservation_booking(client: BookingApiClient, booking_id: int, method: PaymentMethod) -> PaymentReceipt:
    return _pay(client, PaymentDomain.PRERESERVATION, method, domainId=booking_id)
