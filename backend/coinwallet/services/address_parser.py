"""Payment URI parsing."""
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
from urllib.parse import parse_qsl
from pydantic import BaseModel, Field


class AddressData(BaseModel):
    """Components of a payment URI."""
    address: str
    amount: Optional[Decimal] = None
    parameters: Dict[str, str] = Field(default_factory=dict)


class AddressParser:
    """
    Parses strings like `eos:alice?amount=1.5&memo=rent`.

    A scheme other than `valid_scheme` is left in the address so that
    address validation rejects it.
    """

    def __init__(self, valid_scheme: str, remove_scheme: bool = True):
        self.valid_scheme = valid_scheme
        self.remove_scheme = remove_scheme

    def parse(self, payment_address: str) -> AddressData:
        payment_address = payment_address.strip()

        address, _, query = payment_address.partition("?")

        scheme, separator, rest = address.partition(":")
        if separator and scheme.lower() == self.valid_scheme:
            address = rest.lstrip("/") if self.remove_scheme else address

        parameters = dict(parse_qsl(query)) if query else {}
        amount = None
        raw_amount = parameters.pop("amount", None)
        if raw_amount is not None:
            try:
                amount = Decimal(raw_amount)
            except InvalidOperation:
                amount = None
            if amount is not None and not amount.is_finite():
                amount = None

        return AddressData(address=address, amount=amount, parameters=parameters)
