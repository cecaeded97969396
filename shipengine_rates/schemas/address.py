from pydantic import BaseModel
from typing import List, Optional, Union


class Address(BaseModel):
    name: Optional[str] = None
    company: Optional[str] = None
    # checkout forms may post several phone numbers, the first one wins
    phone: Optional[Union[str, List[str]]] = None
    country: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    address_2: Optional[str] = None
