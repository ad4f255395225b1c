from typing import List, Literal
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

PriceStatus = Literal["updated", "unavailable"]

class _Record(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

class Holding(_Record):
    model_config = ConfigDict(frozen=True)

    name: str
    code: str
    purchase_price: float
    quantity: int
    investment: float = 0.0
    portfolio_percent: str = ""
    cmp: float = 0.0
    present_value: float = 0.0
    gain_loss: float = 0.0
    gain_loss_percent: str = ""
    market_cap: str = ""
    pe_ratio: str = ""
    sector: str = ""

class EnrichedHolding(Holding):
    current_price: float
    price_status: PriceStatus
    updated_present_value: float
    updated_gain_loss: float
    updated_gain_loss_percent: str

class UploadResponse(_Record):
    success: Literal[True] = True
    total_stocks: int
    valid_stocks: int
    data: List[EnrichedHolding]

class ErrorResponse(_Record):
    success: Literal[False] = False
    error: str

class PortfolioTotals(_Record):
    invested: float
    current: float
    gain_loss: float
    percent: str

class ChartPoint(_Record):
    name: str
    investment: float
    current_value: float
    gain_loss: float

class TableRow(_Record):
    name: str
    code: str
    sector: str
    purchase_price: float
    quantity: int
    investment: float
    current_price: str
    updated_present_value: float
    updated_gain_loss: float
    return_percent: str
    status: str
