import re
from typing import List, Optional, Tuple

OTHERS = "Others"

# (sector, code pattern, name pattern); checked top to bottom, first hit wins.
# Substring matches, not whole words.
_RULES: List[Tuple[str, str, str]] = [
    ("IT", r"INFY|TCS|WIPRO|TECHM|HCLTECH", r"TECH|INFOSYS"),
    ("Banking", r"HDFCBANK|ICICIBANK|SBIN|KOTAKBANK|AXISBANK", r"BANK"),
    ("Energy", r"RELIANCE|ONGC|IOC|BPCL|HPCL|GAIL", r"OIL|PETRO|GAS"),
    ("Pharma", r"SUNPHARMA|CIPLA|DRREDDY|DIVISLAB|AUROPHARMA", r"PHARMA|HEALTH"),
    ("FMCG", r"HINDUNILVR|ITC|NESTLE|BRITANNIA|COLPAL|DABUR", r"FMCG|FOODS|CONSUMER"),
    ("Metals", r"TATASTEEL|JSWSTEEL|SAIL|HINDALCO|VEDL", r"STEEL|METAL|ALUMINIUM"),
    ("Automobile", r"MARUTI|M&M|TATAMOTORS|EICHERMOT|ASHOKLEY", r"AUTO|MOTOR|CARS"),
    ("Infrastructure", r"LT|ADANIENT|ADANIPORTS|IRCTC", r"INFRA|PORT|CONSTRUCTION"),
]

_COMPILED = [
    (sector, re.compile(code_pat, re.IGNORECASE), re.compile(name_pat, re.IGNORECASE))
    for sector, code_pat, name_pat in _RULES
]

SECTORS: Tuple[str, ...] = tuple(r[0] for r in _RULES) + (OTHERS,)

def detect_sector(code: Optional[str], name: Optional[str]) -> str:
    c = code or ""
    n = name or ""
    for sector, code_re, name_re in _COMPILED:
        if code_re.search(c) or name_re.search(n):
            return sector
    return OTHERS
