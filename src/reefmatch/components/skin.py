from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True, slots=True)
class Skin:
    """Hero fish colors chosen by the host; the engine only stores and reports them."""
    name: str
    body: int
    fin: int
    highlight: int


SKINS: Dict[str, Skin] = {
    'red':    Skin('red', body=0xFF4757, fin=0xC0392B, highlight=0xFF6B7A),
    'blue':   Skin('blue', body=0x3498DB, fin=0x2980B9, highlight=0x5DADE2),
    'green':  Skin('green', body=0x2ECC71, fin=0x27AE60, highlight=0x58D68D),
    'yellow': Skin('yellow', body=0xF1C40F, fin=0xF39C12, highlight=0xF4D03F),
    'purple': Skin('purple', body=0x9B59B6, fin=0x8E44AD, highlight=0xBB8FCE),
    'orange': Skin('orange', body=0xE67E22, fin=0xD35400, highlight=0xF0B27A),
}
