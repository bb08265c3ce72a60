"""Domain constants shared by the engine, providers and UI."""

from typing import Tuple

# Minimal offline list used when symbols cannot be loaded
FALLBACK_SYMBOLS: Tuple[str, ...] = ("USD", "EUR", "BRL", "GBP", "JPY", "CAD", "AUD")

DEFAULT_FROM = "USD"
DEFAULT_TO = "BRL"

HISTORY_LIMIT = 10

# Local storage keys
SYMBOLS_CACHE_KEY = "currency_symbols_cache_v1"
HISTORY_KEY = "currency_converter_history_v1"

# User-facing messages
MSG_INVALID_AMOUNT = "Informe um valor válido."
MSG_INVALID_CURRENCIES = "Selecione moedas válidas."
MSG_CONVERSION_FAILED = (
    "Não foi possível converter. Verifique sua conexão ou tente novamente."
)
MSG_EMPTY_HISTORY = "Nenhuma conversão ainda."
