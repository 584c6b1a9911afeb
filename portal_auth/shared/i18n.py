# caminho: portal_auth/shared/i18n.py
# Funções:
# - get_translator(): tradutor por locale ('es-PE', 'EN' e 'en_us' aceitos), com fallback em es_pe
# - get_default_translator(): tradutor do locale padrão do portal

import json
from pathlib import Path

CATALOG_DIR = Path(__file__).parent / "localization"
DEFAULT_LOCALE = "es_pe"

_CATALOGS: dict[str, dict[str, str]] = {}


def _load_catalogs() -> None:
    for catalog in CATALOG_DIR.glob("*.json"):
        _CATALOGS[catalog.stem] = json.loads(catalog.read_text(encoding='utf-8'))


def _normalize(locale: str) -> str:
    normalized = (locale or DEFAULT_LOCALE).strip().lower().replace('-', '_')
    if normalized in _CATALOGS:
        return normalized
    # 'en_us' -> 'en'
    return normalized.split('_', 1)[0]


def get_translator(locale: str):
    """
    Retorna a função de tradução do locale pedido.
    Chaves ausentes voltam como a própria chave; placeholders usam str.format.
    """
    if not _CATALOGS:
        _load_catalogs()

    messages = _CATALOGS.get(_normalize(locale), _CATALOGS.get(DEFAULT_LOCALE, {}))

    def translate(key: str, **kwargs) -> str:
        message = messages.get(key, key)
        try:
            return message.format(**kwargs)
        except (KeyError, IndexError):
            return message

    return translate


def get_default_translator():
    return get_translator(DEFAULT_LOCALE)
