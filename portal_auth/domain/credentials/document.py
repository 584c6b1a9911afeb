# caminho: portal_auth/domain/credentials/document.py
# Funções:
# - classify_document(): classifica DNI/RUC digitado e devolve mensagem legível
# - is_document_valid(): atalho booleano usado pelo fluxo de login

from __future__ import annotations

import re
from dataclasses import dataclass

from portal_auth.config.constants import DNI_LENGTH, RUC_LENGTH
from portal_auth.domain.sessions.enums import DOCUMENT_KINDS_ACCEPTED
from portal_auth.shared.i18n import get_default_translator

_NON_DIGITS = re.compile(r'\D')


@dataclass(slots=True, frozen=True)
class DocumentClassification:
    kind: str
    digits: str
    message: str

    @property
    def is_valid(self) -> bool:
        return self.kind in DOCUMENT_KINDS_ACCEPTED


def clean_digits(raw: str | None) -> str:
    return _NON_DIGITS.sub('', raw or '')


def classify_document(raw: str | None, translator=None) -> DocumentClassification:
    """Classifica o documento após remover tudo que não for dígito.

    Função total: qualquer entrada recebe exatamente um dos tipos
    DNI, RUC, INCOMPLETE ou INVALID.
    """
    _ = translator or get_default_translator()
    digits = clean_digits(raw)
    length = len(digits)

    if length == DNI_LENGTH:
        return DocumentClassification('DNI', digits, _('DOCUMENT_DNI_VALID'))
    if length == RUC_LENGTH:
        return DocumentClassification('RUC', digits, _('DOCUMENT_RUC_VALID'))
    if length < DNI_LENGTH:
        return DocumentClassification('INCOMPLETE', digits, _('DOCUMENT_TOO_SHORT'))
    if length == DNI_LENGTH + 1:
        return DocumentClassification('INVALID', digits, _('DOCUMENT_NINE_DIGITS'))
    if length < RUC_LENGTH:
        return DocumentClassification('INVALID', digits, _('DOCUMENT_TEN_DIGITS'))
    return DocumentClassification('INVALID', digits, _('DOCUMENT_TOO_LONG'))


def is_document_valid(raw: str | None) -> bool:
    return len(clean_digits(raw)) in (DNI_LENGTH, RUC_LENGTH)
